"""
Condo Sync - gestão de condomínio com sincronização em tempo real
"""
__version__ = "1.0.0"
