"""
Condo Sync - Unique Claim Model
Chave composta única reservada atomicamente junto com uma escrita
(ex: data+área de uma reserva, votação+unidade de um voto)
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Index

from condosync.database import Base


class UniqueClaim(Base):
    """Reserva de chave única ligada a um documento"""
    __tablename__ = "store_claims"

    scope = Column(String(64), primary_key=True)
    key = Column(String(255), primary_key=True)

    # Documento dono da chave (removido junto com ele)
    collection = Column(String(64), nullable=False)
    document_id = Column(String(64), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_store_claims_owner", "collection", "document_id"),
    )
