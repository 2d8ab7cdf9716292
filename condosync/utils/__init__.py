from .formatters import is_valid_cpf, format_name, only_digits

__all__ = [
    "is_valid_cpf",
    "format_name",
    "only_digits"
]
