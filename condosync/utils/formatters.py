"""
Condo Sync - Formatters
Validação e formatação de CPF e nomes
"""
import re

# Preposições mantidas em minúsculo em nomes próprios
NAME_PARTICLES = {"de", "da", "do", "das", "dos", "e"}


def only_digits(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def is_valid_cpf(cpf: str) -> bool:
    """
    Valida CPF pelos dois dígitos verificadores (módulo 11).
    Aceita entrada com ou sem máscara. Sequências repetidas
    (000.000.000-00, 111...) são sempre inválidas.
    """
    digits = only_digits(cpf)

    if len(digits) != 11 or digits == digits[0] * 11:
        return False

    numbers = [int(d) for d in digits]

    for position in (9, 10):
        total = sum(numbers[i] * (position + 1 - i) for i in range(position))
        check = (total * 10) % 11
        if check == 10:
            check = 0
        if check != numbers[position]:
            return False

    return True


def format_name(name: str) -> str:
    """Capitaliza cada palavra, exceto preposições (joão da silva -> João da Silva)"""
    words = (name or "").strip().lower().split()
    formatted = []
    for index, word in enumerate(words):
        if index > 0 and word in NAME_PARTICLES:
            formatted.append(word)
        else:
            formatted.append(word[:1].upper() + word[1:])
    return " ".join(formatted)
