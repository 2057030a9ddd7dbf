"""Client code generation and ordering (e.g. F1, M32)"""

from typing import Iterable, List, Tuple
from gestornet.domain.models import Client
from gestornet.domain.exceptions import InvalidCodeFormatError, ValidationError


def parse_code(code: str) -> Tuple[str, int]:
    """
    Split a client code into (letter, number).

    Raises:
        InvalidCodeFormatError: code is not one letter followed by ASCII digits
    """
    suffix = code[1:]
    if not code or not (suffix.isascii() and suffix.isdigit()):
        raise InvalidCodeFormatError(f"Invalid client code: {code!r}")
    return code[0], int(suffix)


def generate_next_code(existing_codes: Iterable[str], letter: str) -> str:
    """
    Next free code for a letter: max(existing numbers for that letter) + 1.

    Example:
        ["F1", "F3", "M2"], "F" → "F4"
        [], "A" → "A1"
    """
    if not letter:
        raise ValidationError("Code letter is required")
    letter = letter[0].upper()

    numbers = [
        parse_code(code)[1]
        for code in existing_codes
        if code[:1].upper() == letter
    ]
    max_number = max(numbers) if numbers else 0
    return f"{letter}{max_number + 1}"


def sort_clients_by_code(clients: Iterable[Client]) -> List[Client]:
    """Order clients by code letter, then numerically (F2 before F10). Returns a new list."""
    return sorted(clients, key=lambda c: parse_code(c.code))
