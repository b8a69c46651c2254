"""Brazilian document helpers (CPF)."""

from __future__ import annotations

import re
from typing import Final

CPF_LENGTH: Final[int] = 11

_NON_DIGITS = re.compile(r"\D")


def normalize_cpf(value: str | None) -> str:
    """Strip punctuation from a CPF: ``"123.456.789-00"`` -> ``"12345678900"``."""
    if not value:
        return ""
    return _NON_DIGITS.sub("", str(value))


def is_valid_cpf_length(value: str | None) -> bool:
    return len(normalize_cpf(value)) == CPF_LENGTH
