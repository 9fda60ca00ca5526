"""Business identifiers: employee matricules and receipt numbers."""

from __future__ import annotations

import random

MATRICULE_PREFIX = "EMP"
MATRICULE_DIGITS = 5


def generate_matricule(rng: random.Random | None = None) -> str:
    """``EMP`` followed by five random digits, e.g. ``EMP04217``."""
    number = (rng or random).randrange(10 ** MATRICULE_DIGITS)
    return f"{MATRICULE_PREFIX}{number:0{MATRICULE_DIGITS}d}"


def salary_receipt_number(year: int, month: int, matricule: str) -> str:
    return f"SAL-{year}{month:02d}-{matricule}"


def advance_receipt_number(year: int, month: int, advance_id: str) -> str:
    return f"AVA-{year}{month:02d}-{advance_id[-6:]}"
