"""Loose decimal amount parsing.

Users type amounts with spaces as digit-group separators and a comma as the
decimal separator (``"1 234,56"``). :func:`parse_amount` normalizes that into
an exact :class:`~decimal.Decimal` or raises :class:`AmountParseError`.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from .errors import AmountParseError

_WHITESPACE_RE = re.compile(r"\s+")
# Decimal() alone would also accept "NaN", "Infinity" and "1_000".
_NUMERAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def clean_amount_text(raw: str) -> str:
    """Drop all whitespace and turn the first comma into a decimal point."""

    return _WHITESPACE_RE.sub("", raw).replace(",", ".", 1)


def parse_amount(raw: str) -> Decimal:
    """Parse ``raw`` as an exact decimal number.

    >>> parse_amount("1 234,56")
    Decimal('1234.56')
    """

    cleaned = clean_amount_text(raw)
    if not _NUMERAL_RE.fullmatch(cleaned):
        raise AmountParseError(raw)
    try:
        return Decimal(cleaned)
    except InvalidOperation as exc:  # pragma: no cover - regex already guards
        raise AmountParseError(raw) from exc


__all__ = ["clean_amount_text", "parse_amount"]
