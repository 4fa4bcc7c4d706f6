"""Balance and recipient checks for a transfer list.

The balance check is synchronous and cheap; the recipient check fans out to
the address validator concurrently and is awaited separately by the session.
A validator that cannot answer leaves the address unresolved, and unresolved
addresses are reported as invalid.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence

from .collaborators import AddressValidator
from .errors import MassSendError
from .logging_setup import get_logger
from .models import ErrorKind, ParseError, TransferEntry
from .money import MoneyValue, group_money

_logger = get_logger("mass_send.validation")


def check_balance(
    total_amount: MoneyValue | None,
    fee: MoneyValue | None,
    available: MoneyValue,
) -> bool:
    """Return whether ``available`` covers the total plus the fee in its asset.

    A fee in another asset does not count against ``available``.
    """

    required = group_money([total_amount, fee]).get(available.asset.id)
    if required is None:
        return True
    return available >= required


def is_valid_csv(is_valid_amounts: bool, total_amount: MoneyValue | None) -> bool:
    return bool(is_valid_amounts and total_amount is not None and total_amount.is_positive())


def amount_errors(transfers: Iterable[TransferEntry]) -> list[ParseError]:
    """Entries whose amount cannot be sent: negative or finer than the asset precision."""

    errors: list[ParseError] = []
    for entry in transfers:
        amount = entry.amount
        if amount.tokens < 0:
            errors.append(ParseError(entry.recipient, ErrorKind.AMOUNT))
            continue
        try:
            amount.to_coins()
        except ValueError:
            errors.append(ParseError(entry.recipient, ErrorKind.AMOUNT))
    return errors


async def _resolve(validator: AddressValidator, address: str) -> bool:
    try:
        return await validator.validate(address)
    except (MassSendError, OSError, ValueError) as exc:
        _logger.warning("address %s left unresolved: %s", address, exc)
        return False


async def validate_recipients(
    transfers: Sequence[TransferEntry], validator: AddressValidator
) -> list[ParseError]:
    """Check every recipient concurrently; return one error per invalid address."""

    if not transfers:
        return []
    results = await asyncio.gather(*(_resolve(validator, t.recipient) for t in transfers))
    errors = [
        ParseError(entry.recipient, ErrorKind.RECIPIENT)
        for entry, ok in zip(transfers, results, strict=True)
        if not ok
    ]
    if errors:
        _logger.info("%d of %d recipients failed validation", len(errors), len(transfers))
    return errors


def merge_errors(*groups: Iterable[ParseError]) -> tuple[ParseError, ...]:
    """Concatenate error groups, dropping repeats of the same (recipient, kind)."""

    seen: set[ParseError] = set()
    merged: list[ParseError] = []
    for group in groups:
        for err in group:
            if err in seen:
                continue
            seen.add(err)
            merged.append(err)
    return tuple(merged)


__all__ = [
    "amount_errors",
    "check_balance",
    "is_valid_csv",
    "merge_errors",
    "validate_recipients",
]
