"""Group decoded CSV rows into one transfer per recipient.

Rows are grouped by recipient in first-seen order and their amounts summed
exactly. A malformed amount does not stop the batch: it is recorded as an
``amount`` error for that recipient and counted as zero. So is an amount
beyond the node's coin range for the asset.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from .amounts import parse_amount
from .errors import AmountParseError
from .logging_setup import get_logger
from .models import AggregationResult, ErrorKind, ParseError, TransferEntry, TransferList
from .money import EXACT_CONTEXT, MoneyValue

_logger = get_logger("mass_send.aggregate")


def group_amounts_by_recipient(rows: Iterable[Sequence[str]]) -> dict[str, list[str]]:
    """Map each recipient to its raw amount strings, preserving first-seen order."""

    grouped: dict[str, list[str]] = {}
    for row in rows:
        if len(row) < 2:
            continue
        recipient, amount_text = row[0], row[1]
        if not (recipient and amount_text):
            continue
        grouped.setdefault(recipient, []).append(amount_text)
    return grouped


def aggregate_rows(rows: Iterable[Sequence[str]], zero: MoneyValue) -> AggregationResult:
    """Build the canonical transfer list from decoded rows.

    ``zero`` is the zero value of the session asset; every resulting amount
    is denominated in that asset.
    """

    errors: list[ParseError] = []
    transfers: list[TransferEntry] = []
    limit = zero.asset.max_tokens

    for recipient, amount_texts in group_amounts_by_recipient(rows).items():
        total = Decimal(0)
        failed = False
        for text in amount_texts:
            try:
                value = parse_amount(text)
            except AmountParseError:
                failed = True
                continue
            if value.copy_abs() > limit:
                _logger.debug("amount for %s out of range: %s", recipient, text[:32])
                failed = True
                continue
            total = EXACT_CONTEXT.add(total, value)
        if failed:
            errors.append(ParseError(recipient, ErrorKind.AMOUNT))
        transfers.append(TransferEntry(recipient, zero.clone_with_tokens(total)))

    if errors:
        _logger.debug("aggregated %d transfers with %d amount errors", len(transfers), len(errors))
    return AggregationResult(transfers=tuple(transfers), errors=tuple(errors))


def transfers_equal(a: Sequence[TransferEntry], b: Sequence[TransferEntry]) -> bool:
    """Element-wise equality on recipient and exact amount value."""

    return len(a) == len(b) and all(
        x.recipient == y.recipient and x.amount == y.amount for x, y in zip(a, b, strict=True)
    )


def transfer_list(entries: Iterable[TransferEntry]) -> TransferList:
    """Normalize an iterable of entries into a transfer list with unique recipients.

    Later duplicates are merged into the first occurrence so the uniqueness
    invariant also holds for pre-seeded lists.
    """

    merged: dict[str, TransferEntry] = {}
    for entry in entries:
        prev = merged.get(entry.recipient)
        merged[entry.recipient] = (
            entry if prev is None else TransferEntry(entry.recipient, prev.amount + entry.amount)
        )
    return tuple(merged.values())


__all__ = ["aggregate_rows", "group_amounts_by_recipient", "transfer_list", "transfers_equal"]
