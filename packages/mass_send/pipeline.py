"""Synchronous reconciliation between CSV text and the transfer list.

``reconcile_text`` turns text into a candidate transfer list and keeps the
current list (the same object) when nothing changed. ``derive_state`` is the
single update step run after every change to the list: it recomputes the
total, flags the fee as outdated and re-encodes the text, in that order.
Neither function awaits anything, so no partial state is ever observable.
"""

from __future__ import annotations

from dataclasses import dataclass

from .aggregate import aggregate_rows, transfers_equal
from .csv_codec import decode_rows, encode_transfers
from .models import DerivedState, ParseError, TransferList
from .money import MoneyValue
from .totals import compute_total


@dataclass(frozen=True, slots=True)
class CsvFormat:
    decimal_separator: str = ","
    group_separator: str = " "

    def encode(self, transfers: TransferList) -> str:
        return encode_transfers(
            transfers,
            decimal_separator=self.decimal_separator,
            group_separator=self.group_separator,
        )


@dataclass(frozen=True, slots=True)
class Reconciliation:
    transfers: TransferList
    errors: tuple[ParseError, ...]
    changed: bool


def reconcile_text(text: str, current: TransferList, zero: MoneyValue) -> Reconciliation:
    """Parse ``text`` and compare the result with ``current``.

    When the parsed list equals ``current`` element-wise, ``current`` itself is
    returned with ``changed=False``.
    """

    result = aggregate_rows(decode_rows(text), zero)
    if transfers_equal(current, result.transfers):
        return Reconciliation(transfers=current, errors=result.errors, changed=False)
    return Reconciliation(transfers=result.transfers, errors=result.errors, changed=True)


def derive_state(
    previous: TransferList | None,
    current: TransferList,
    *,
    zero: MoneyValue,
    csv_text: str,
    fmt: CsvFormat,
) -> DerivedState:
    """Recompute the values that depend on the transfer list.

    ``previous`` is ``None`` on the first run of a session, which always
    counts as a change. The user's ``csv_text`` is returned unchanged when it
    already encodes ``current``.
    """

    changed = previous is None or (previous is not current and not transfers_equal(previous, current))

    total = compute_total(current, zero)

    canonical = fmt.encode(current)
    text = csv_text if canonical == csv_text else canonical

    return DerivedState(
        total_amount=total,
        csv_text=text,
        transfers_changed=changed,
        fee_outdated=changed,
    )


__all__ = ["CsvFormat", "Reconciliation", "derive_state", "reconcile_text"]
