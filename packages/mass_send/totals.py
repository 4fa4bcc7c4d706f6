"""Running total and fee estimation for a transfer list."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_DOWN

from .collaborators import FeeOracle
from .errors import FeeEstimationError, MassSendError
from .logging_setup import get_logger
from .models import MASS_TRANSFER_TYPE, DraftTransfer, MassTransferDraft, TransferEntry
from .money import EXACT_CONTEXT, MAX_COINS, WAVES_ASSET_ID, MoneyValue

_logger = get_logger("mass_send.totals")


def compute_total(transfers: Sequence[TransferEntry], zero: MoneyValue) -> MoneyValue:
    """Exact sum of all amounts; ``zero`` when the list is empty."""

    if not transfers:
        return zero
    total = transfers[0].amount
    for entry in transfers[1:]:
        total = total + entry.amount
    return total


def _wire_asset_id(asset_id: str) -> str | None:
    return None if asset_id == WAVES_ASSET_ID else asset_id


def _coins(amount: MoneyValue, *, exact: bool) -> int:
    if exact:
        return amount.to_coins()
    # Fee estimation only needs the shape; clamp to something the node accepts.
    scaled = amount.tokens.scaleb(amount.asset.precision, EXACT_CONTEXT)
    if scaled.copy_abs() > MAX_COINS:
        return MAX_COINS if scaled > 0 else 0
    return max(0, int(scaled.to_integral_value(rounding=ROUND_DOWN)))


def build_draft(
    transfers: Sequence[TransferEntry],
    *,
    asset_id: str,
    fee: MoneyValue | None = None,
    sender: str | None = None,
    sender_public_key: str | None = None,
    exact: bool = True,
) -> MassTransferDraft:
    """Build the unsigned mass-transfer shape for the current transfer list.

    Amounts are converted to integer minor units; a fractional amount finer
    than the asset precision raises ``ValueError`` unless ``exact`` is false,
    in which case amounts are truncated to whole coins (negatives to zero).
    """

    return MassTransferDraft(
        type=MASS_TRANSFER_TYPE,
        sender=sender,
        sender_public_key=sender_public_key,
        asset_id=_wire_asset_id(asset_id),
        transfers=tuple(
            DraftTransfer(recipient=t.recipient, amount=_coins(t.amount, exact=exact)) for t in transfers
        ),
        fee=fee.to_coins() if fee is not None else None,
        fee_asset_id=_wire_asset_id(fee.asset.id) if fee is not None else None,
    )


async def request_fee(oracle: FeeOracle, draft: MassTransferDraft) -> MoneyValue:
    """Ask ``oracle`` for the fee of ``draft``.

    Oracle failures surface as :class:`FeeEstimationError`; no retry is made.
    """

    try:
        return await oracle.estimate_fee(MASS_TRANSFER_TYPE, draft)
    except FeeEstimationError:
        raise
    except (MassSendError, ValueError, OSError) as exc:
        _logger.warning("fee estimation failed for %d transfers: %s", len(draft.transfers), exc)
        raise FeeEstimationError(str(exc)) from exc


__all__ = ["build_draft", "compute_total", "request_fee"]
