"""Offline fee schedule for mass transfers.

The network charges a base fee plus a fixed amount per transfer, rounded up
to the fee step: with the defaults a batch of 3 costs
``0.001 + 3 * 0.0005 = 0.0025``, rounded up to ``0.003`` WAVES.
"""

from __future__ import annotations

from decimal import ROUND_CEILING, Decimal

from .config import Settings
from .errors import FeeEstimationError
from .models import MASS_TRANSFER_TYPE, MassTransferDraft
from .money import Asset, MoneyValue


class MassTransferFeeOracle:
    """Fee oracle computing ``base + per_transfer * n`` locally."""

    def __init__(
        self,
        fee_asset: Asset,
        *,
        base_fee: Decimal = Decimal("0.001"),
        per_transfer_fee: Decimal = Decimal("0.0005"),
        fee_step: Decimal = Decimal("0.001"),
    ) -> None:
        self._asset = fee_asset
        self._base = base_fee
        self._per_transfer = per_transfer_fee
        self._step = fee_step

    @classmethod
    def from_settings(cls, settings: Settings, fee_asset: Asset) -> MassTransferFeeOracle:
        return cls(
            fee_asset,
            base_fee=settings.base_fee,
            per_transfer_fee=settings.per_transfer_fee,
            fee_step=settings.fee_step,
        )

    def fee_for(self, transfer_count: int) -> MoneyValue:
        raw = self._base + self._per_transfer * transfer_count
        if self._step > 0:
            raw = (raw / self._step).to_integral_value(rounding=ROUND_CEILING) * self._step
        return MoneyValue(self._asset, raw)

    async def estimate_fee(self, tx_type: int, draft: MassTransferDraft) -> MoneyValue:
        if tx_type != MASS_TRANSFER_TYPE:
            raise FeeEstimationError(f"unsupported transaction type {tx_type}")
        return self.fee_for(len(draft.transfers))


__all__ = ["MassTransferFeeOracle"]
