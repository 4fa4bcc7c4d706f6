"""Data models and type aliases for ``mass_send``.

Domain records (transfer entries, per-recipient errors, session snapshots)
are frozen dataclasses. The draft transaction handed to the fee oracle and
the transaction builder is a pydantic model because it is serialized to JSON
for the node API.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .money import MoneyValue

MASS_TRANSFER_TYPE: int = 11
"""Transaction type code for a mass transfer."""


# ---------------------------------------------------------------------------
# Transfer list
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TransferEntry:
    """One (recipient, amount) pair of the canonical batch."""

    recipient: str
    amount: MoneyValue


TransferList: TypeAlias = tuple[TransferEntry, ...]
"""Ordered transfers; order is first-seen order while parsing. Recipients are unique."""


class ErrorKind(StrEnum):
    AMOUNT = "amount"
    RECIPIENT = "recipient"


@dataclass(frozen=True, slots=True)
class ParseError:
    """A per-recipient problem shown next to the CSV input.

    ``kind`` is ``amount`` for malformed numerals and ``recipient`` for
    addresses rejected (or left unresolved) by the address validator.
    """

    recipient: str
    kind: ErrorKind


@dataclass(frozen=True, slots=True)
class AggregationResult:
    transfers: TransferList
    errors: tuple[ParseError, ...] = ()


@dataclass(frozen=True, slots=True)
class DerivedState:
    """Values recomputed whenever the transfer list changes.

    ``fee_outdated`` tells the caller to request a fresh fee estimate;
    ``csv_text`` is either the untouched user text (already in sync) or the
    canonical re-encoding.
    """

    total_amount: MoneyValue
    csv_text: str
    transfers_changed: bool
    fee_outdated: bool


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Read-only view of an editing session for the UI layer."""

    transfers: TransferList
    csv_text: str
    total_amount: MoneyValue
    fee: MoneyValue | None
    errors: tuple[ParseError, ...]
    is_valid_amounts: bool
    is_valid_csv: bool
    exceeds_max_transfers: bool
    max_transfers_count: int
    import_error: str | None = None
    pending: int = 0

    @property
    def can_proceed(self) -> bool:
        return self.is_valid_csv and not self.exceeds_max_transfers and not self.errors


# ---------------------------------------------------------------------------
# Draft transaction (wire shape)
# ---------------------------------------------------------------------------


class DraftTransfer(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid", frozen=True)

    recipient: str
    amount: int = Field(ge=0)


class MassTransferDraft(BaseModel):
    """Unsigned mass-transfer transaction shape.

    Amounts and the fee are integer minor units of their assets. ``asset_id``
    and ``fee_asset_id`` are ``None`` for the native asset, matching the node
    JSON convention.
    """

    model_config = ConfigDict(strict=True, extra="forbid", frozen=True, populate_by_name=True)

    type: int = MASS_TRANSFER_TYPE
    sender: str | None = None
    sender_public_key: str | None = Field(default=None, alias="senderPublicKey")
    asset_id: str | None = Field(default=None, alias="assetId")
    transfers: tuple[DraftTransfer, ...] = ()
    fee: int | None = Field(default=None, ge=0)
    fee_asset_id: str | None = Field(default=None, alias="feeAssetId")
    attachment: str = ""

    @field_validator("type")
    @classmethod
    def _is_mass_transfer(cls, v: int) -> int:
        if v != MASS_TRANSFER_TYPE:
            raise ValueError(f"type must be {MASS_TRANSFER_TYPE} (mass transfer)")
        return v

    def to_node_json(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


__all__ = [
    "MASS_TRANSFER_TYPE",
    "TransferEntry",
    "TransferList",
    "ErrorKind",
    "ParseError",
    "AggregationResult",
    "DerivedState",
    "SessionSnapshot",
    "DraftTransfer",
    "MassTransferDraft",
]
