"""Public interface for the ``mass_send`` package.

This module re-exports the reconciliation functions, the editing session and
the public models as the stable import surface. There is no runtime logic
here, only symbol re-exports.
"""

from .aggregate import aggregate_rows, transfers_equal
from .amounts import parse_amount
from .config import Settings
from .csv_codec import decode_rows, encode_transfers
from .errors import (
    AddressValidationUnavailable,
    AmountParseError,
    AssetMismatchError,
    FeeEstimationError,
    FileReadError,
    InvalidBatchError,
    MassSendError,
    RecipientValidationError,
    TooManyTransfersError,
)
from .models import (
    MASS_TRANSFER_TYPE,
    AggregationResult,
    ErrorKind,
    MassTransferDraft,
    ParseError,
    SessionSnapshot,
    TransferEntry,
    TransferList,
)
from .money import WAVES, Asset, MoneyValue, group_money
from .pipeline import derive_state, reconcile_text
from .session import MassSendSession
from .totals import compute_total
from .validation import check_balance, validate_recipients

__all__ = [
    # Reconciliation
    "parse_amount",
    "decode_rows",
    "encode_transfers",
    "aggregate_rows",
    "transfers_equal",
    "reconcile_text",
    "derive_state",
    "compute_total",
    "check_balance",
    "validate_recipients",
    "MassSendSession",
    "Settings",
    # Models / types
    "Asset",
    "MoneyValue",
    "WAVES",
    "group_money",
    "TransferEntry",
    "TransferList",
    "ErrorKind",
    "ParseError",
    "AggregationResult",
    "SessionSnapshot",
    "MassTransferDraft",
    "MASS_TRANSFER_TYPE",
    # Errors
    "MassSendError",
    "AmountParseError",
    "AssetMismatchError",
    "RecipientValidationError",
    "AddressValidationUnavailable",
    "FileReadError",
    "FeeEstimationError",
    "TooManyTransfersError",
    "InvalidBatchError",
]
