"""Exception taxonomy for ``mass_send``.

Row-level problems (bad amounts, rejected addresses) are recovered locally and
recorded as :class:`~mass_send.models.ParseError` values; the exceptions here
only cross module boundaries where a caller has to decide what to do.
"""

from __future__ import annotations


class MassSendError(Exception):
    """Base class for all package errors."""


class AmountParseError(MassSendError, ValueError):
    """Raised when a string is not a decimal numeral."""

    def __init__(self, raw: str) -> None:
        super().__init__(f"invalid amount: {raw!r}")
        self.raw = raw


class AssetMismatchError(MassSendError, ValueError):
    """Raised when money in two different assets is added or compared."""

    def __init__(self, left: str, right: str) -> None:
        super().__init__(f"asset mismatch: {left!r} vs {right!r}")
        self.left = left
        self.right = right


class InvalidBatchError(MassSendError):
    """The batch is not valid for submission."""


class RecipientValidationError(InvalidBatchError):
    """The batch holds an address rejected by the address validator."""

    def __init__(self, recipient: str) -> None:
        super().__init__(f"invalid recipient address: {recipient!r}")
        self.recipient = recipient


class AddressValidationUnavailable(MassSendError):
    """The address validator could not produce an answer."""


class FileReadError(MassSendError):
    """An import source could not be read."""


class FeeEstimationError(MassSendError):
    """The fee oracle failed to estimate a fee."""


class TooManyTransfersError(MassSendError):
    """The batch holds more transfers than the configured maximum."""

    def __init__(self, count: int, limit: int) -> None:
        super().__init__(f"{count} transfers exceed the limit of {limit}")
        self.count = count
        self.limit = limit


__all__ = [
    "MassSendError",
    "AmountParseError",
    "AssetMismatchError",
    "InvalidBatchError",
    "RecipientValidationError",
    "AddressValidationUnavailable",
    "FileReadError",
    "FeeEstimationError",
    "TooManyTransfersError",
]
