"""Exact money values tagged with an asset.

``MoneyValue`` wraps a :class:`decimal.Decimal` token amount and the
:class:`Asset` it is denominated in. Arithmetic never goes through binary
floating point; values are never rounded implicitly.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import (
    MAX_EMAX,
    MAX_PREC,
    MIN_EMIN,
    Context,
    Decimal,
    DecimalException,
    Inexact,
    InvalidOperation,
    Overflow,
    localcontext,
)

from .errors import AssetMismatchError

WAVES_ASSET_ID = "WAVES"

# Node amounts are signed 64-bit integers of minor units.
MAX_COINS = 2**63 - 1

# Sums and rescaling of token amounts must never round; any rounding traps.
EXACT_CONTEXT = Context(
    prec=MAX_PREC,
    Emax=MAX_EMAX,
    Emin=MIN_EMIN,
    traps=[InvalidOperation, Overflow, Inexact],
)


@dataclass(frozen=True, slots=True)
class Asset:
    """An asset identifier with its display name and decimal precision."""

    id: str
    name: str
    precision: int

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Asset.id must be non-empty")
        if isinstance(self.precision, bool) or not isinstance(self.precision, int):
            raise ValueError("Asset.precision must be an integer")
        if not 0 <= self.precision <= 18:
            raise ValueError("Asset.precision must be within [0, 18]")

    @property
    def max_tokens(self) -> Decimal:
        """Largest amount, in tokens, that fits the node's coin range."""

        return Decimal(MAX_COINS).scaleb(-self.precision, EXACT_CONTEXT)


WAVES = Asset(id=WAVES_ASSET_ID, name="WAVES", precision=8)


@dataclass(frozen=True, slots=True)
class MoneyValue:
    """An exact token amount in a given asset.

    Equality is value equality on ``(asset.id, tokens)`` so ``1`` and ``1.00``
    compare equal. Ordering and addition require the same asset id.
    """

    asset: Asset
    tokens: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.tokens, Decimal):
            object.__setattr__(self, "tokens", Decimal(str(self.tokens)))
        if not self.tokens.is_finite():
            raise ValueError("MoneyValue.tokens must be finite")

    # ---- construction ------------------------------------------------------

    @classmethod
    def zero(cls, asset: Asset) -> MoneyValue:
        return cls(asset, Decimal(0))

    @classmethod
    def from_coins(cls, asset: Asset, coins: int) -> MoneyValue:
        """Build a value from integer minor units (``tokens * 10**precision``)."""

        return cls(asset, Decimal(coins).scaleb(-asset.precision, EXACT_CONTEXT))

    def clone_with_tokens(self, tokens: Decimal | int | str) -> MoneyValue:
        return MoneyValue(self.asset, tokens if isinstance(tokens, Decimal) else Decimal(str(tokens)))

    # ---- arithmetic / comparison ------------------------------------------

    def _check_asset(self, other: MoneyValue) -> None:
        if self.asset.id != other.asset.id:
            raise AssetMismatchError(self.asset.id, other.asset.id)

    def __add__(self, other: MoneyValue) -> MoneyValue:
        if not isinstance(other, MoneyValue):
            return NotImplemented
        self._check_asset(other)
        return MoneyValue(self.asset, EXACT_CONTEXT.add(self.tokens, other.tokens))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MoneyValue):
            return NotImplemented
        return self.asset.id == other.asset.id and self.tokens == other.tokens

    def __hash__(self) -> int:
        return hash((self.asset.id, self.tokens))

    def __lt__(self, other: MoneyValue) -> bool:
        self._check_asset(other)
        return self.tokens < other.tokens

    def __le__(self, other: MoneyValue) -> bool:
        self._check_asset(other)
        return self.tokens <= other.tokens

    def __gt__(self, other: MoneyValue) -> bool:
        self._check_asset(other)
        return self.tokens > other.tokens

    def __ge__(self, other: MoneyValue) -> bool:
        self._check_asset(other)
        return self.tokens >= other.tokens

    def is_positive(self) -> bool:
        return self.tokens > 0

    # ---- conversion --------------------------------------------------------

    def to_coins(self) -> int:
        """Return the amount in integer minor units.

        Raises ``ValueError`` when the amount has more fractional digits than
        the asset precision allows or does not fit the node's coin range.
        """

        try:
            scaled = self.tokens.scaleb(self.asset.precision, EXACT_CONTEXT)
        except DecimalException as exc:
            raise ValueError(f"{self.tokens} cannot be expressed in coins of {self.asset.id}") from exc
        if scaled.copy_abs() > MAX_COINS:
            raise ValueError(f"{self.tokens} is out of range for {self.asset.id}")
        if scaled != scaled.to_integral_value():
            raise ValueError(
                f"{self.tokens} has more than {self.asset.precision} decimals for {self.asset.id}"
            )
        return int(scaled)

    def format(self, *, decimal_separator: str = ",", group_separator: str = " ") -> str:
        """Canonical display string: grouped integer part, no trailing zeros.

        ``Decimal("1234.5600")`` renders as ``"1 234,56"`` with the defaults.
        """

        text = format(self.tokens.normalize(EXACT_CONTEXT), "f") if self.tokens else "0"
        sign = ""
        if text.startswith("-"):
            sign, text = "-", text[1:]
        whole, _, frac = text.partition(".")
        frac = frac.rstrip("0")
        groups: list[str] = []
        while len(whole) > 3:
            groups.insert(0, whole[-3:])
            whole = whole[:-3]
        groups.insert(0, whole)
        out = sign + group_separator.join(groups)
        if frac:
            out += decimal_separator + frac
        return out

    def __str__(self) -> str:
        return f"{self.format(decimal_separator='.', group_separator='')} {self.asset.name}"


def group_money(values: Iterable[MoneyValue | None]) -> dict[str, MoneyValue]:
    """Sum values per asset id, skipping ``None`` entries."""

    grouped: dict[str, MoneyValue] = {}
    for value in values:
        if value is None:
            continue
        current = grouped.get(value.asset.id)
        grouped[value.asset.id] = value if current is None else current + value
    return grouped


__all__ = [
    "Asset",
    "EXACT_CONTEXT",
    "MAX_COINS",
    "MoneyValue",
    "WAVES",
    "WAVES_ASSET_ID",
    "group_money",
]
