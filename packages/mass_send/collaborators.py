"""Interfaces of the external collaborators used by an editing session.

Everything outside the reconciliation core (reading files, checking
addresses, estimating fees, looking up balances, building the transaction)
is injected through these protocols. Small local implementations are
provided for the CLI and tests; node-backed ones live in
:mod:`mass_send.node_client`.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from os import PathLike
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from .errors import FileReadError
from .logging_setup import get_logger
from .models import MassTransferDraft
from .money import Asset, MoneyValue

_logger = get_logger("mass_send.collaborators")


@runtime_checkable
class FileReader(Protocol):
    async def read(self, handle: Any) -> str: ...


@runtime_checkable
class AddressValidator(Protocol):
    async def validate(self, address: str) -> bool: ...


@runtime_checkable
class FeeOracle(Protocol):
    async def estimate_fee(self, tx_type: int, draft: MassTransferDraft) -> MoneyValue: ...


@runtime_checkable
class BalanceLookup(Protocol):
    def available(self, asset_id: str) -> MoneyValue: ...

    def zero(self, asset_id: str) -> MoneyValue: ...

    def asset(self, asset_id: str) -> Asset: ...


@runtime_checkable
class TransactionBuilder(Protocol):
    def build(self, draft: MassTransferDraft) -> Any: ...


# ---------------------------------------------------------------------------
# Local implementations
# ---------------------------------------------------------------------------


class PathFileReader:
    """Read a local text file off the event loop."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    async def read(self, handle: str | PathLike[str]) -> str:
        path = Path(handle)
        try:
            return await asyncio.to_thread(path.read_text, encoding=self._encoding)
        except (OSError, UnicodeDecodeError) as exc:
            _logger.warning("failed to read import file %s: %s", path, exc)
            raise FileReadError(f"cannot read {path}: {exc}") from exc


class StaticBalances:
    """Balance lookup backed by a fixed set of money values, one per asset."""

    def __init__(self, balances: Iterable[MoneyValue]) -> None:
        self._balances: dict[str, MoneyValue] = {b.asset.id: b for b in balances}

    @classmethod
    def from_mapping(cls, assets: Mapping[Asset, Any]) -> StaticBalances:
        return cls(MoneyValue(asset, amount) for asset, amount in assets.items())

    def available(self, asset_id: str) -> MoneyValue:
        try:
            return self._balances[asset_id]
        except KeyError:
            raise KeyError(f"no balance for asset {asset_id!r}") from None

    def zero(self, asset_id: str) -> MoneyValue:
        return MoneyValue.zero(self.available(asset_id).asset)

    def asset(self, asset_id: str) -> Asset:
        return self.available(asset_id).asset


class DraftCollector:
    """Transaction builder that keeps the drafts it was given."""

    def __init__(self) -> None:
        self.drafts: list[MassTransferDraft] = []

    def build(self, draft: MassTransferDraft) -> MassTransferDraft:
        self.drafts.append(draft)
        return draft


__all__ = [
    "FileReader",
    "AddressValidator",
    "FeeOracle",
    "BalanceLookup",
    "TransactionBuilder",
    "PathFileReader",
    "StaticBalances",
    "DraftCollector",
]
