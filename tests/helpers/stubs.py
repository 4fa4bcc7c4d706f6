"""Test doubles for the session collaborators.

The stubs record their calls and can be held open with an ``asyncio.Event``
so tests can interleave edits with in-flight fee or validation requests.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from decimal import Decimal
from typing import Any

from mass_send.errors import AddressValidationUnavailable, FeeEstimationError, FileReadError
from mass_send.models import MassTransferDraft
from mass_send.money import Asset, MoneyValue

TOKEN = Asset(id="TOKEN", name="TKN", precision=2)


def money(amount: str | int, asset: Asset = TOKEN) -> MoneyValue:
    return MoneyValue(asset, Decimal(str(amount)))


class StubValidator:
    """Address validator accepting addresses not listed in ``invalid``.

    Addresses in ``unavailable`` make ``validate`` raise as a node outage would.
    """

    def __init__(
        self,
        invalid: Iterable[str] = (),
        *,
        unavailable: Iterable[str] = (),
        gate: asyncio.Event | None = None,
    ) -> None:
        self.invalid = set(invalid)
        self.unavailable = set(unavailable)
        self.gate = gate
        self.calls: list[str] = []

    async def validate(self, address: str) -> bool:
        self.calls.append(address)
        if self.gate is not None:
            await self.gate.wait()
        if address in self.unavailable:
            raise AddressValidationUnavailable("node down")
        return address not in self.invalid


class StubFeeOracle:
    """Fee oracle returning ``fee_fn(transfer_count)``.

    ``gates`` are consumed one per call; a call waits on its gate before
    answering, which lets a test release responses out of order.
    """

    def __init__(
        self,
        fee_fn: Callable[[int], MoneyValue] | None = None,
        *,
        fail: bool = False,
        gates: list[asyncio.Event] | None = None,
    ) -> None:
        self.fee_fn = fee_fn or (lambda n: money("1"))
        self.fail = fail
        self.gates = list(gates or [])
        self.calls: list[tuple[int, MassTransferDraft]] = []

    async def estimate_fee(self, tx_type: int, draft: MassTransferDraft) -> MoneyValue:
        self.calls.append((tx_type, draft))
        if self.gates:
            await self.gates.pop(0).wait()
        if self.fail:
            raise FeeEstimationError("oracle unavailable")
        return self.fee_fn(len(draft.transfers))


class StubReader:
    def __init__(self, contents: dict[Any, str]) -> None:
        self.contents = contents

    async def read(self, handle: Any) -> str:
        try:
            return self.contents[handle]
        except KeyError:
            raise FileReadError(f"cannot read {handle!r}") from None
