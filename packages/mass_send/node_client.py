"""Node REST adapters for address validation and fee estimation.

Both adapters talk to a node's public HTTP API with ``httpx.AsyncClient``:

- ``GET  /addresses/validate/{address}`` -> ``{"address": str, "valid": bool}``
- ``POST /transactions/calculateFee``    -> ``{"feeAssetId": str | null, "feeAmount": int}``

Transport and protocol failures are wrapped into the package's domain errors
so the session can apply its own policy (unresolved addresses count as
invalid; a failed fee estimate keeps the previous fee).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from .config import Settings
from .errors import AddressValidationUnavailable, FeeEstimationError
from .logging_setup import get_logger
from .models import MassTransferDraft
from .money import WAVES, Asset, MoneyValue

_logger = get_logger("mass_send.node_client")

DEFAULT_TIMEOUT = 10.0


class NodeClient:
    """Shared HTTP plumbing for the node adapters.

    An ``httpx.AsyncClient`` may be injected (tests pass one with a
    ``MockTransport``); otherwise a short-lived client is opened per request.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.AsyncClient | None = None) -> NodeClient:
        if not settings.node_url:
            raise ValueError("node_url is not configured")
        return cls(settings.node_url, timeout=settings.request_timeout, client=client)

    async def request_json(self, method: str, path: str, *, json: Any = None) -> Any:
        url = f"{self._base_url}{path}"
        if self._client is not None:
            response = await self._client.request(method, url, json=json)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(method, url, json=json)
        response.raise_for_status()
        return response.json()


class NodeAddressValidator:
    """Address validator backed by ``/addresses/validate``."""

    def __init__(self, node: NodeClient) -> None:
        self._node = node

    async def validate(self, address: str) -> bool:
        try:
            data = await self._node.request_json("GET", f"/addresses/validate/{quote(address, safe='')}")
        except httpx.HTTPStatusError as e:
            _logger.warning("address validation HTTP error %s", e.response.status_code)
            raise AddressValidationUnavailable(
                f"node returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            _logger.warning("address validation transport error: %s", e)
            raise AddressValidationUnavailable(f"node request failed: {e}") from e
        except ValueError as e:
            raise AddressValidationUnavailable(f"invalid JSON from node: {e}") from e
        return self._parse_response(data)

    @staticmethod
    def _parse_response(data: Any) -> bool:
        if not isinstance(data, Mapping) or not isinstance(data.get("valid"), bool):
            raise AddressValidationUnavailable(f"unexpected validation response: {data!r}")
        return data["valid"]


class NodeFeeOracle:
    """Fee oracle backed by ``/transactions/calculateFee``.

    ``assets`` resolves a non-native ``feeAssetId`` to its precision; the
    native asset is always known.
    """

    def __init__(self, node: NodeClient, assets: Mapping[str, Asset] | None = None) -> None:
        self._node = node
        self._assets: dict[str, Asset] = {WAVES.id: WAVES, **(assets or {})}

    async def estimate_fee(self, tx_type: int, draft: MassTransferDraft) -> MoneyValue:
        payload = draft.to_node_json()
        payload["type"] = tx_type
        try:
            data = await self._node.request_json("POST", "/transactions/calculateFee", json=payload)
        except httpx.HTTPStatusError as e:
            raise FeeEstimationError(f"node returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FeeEstimationError(f"node request failed: {e}") from e
        except ValueError as e:
            raise FeeEstimationError(f"invalid JSON from node: {e}") from e
        return self._parse_response(data)

    def _parse_response(self, data: Any) -> MoneyValue:
        if not isinstance(data, Mapping):
            raise FeeEstimationError(f"unexpected fee response: {data!r}")
        amount = data.get("feeAmount")
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise FeeEstimationError(f"unexpected feeAmount: {amount!r}")
        asset_id = data.get("feeAssetId") or WAVES.id
        asset = self._assets.get(asset_id)
        if asset is None:
            raise FeeEstimationError(f"unknown fee asset {asset_id!r}")
        return MoneyValue.from_coins(asset, amount)


__all__ = ["NodeClient", "NodeAddressValidator", "NodeFeeOracle"]
