"""Runtime settings for ``mass_send``.

Settings are a frozen pydantic model so values read from the environment are
coerced and validated in one place. ``Settings.from_env`` reads ``MASS_SEND_*``
variables; the CLI loads a local ``.env`` (``python-dotenv``) before calling it.

Recognized variables:

- ``MASS_SEND_MAX_TRANSFERS``: advisory batch size limit (default 100)
- ``MASS_SEND_DECIMAL_SEPARATOR`` / ``MASS_SEND_GROUP_SEPARATOR``: canonical
  amount formatting (defaults ``","`` and ``" "``)
- ``MASS_SEND_NODE_URL``: base URL of the node REST API used for address
  validation and fee estimation (unset means offline)
- ``MASS_SEND_REQUEST_TIMEOUT``: HTTP timeout in seconds
- ``MASS_SEND_FEE_ASSET_ID``, ``MASS_SEND_BASE_FEE``,
  ``MASS_SEND_PER_TRANSFER_FEE``, ``MASS_SEND_FEE_STEP``: offline fee schedule
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

_ENV_PREFIX = "MASS_SEND_"

_ENV_FIELDS: dict[str, str] = {
    "MAX_TRANSFERS": "max_transfers_count",
    "DECIMAL_SEPARATOR": "decimal_separator",
    "GROUP_SEPARATOR": "group_separator",
    "NODE_URL": "node_url",
    "REQUEST_TIMEOUT": "request_timeout",
    "FEE_ASSET_ID": "fee_asset_id",
    "BASE_FEE": "base_fee",
    "PER_TRANSFER_FEE": "per_transfer_fee",
    "FEE_STEP": "fee_step",
}


class Settings(BaseModel):
    """Validated configuration shared by the session, adapters and CLI."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_transfers_count: int = Field(default=100, gt=0)
    decimal_separator: str = ","
    group_separator: str = " "
    node_url: str | None = None
    request_timeout: float = Field(default=10.0, gt=0)
    fee_asset_id: str = "WAVES"
    base_fee: Decimal = Decimal("0.001")
    per_transfer_fee: Decimal = Decimal("0.0005")
    fee_step: Decimal = Decimal("0.001")

    @field_validator("decimal_separator")
    @classmethod
    def _decimal_separator_supported(cls, v: str) -> str:
        # The amount parser only understands "." and a single ",".
        if v not in {".", ","}:
            raise ValueError("decimal_separator must be '.' or ','")
        return v

    @field_validator("group_separator")
    @classmethod
    def _group_separator_is_whitespace(cls, v: str) -> str:
        # Anything but whitespace would not survive the decoder's cell cleanup.
        if v and not v.isspace():
            raise ValueError("group_separator must be empty or whitespace")
        return v

    @field_validator("node_url")
    @classmethod
    def _strip_node_url(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip().rstrip("/")
        return v or None

    @field_validator("base_fee", "per_transfer_fee", "fee_step")
    @classmethod
    def _non_negative_fee(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("fee parameters must be non-negative")
        return v

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides) -> Settings:
        """Build settings from ``MASS_SEND_*`` variables plus explicit overrides.

        Overrides whose value is ``None`` are ignored so CLI options that were
        not given fall through to the environment.
        """

        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for suffix, field in _ENV_FIELDS.items():
            raw = env.get(_ENV_PREFIX + suffix)
            if raw is not None and raw != "":
                values[field] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)


__all__ = ["Settings"]
