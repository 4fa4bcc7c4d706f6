# ruff: noqa: I001
"""CLI for the ``mass_send`` package.

This module exposes callable command handlers (``cmd_check``,
``cmd_format``) and a Typer-based console interface. Environment variables
(``MASS_SEND_*``) are loaded from a local ``.env`` using ``python-dotenv``
before delegating to command logic. Reconciliation logic lives in
``mass_send.session`` and related modules.
"""

from __future__ import annotations

import asyncio
import json
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .collaborators import DraftCollector, PathFileReader, StaticBalances
from .config import Settings
from .errors import MassSendError
from .fees import MassTransferFeeOracle
from .logging_setup import configure_logging, get_logger
from .models import SessionSnapshot
from .money import WAVES, WAVES_ASSET_ID, Asset, MoneyValue
from .session import MassSendSession

_logger = get_logger("mass_send.cli")


# ---- Small module-level helpers used by CLI commands -------------------------


def _resolve_asset(asset_id: str, precision: int | None, name: str | None) -> Asset:
    if asset_id == WAVES_ASSET_ID and precision in (None, WAVES.precision):
        return WAVES
    return Asset(id=asset_id, name=name or asset_id, precision=8 if precision is None else precision)


def _build_session(
    settings: Settings,
    asset: Asset,
    balance: Decimal,
    *,
    offline: bool,
    sender: str | None,
) -> MassSendSession:
    """Wire a session with node-backed collaborators when a node URL is set."""

    address_validator = None
    fee_assets = {asset.id: asset}
    fee_oracle = MassTransferFeeOracle.from_settings(
        settings, fee_assets.get(settings.fee_asset_id, WAVES)
    )
    if settings.node_url and not offline:
        # Local import keeps httpx off the import path for offline use.
        from .node_client import NodeAddressValidator, NodeClient, NodeFeeOracle

        node = NodeClient.from_settings(settings)
        address_validator = NodeAddressValidator(node)
        fee_oracle = NodeFeeOracle(node, fee_assets)

    return MassSendSession(
        asset_id=asset.id,
        balances=StaticBalances([MoneyValue(asset, balance)]),
        fee_oracle=fee_oracle,
        address_validator=address_validator,
        file_reader=PathFileReader(),
        transaction_builder=DraftCollector(),
        settings=settings,
        sender=sender,
    )


def _print_report(snapshot: SessionSnapshot, settings: Settings) -> None:
    fmt = {
        "decimal_separator": settings.decimal_separator,
        "group_separator": settings.group_separator,
    }
    if snapshot.csv_text:
        print(snapshot.csv_text)
    print(f"transfers\t{len(snapshot.transfers)}/{snapshot.max_transfers_count}")
    print(f"total\t{snapshot.total_amount.format(**fmt)} {snapshot.total_amount.asset.name}")
    if snapshot.fee is not None:
        print(f"fee\t{snapshot.fee.format(**fmt)} {snapshot.fee.asset.name}")
    else:
        print("fee\tunknown")
    for err in snapshot.errors:
        print(f"error\t{err.recipient}\t{err.kind}")
    print(f"valid\t{'yes' if snapshot.can_proceed else 'no'}")


def cmd_check(
    csv_path: str,
    *,
    asset_id: str = WAVES_ASSET_ID,
    precision: int | None = None,
    asset_name: str | None = None,
    balance: str = "0",
    node_url: str | None = None,
    offline: bool = False,
    sender: str | None = None,
    emit_draft: bool = False,
) -> int:
    """Import a CSV file, settle fee/address checks and print a report.

    Output is the canonical CSV followed by tab-separated ``transfers``,
    ``total``, ``fee``, ``error`` and ``valid`` lines, plus the draft transaction
    as JSON when ``emit_draft`` is set and the batch is valid. Returns ``0`` when the
    batch could proceed, ``1`` otherwise (including unreadable input).
    """

    try:
        settings = Settings.from_env(node_url=node_url)
        asset = _resolve_asset(asset_id, precision, asset_name)
        available = Decimal(balance)
    except (ValueError, InvalidOperation) as e:
        print(f"Error: invalid option: {e}", file=sys.stderr)
        return 1

    async def _run() -> tuple[MassSendSession, SessionSnapshot]:
        session = _build_session(settings, asset, available, offline=offline, sender=sender)
        await session.import_file(csv_path)
        return session, await session.settle()

    try:
        session, snapshot = asyncio.run(_run())
    except MassSendError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if snapshot.import_error:
        print(f"Error: {snapshot.import_error}", file=sys.stderr)
        return 1

    _logger.info(
        "checked %s: %d transfers, %d errors", csv_path, len(snapshot.transfers), len(snapshot.errors)
    )
    _print_report(snapshot, settings)
    if emit_draft and snapshot.can_proceed:
        try:
            draft = session.proceed()
        except MassSendError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(json.dumps(draft.to_node_json(), sort_keys=True))
    return 0 if snapshot.can_proceed else 1


def cmd_format(csv_path: str, *, asset_id: str = WAVES_ASSET_ID, precision: int | None = None) -> int:
    """Print the canonical CSV for ``csv_path`` without any network access."""

    try:
        settings = Settings.from_env()
        asset = _resolve_asset(asset_id, precision, None)
        text = Path(csv_path).read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    from .aggregate import aggregate_rows
    from .csv_codec import decode_rows, encode_transfers

    result = aggregate_rows(decode_rows(text), MoneyValue.zero(asset))
    out = encode_transfers(
        result.transfers,
        decimal_separator=settings.decimal_separator,
        group_separator=settings.group_separator,
    )
    if out:
        print(out)
    for err in result.errors:
        print(f"Error: {err.kind} error for {err.recipient}", file=sys.stderr)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Reconcile mass-transfer recipient CSVs: aggregate duplicates, check "
        "balances, fees and addresses. Loads MASS_SEND_* settings from a local .env."
    ),
)


# Module-level option object to satisfy ruff B008 (no calls in parameter
# defaults). Typer will inspect this when used as a default value below.
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to a recipient CSV (one 'recipient, amount' per line)",
    dir_okay=False,
    file_okay=True,
    exists=False,  # allow non-existent here; the handler reports nice errors
    readable=True,
)


@app.command("check")
def check_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    asset_id: str = typer.Option(WAVES_ASSET_ID, help="Asset to send."),
    precision: int | None = typer.Option(None, help="Asset precision (decimals)."),
    asset_name: str | None = typer.Option(None, help="Display name of the asset."),
    balance: str = typer.Option("0", help="Available balance of the asset, in tokens."),
    node_url: str | None = typer.Option(
        None, help="Node REST API URL (falls back to MASS_SEND_NODE_URL)."
    ),
    offline: bool = typer.Option(
        False, help="Skip address validation and use the local fee schedule."
    ),
    sender: str | None = typer.Option(None, help="Sender address for the draft."),
    emit_draft: bool = typer.Option(
        False, "--emit-draft", help="Print the draft transaction JSON when valid."
    ),
) -> None:
    """Import a CSV and report transfers, total, fee, errors and validity."""

    code = cmd_check(
        str(csv_path),
        asset_id=asset_id,
        precision=precision,
        asset_name=asset_name,
        balance=balance,
        node_url=node_url,
        offline=offline,
        sender=sender,
        emit_draft=emit_draft,
    )
    raise typer.Exit(code)


@app.command("format")
def format_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    asset_id: str = typer.Option(WAVES_ASSET_ID, help="Asset to send."),
    precision: int | None = typer.Option(None, help="Asset precision (decimals)."),
) -> None:
    """Print the canonical CSV for a recipient file."""

    raise typer.Exit(cmd_format(str(csv_path), asset_id=asset_id, precision=precision))


@app.callback()
def _root(
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level (defaults to MASS_SEND_LOG_LEVEL, then INFO)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging to stderr.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level, force=True)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
