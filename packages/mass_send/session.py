"""Editing session for a mass transfer.

A :class:`MassSendSession` owns the transfer list (the state of record) and
the CSV text that mirrors it. Every public mutation runs the synchronous
pipeline to completion first and only then schedules the asynchronous work:

1. text -> decode -> aggregate -> (if the list changed) total, fee request,
   re-encoded text;
2. balance check against the current, possibly stale, fee;
3. background tasks for fee estimation and recipient validation.

Background results are tagged with the generation of the transfer list they
were computed for. A result arriving after the list has changed again is
dropped instead of overwriting newer state. Requests are never cancelled.

Errors shown to the user are always derived from the current state: amount
errors of the last parsed text, amounts the asset cannot represent, and
recipient errors reported for the current generation.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine, Iterable
from typing import Any

from .aggregate import transfer_list
from .collaborators import (
    AddressValidator,
    BalanceLookup,
    FeeOracle,
    FileReader,
    PathFileReader,
    TransactionBuilder,
)
from .config import Settings
from .errors import (
    AssetMismatchError,
    FeeEstimationError,
    FileReadError,
    InvalidBatchError,
    RecipientValidationError,
    TooManyTransfersError,
)
from .logging_setup import get_logger
from .models import ErrorKind, ParseError, SessionSnapshot, TransferEntry, TransferList
from .money import MoneyValue
from .pipeline import CsvFormat, derive_state, reconcile_text
from .totals import build_draft, compute_total, request_fee
from .validation import (
    amount_errors,
    check_balance,
    is_valid_csv,
    merge_errors,
    validate_recipients,
)

_logger = get_logger("mass_send.session")


class MassSendSession:
    """Reconciles user-edited CSV text with the canonical transfer list.

    Parameters
    ----------
    asset_id:
        Asset being sent. Every transfer amount is denominated in it.
    balances:
        Synchronous lookup for available balances and zero values.
    fee_oracle:
        Estimates the fee of the current draft.
    address_validator:
        Optional; without one no recipient errors are ever reported.
    file_reader:
        Reads import sources; defaults to :class:`PathFileReader`.
    transaction_builder:
        Receives the draft on :meth:`proceed`.
    transfers:
        Optional pre-seeded transfer list.
    on_refresh:
        Called with a fresh snapshot whenever a background result changes
        visible state.
    """

    def __init__(
        self,
        *,
        asset_id: str,
        balances: BalanceLookup,
        fee_oracle: FeeOracle,
        address_validator: AddressValidator | None = None,
        file_reader: FileReader | None = None,
        transaction_builder: TransactionBuilder | None = None,
        settings: Settings | None = None,
        transfers: Iterable[TransferEntry] = (),
        sender: str | None = None,
        sender_public_key: str | None = None,
        on_refresh: Callable[[SessionSnapshot], None] | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._asset_id = asset_id
        self._balances = balances
        self._fee_oracle = fee_oracle
        self._validator = address_validator
        self._reader: FileReader = file_reader or PathFileReader()
        self._builder = transaction_builder
        self._sender = sender
        self._sender_public_key = sender_public_key
        self._on_refresh = on_refresh
        self._fmt = CsvFormat(
            decimal_separator=self._settings.decimal_separator,
            group_separator=self._settings.group_separator,
        )

        self._zero: MoneyValue = balances.zero(asset_id)
        seeded = transfer_list(transfers)
        for entry in seeded:
            if entry.amount.asset.id != asset_id:
                raise AssetMismatchError(asset_id, entry.amount.asset.id)

        self._transfers: TransferList = seeded
        self._csv_text: str = ""
        self._parse_errors: tuple[ParseError, ...] = ()
        self._recipient_errors: tuple[ParseError, ...] = ()
        self._total: MoneyValue = compute_total(seeded, self._zero)
        self._fee: MoneyValue | None = None
        self._is_valid_amounts = True
        self._import_error: str | None = None
        self._generation = 0
        self._started = False
        self._tasks: set[asyncio.Task[None]] = set()

    # ---- read-only surface -------------------------------------------------

    @property
    def transfers(self) -> TransferList:
        return self._transfers

    @property
    def csv_text(self) -> str:
        return self._csv_text

    @property
    def total_amount(self) -> MoneyValue:
        return self._total

    @property
    def fee(self) -> MoneyValue | None:
        return self._fee

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def max_transfers_count(self) -> int:
        return self._settings.max_transfers_count

    @property
    def errors(self) -> tuple[ParseError, ...]:
        return merge_errors(
            self._parse_errors,
            amount_errors(self._transfers),
            self._recipient_errors,
        )

    @property
    def is_valid_amounts(self) -> bool:
        return self._is_valid_amounts

    @property
    def is_valid_csv(self) -> bool:
        return is_valid_csv(self._is_valid_amounts, self._total)

    @property
    def exceeds_max_transfers(self) -> bool:
        return len(self._transfers) > self._settings.max_transfers_count

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            transfers=self._transfers,
            csv_text=self._csv_text,
            total_amount=self._total,
            fee=self._fee,
            errors=self.errors,
            is_valid_amounts=self._is_valid_amounts,
            is_valid_csv=self.is_valid_csv,
            exceeds_max_transfers=self.exceeds_max_transfers,
            max_transfers_count=self._settings.max_transfers_count,
            import_error=self._import_error,
            pending=len(self._tasks),
        )

    # ---- mutations ---------------------------------------------------------

    async def start(self) -> SessionSnapshot:
        """Run the first update for the (possibly pre-seeded) list."""

        if not self._started:
            self._started = True
            self._apply_transfers(None, self._transfers)
            self._validate_amounts()
        return self.snapshot()

    async def set_csv_text(self, text: str) -> SessionSnapshot:
        """Accept edited CSV text and reconcile it with the transfer list."""

        await self.start()
        self._process_text(text)
        return self.snapshot()

    async def import_file(self, handle: Any) -> SessionSnapshot:
        """Read an import source and feed its content through the pipeline.

        A read failure is recorded as ``import_error`` on the snapshot; the
        current state is left as it was.
        """

        await self.start()
        try:
            content = await self._reader.read(handle)
        except FileReadError as exc:
            self._import_error = str(exc)
            _logger.warning("import failed: %s", exc)
            return self.snapshot()
        self._import_error = None
        self._process_text(content)
        return self.snapshot()

    async def clear(self) -> SessionSnapshot:
        """Drop every transfer."""

        await self.start()
        self._parse_errors = ()
        self._csv_text = ""
        previous = self._transfers
        if previous:
            self._apply_transfers(previous, ())
        self._validate_amounts()
        return self.snapshot()

    async def settle(self) -> SessionSnapshot:
        """Wait until no background fee or validation request is in flight."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks))
        return self.snapshot()

    def proceed(self) -> Any:
        """Hand the batch to the transaction builder.

        Raises :class:`TooManyTransfersError` above ``max_transfers_count`` and
        :class:`InvalidBatchError` (or its :class:`RecipientValidationError`
        subclass) when the batch may not be submitted.
        """

        if self._builder is None:
            raise InvalidBatchError("no transaction builder configured")
        if self.exceeds_max_transfers:
            raise TooManyTransfersError(len(self._transfers), self._settings.max_transfers_count)
        errors = self.errors
        bad_recipients = [e.recipient for e in errors if e.kind is ErrorKind.RECIPIENT]
        if bad_recipients:
            raise RecipientValidationError(bad_recipients[0])
        if errors:
            raise InvalidBatchError(f"{len(errors)} transfers have invalid amounts")
        if not self.is_valid_csv:
            raise InvalidBatchError("total is zero or exceeds the available balance")
        if self._fee is None:
            raise InvalidBatchError("fee has not been estimated yet")

        draft = build_draft(
            self._transfers,
            asset_id=self._asset_id,
            fee=self._fee,
            sender=self._sender,
            sender_public_key=self._sender_public_key,
        )
        _logger.info("proceeding with %d transfers, total %s", len(draft.transfers), self._total)
        return self._builder.build(draft)

    # ---- pipeline ----------------------------------------------------------

    def _process_text(self, text: str) -> None:
        self._csv_text = text
        result = reconcile_text(text, self._transfers, self._zero)
        self._parse_errors = result.errors
        if result.changed:
            self._apply_transfers(self._transfers, result.transfers)
        self._validate_amounts()

    def _apply_transfers(self, previous: TransferList | None, current: TransferList) -> None:
        derived = derive_state(
            previous,
            current,
            zero=self._zero,
            csv_text=self._csv_text,
            fmt=self._fmt,
        )
        self._transfers = current
        self._total = derived.total_amount
        self._csv_text = derived.csv_text
        if not derived.transfers_changed:
            return

        self._generation += 1
        self._recipient_errors = ()
        if self.exceeds_max_transfers:
            _logger.info(
                "%d transfers exceed the limit of %d",
                len(current),
                self._settings.max_transfers_count,
            )
        if derived.fee_outdated:
            self._spawn(self._refresh_fee(self._generation, current))
        if self._validator is not None and current:
            self._spawn(self._refresh_recipients(self._generation, current, self._validator))

    def _validate_amounts(self) -> None:
        self._is_valid_amounts = check_balance(
            self._total, self._fee, self._balances.available(self._asset_id)
        )

    # ---- background work ---------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _is_current(self, generation: int, what: str) -> bool:
        if generation != self._generation:
            _logger.debug(
                "dropping stale %s result (generation %d, current %d)",
                what,
                generation,
                self._generation,
            )
            return False
        return True

    async def _refresh_fee(self, generation: int, transfers: TransferList) -> None:
        draft = build_draft(
            transfers,
            asset_id=self._asset_id,
            sender=self._sender,
            sender_public_key=self._sender_public_key,
            exact=False,
        )
        try:
            fee = await request_fee(self._fee_oracle, draft)
        except FeeEstimationError as exc:
            _logger.warning("keeping previous fee %s: %s", self._fee, exc)
            return
        if not self._is_current(generation, "fee"):
            return
        self._fee = fee
        self._validate_amounts()
        self._notify()

    async def _refresh_recipients(
        self, generation: int, transfers: TransferList, validator: AddressValidator
    ) -> None:
        errors = await validate_recipients(transfers, validator)
        if not self._is_current(generation, "recipient validation"):
            return
        self._recipient_errors = tuple(errors)
        if errors:
            self._notify()

    def _notify(self) -> None:
        if self._on_refresh is not None:
            self._on_refresh(self.snapshot())


__all__ = ["MassSendSession"]
