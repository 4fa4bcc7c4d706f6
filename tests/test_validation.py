from decimal import Decimal

import pytest

from mass_send.config import Settings
from mass_send.fees import MassTransferFeeOracle
from mass_send.models import MASS_TRANSFER_TYPE, ErrorKind, MassTransferDraft, ParseError, TransferEntry
from mass_send.money import WAVES, MoneyValue
from mass_send.totals import build_draft, compute_total
from mass_send.validation import (
    amount_errors,
    check_balance,
    is_valid_csv,
    merge_errors,
    validate_recipients,
)

from tests.helpers.stubs import TOKEN, StubValidator, money

# ---- balance check -------------------------------------------------------------


def test_balance_covers_total_plus_fee():
    assert check_balance(money(7), money(2), money(10)) is True


def test_balance_short_of_total_plus_fee():
    assert check_balance(money(9), money(2), money(10)) is False


def test_balance_exactly_equal_is_enough():
    assert check_balance(money(8), money(2), money(10)) is True


def test_fee_in_other_asset_does_not_count():
    fee = MoneyValue(WAVES, Decimal("0.003"))
    assert check_balance(money(10), fee, money(10)) is True


def test_missing_total_and_fee_is_satisfied():
    assert check_balance(None, None, money(0)) is True


def test_is_valid_csv_requires_positive_total():
    assert is_valid_csv(True, money(0)) is False
    assert is_valid_csv(True, None) is False
    assert is_valid_csv(False, money(5)) is False
    assert is_valid_csv(True, money("0.01")) is True


# ---- amount representability ------------------------------------------------------


def test_amount_errors_flag_negative_and_too_precise_amounts():
    transfers = [
        TransferEntry("ok", money("1.25")),
        TransferEntry("neg", money("-1")),
        TransferEntry("fine", money("1.001")),
    ]
    assert amount_errors(transfers) == [
        ParseError("neg", ErrorKind.AMOUNT),
        ParseError("fine", ErrorKind.AMOUNT),
    ]


def test_merge_errors_dedupes_on_recipient_and_kind():
    a = ParseError("A", ErrorKind.AMOUNT)
    r = ParseError("A", ErrorKind.RECIPIENT)
    assert merge_errors([a], [a, r], [r]) == (a, r)


# ---- recipient check --------------------------------------------------------------


@pytest.mark.asyncio
async def test_validate_recipients_reports_each_invalid_address():
    transfers = [TransferEntry(r, money(1)) for r in ("good", "bad1", "good2", "bad2")]
    validator = StubValidator(invalid={"bad1", "bad2"})
    errors = await validate_recipients(transfers, validator)
    assert errors == [
        ParseError("bad1", ErrorKind.RECIPIENT),
        ParseError("bad2", ErrorKind.RECIPIENT),
    ]
    assert sorted(validator.calls) == ["bad1", "bad2", "good", "good2"]


@pytest.mark.asyncio
async def test_unresolved_addresses_count_as_invalid():
    transfers = [TransferEntry("a", money(1)), TransferEntry("b", money(1))]
    validator = StubValidator(unavailable={"b"})
    errors = await validate_recipients(transfers, validator)
    assert errors == [ParseError("b", ErrorKind.RECIPIENT)]


@pytest.mark.asyncio
async def test_validate_empty_list_makes_no_calls():
    validator = StubValidator()
    assert await validate_recipients([], validator) == []
    assert validator.calls == []


# ---- totals / fee schedule / draft ---------------------------------------------------


def test_compute_total():
    zero = MoneyValue.zero(TOKEN)
    assert compute_total([], zero) is zero
    transfers = [TransferEntry("a", money("0.1")), TransferEntry("b", money("0.2"))]
    assert compute_total(transfers, zero) == money("0.3")


@pytest.mark.parametrize("count, expected", [(0, "0.001"), (1, "0.002"), (2, "0.002"), (3, "0.003"), (100, "0.051")])
def test_offline_fee_schedule_rounds_up_to_step(count, expected):
    oracle = MassTransferFeeOracle(WAVES)
    assert oracle.fee_for(count) == MoneyValue(WAVES, Decimal(expected))


@pytest.mark.asyncio
async def test_offline_fee_oracle_uses_settings_and_draft_size():
    settings = Settings(base_fee=Decimal("0.01"), per_transfer_fee=Decimal("0.01"), fee_step=Decimal(0))
    oracle = MassTransferFeeOracle.from_settings(settings, WAVES)
    draft = build_draft([TransferEntry("a", money(1)), TransferEntry("b", money(2))], asset_id=TOKEN.id)
    fee = await oracle.estimate_fee(MASS_TRANSFER_TYPE, draft)
    assert fee == MoneyValue(WAVES, Decimal("0.03"))


def test_build_draft_converts_to_coins_and_native_asset_ids():
    fee = MoneyValue(WAVES, Decimal("0.002"))
    draft = build_draft(
        [TransferEntry("a", money("1.5")), TransferEntry("b", money("2"))],
        asset_id=TOKEN.id,
        fee=fee,
        sender="3Psender",
    )
    assert isinstance(draft, MassTransferDraft)
    assert [(t.recipient, t.amount) for t in draft.transfers] == [("a", 150), ("b", 200)]
    assert draft.fee == 200_000
    assert draft.to_node_json() == {
        "type": 11,
        "sender": "3Psender",
        "assetId": "TOKEN",
        "transfers": [{"recipient": "a", "amount": 150}, {"recipient": "b", "amount": 200}],
        "fee": 200_000,
        "attachment": "",
    }


def test_build_draft_rejects_sub_coin_amounts_unless_inexact():
    transfers = [TransferEntry("a", money("1.234")), TransferEntry("b", money("-5"))]
    with pytest.raises(ValueError):
        build_draft(transfers, asset_id=TOKEN.id)
    draft = build_draft(transfers, asset_id=TOKEN.id, exact=False)
    assert [t.amount for t in draft.transfers] == [123, 0]
