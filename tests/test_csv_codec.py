import textwrap
from decimal import Decimal

from mass_send.csv_codec import clean_cell, decode_rows, encode_transfers
from mass_send.models import TransferEntry
from mass_send.money import Asset, MoneyValue

TKN = Asset(id="TKN", name="Token", precision=8)


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n").rstrip()


def test_decode_skips_blank_and_short_rows():
    rows = decode_rows("A,1\n\nB\n   \nC,2")
    assert rows == [["A", "1"], ["C", "2"]]


def test_decode_keeps_quoted_comma_amount_as_one_cell():
    rows = decode_rows('addr1, "1 234,56"\naddr2,"7,5"')
    assert rows == [["addr1", "1234,56"], ["addr2", "7,5"]]


def test_decode_strips_quotes_and_whitespace_from_every_cell():
    rows = decode_rows('" addr 1 " , " 3 "  , extra')
    assert rows == [["addr1", "3", "extra"]]


def test_decode_handles_crlf_and_trailing_newline():
    assert decode_rows("A,1\r\nB,2\r\n") == [["A", "1"], ["B", "2"]]


def test_decode_never_raises_on_garbage():
    garbage = '"unterminated,1\n,,,\n\x00,\x00\n"a""b",2'
    rows = decode_rows(garbage)
    assert isinstance(rows, list)
    assert all(len(r) >= 2 for r in rows)


def test_decode_empty_text():
    assert decode_rows("") == []


def test_clean_cell():
    assert clean_cell(' "3 000" ') == "3000"


def test_encode_one_line_per_transfer_without_trailing_newline():
    transfers = [
        TransferEntry("addr1", MoneyValue(TKN, Decimal("1234.5"))),
        TransferEntry("addr2", MoneyValue(TKN, Decimal("3"))),
    ]
    assert encode_transfers(transfers) == _dedent(
        """
        addr1, "1 234,5"
        addr2, "3"
        """
    )


def test_encode_with_dot_separator():
    transfers = [TransferEntry("a", MoneyValue(TKN, Decimal("0.00012")))]
    assert encode_transfers(transfers, decimal_separator=".", group_separator="") == 'a, "0.00012"'


def test_encode_empty_list():
    assert encode_transfers([]) == ""


def test_decode_skips_line_with_oversized_field_and_keeps_later_rows():
    text = "A,1\nX," + "9" * 200_000 + "\nB,2"
    assert decode_rows(text) == [["A", "1"], ["B", "2"]]
