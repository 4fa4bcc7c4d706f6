"""CSV tokenizer and canonical encoder for recipient lists.

Decoding uses the stdlib :mod:`csv` module (quoted fields with embedded
commas, doubled quotes) with ``skipinitialspace`` so ``addr, "1 234,56"``
keeps the quoted amount as a single cell. Each cell is cleaned by removing
all whitespace and all double quotes before use.

The canonical text form is one ``recipient, "amount"`` line per transfer,
joined by ``\\n`` with no trailing newline.
"""

from __future__ import annotations

import csv
import re
from collections.abc import Iterable
from io import StringIO

from .logging_setup import get_logger
from .models import TransferEntry

_logger = get_logger("mass_send.csv_codec")

_CELL_JUNK_RE = re.compile(r'[\s"]+')


def clean_cell(cell: str) -> str:
    return _CELL_JUNK_RE.sub("", cell)


def decode_rows(text: str) -> list[list[str]]:
    """Split ``text`` into cleaned rows of at least two cells.

    Blank lines and rows with fewer than two cells are dropped. Never raises
    on malformed input: a line the tokenizer rejects (an oversized field, for
    instance) is skipped and decoding resumes on the next line.
    """

    rows: list[list[str]] = []
    if not text:
        return rows

    with StringIO(text, newline="") as f:
        reader = csv.reader(f, skipinitialspace=True, strict=False)
        while True:
            try:
                raw = next(reader)
            except StopIteration:
                break
            except csv.Error as exc:
                _logger.warning("skipping csv line %d: %s", reader.line_num, exc)
                continue
            if len(raw) < 2:
                continue
            rows.append([clean_cell(cell) for cell in raw])
    return rows


def encode_transfers(
    transfers: Iterable[TransferEntry],
    *,
    decimal_separator: str = ",",
    group_separator: str = " ",
) -> str:
    """Render transfers as canonical CSV text."""

    return "\n".join(
        f'{t.recipient}, "{t.amount.format(decimal_separator=decimal_separator, group_separator=group_separator)}"'
        for t in transfers
    )


__all__ = ["clean_cell", "decode_rows", "encode_transfers"]
