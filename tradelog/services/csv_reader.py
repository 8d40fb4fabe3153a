"""Tokenize pasted or uploaded CSV/TSV text into a header and numbered rows.

Broker exports are comma- or tab-separated, may carry a BOM, quote fields that
contain the delimiter, and are frequently ragged. Each physical line is
tokenized on its own with pandas, so a malformed line (an unclosed quote, say)
only costs that line. Physical line numbers are kept so diagnostics can point
at the line the user sees. Quoted fields cannot span lines.
"""

import io
import logging
from dataclasses import dataclass, field

import pandas as pd

from tradelog.errors import EmptyInputError, MalformedLineError

logger = logging.getLogger(__name__)

_BOM = "\ufeff"


@dataclass
class TabularText:
    """Header cells (lower-cased) plus data rows keyed by 1-based line number."""
    header: list[str]
    rows: list[tuple[int, list[str]]] = field(default_factory=list)
    delimiter: str = ","
    # Lines that could not be tokenized; reported as row errors
    malformed: list[MalformedLineError] = field(default_factory=list)


def detect_delimiter(line: str) -> str:
    """Tab if the line contains one, else comma. Decided per line."""
    return "\t" if "\t" in line else ","


def split_line(line: str, row: int) -> list[str]:
    """Tokenize one physical line into trimmed cells.

    Raises:
        MalformedLineError: unbalanced quoting.
    """
    # An odd quote count means a quoted field never closes on this line
    if line.count('"') % 2:
        raise MalformedLineError(row, line)
    try:
        frame = pd.read_csv(
            io.StringIO(line),
            sep=detect_delimiter(line),
            header=None,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            quotechar='"',
            doublequote=True,
            engine="python",
        ).fillna("")
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError as e:
        raise MalformedLineError(row, line) from e
    if frame.empty:
        return []
    return [str(v).strip() for v in frame.iloc[0].tolist()]


def read_table(text: str) -> TabularText:
    """Split raw text into header and data rows.

    Rows wider than the header keep their leading cells; shorter rows are
    padded with empty cells. Blank lines are skipped but still counted.

    Raises:
        EmptyInputError: no header, or a header without any data rows.
        MalformedLineError: the header line itself cannot be tokenized.
    """
    text = (text or "").lstrip(_BOM).strip()
    if not text:
        raise EmptyInputError()

    lines = text.splitlines()
    header = [_clean_header(cell) for cell in split_line(lines[0], 1)]
    width = len(header)

    table = TabularText(header=header, delimiter=detect_delimiter(lines[0]))
    for line_number, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        try:
            cells = split_line(line, line_number)
        except MalformedLineError as e:
            logger.debug(f"Line {line_number} could not be tokenized: {e}")
            table.malformed.append(e)
            continue
        if not any(cells):
            continue
        if len(cells) > width:
            logger.debug(f"Line {line_number} wider than header ({len(cells)} > {width} cells), extra cells dropped")
        table.rows.append((line_number, (cells + [""] * width)[:width]))

    if not table.rows and not table.malformed:
        raise EmptyInputError()

    logger.debug(
        f"Read {len(table.rows)} data rows ({len(table.malformed)} malformed), {width} columns"
    )
    return table


def _clean_header(cell: str) -> str:
    return str(cell).replace('"', "").strip().lower()
