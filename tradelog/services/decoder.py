"""Row decoding: turn one row of raw cells into a RawLeg.

Each cell type has its own normalizer (dates, times, numbers, sides, asset
classes). Normalizers return None for values they cannot read; ``decode_row``
decides which of those are fatal for the row and which fall back to a default.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date

import pandas as pd
from pydantic import ValidationError

from tradelog.config import Settings, settings as default_settings
from tradelog.errors import RowDecodeError
from tradelog.models.leg import RawLeg
from tradelog.models.result import Diagnostic
from tradelog.services.columns import ColumnMap
from tradelog.utils.constants import (
    ASSET_CLASS_KEYWORDS,
    CURRENCY_SYMBOLS,
    DEFAULT_SIDE,
    SIDE_EXACT,
    SIDE_KEYWORDS,
    TWO_DIGIT_YEAR_PIVOT,
    AssetClass,
    CanonicalField as F,
    Side,
)

logger = logging.getLogger(__name__)

_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_US_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2}|\d{4})$")
_EU_DATE_RE = re.compile(r"^(\d{1,2})[-.](\d{1,2})[-.](\d{4})$")
_DATE_TOKEN_SPLIT_RE = re.compile(r"[\s,]+")

_HH_MM_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")
_EMBEDDED_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})(?::\d{2})?")

_NUMBER_NOISE_RE = re.compile(f"[{re.escape(CURRENCY_SYMBOLS)},\\s]")


# ---------------------------------------------------------------------------
# Cell normalizers
# ---------------------------------------------------------------------------

def _safe_date(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def normalize_date(value: str | None, year_pivot: int = TWO_DIGIT_YEAR_PIVOT) -> str | None:
    """Normalize a broker date cell to ``YYYY-MM-DD``.

    Tried in order: ISO, US (MM/DD/YY[YY]), EU (DD-MM-YYYY or DD.MM.YYYY) on
    the leading date token, then a generic parse of the whole text.
    """
    if not value:
        return None
    text = value.replace('"', "").strip()
    if not text:
        return None
    token = _DATE_TOKEN_SPLIT_RE.split(text, maxsplit=1)[0]

    match = _ISO_DATE_RE.match(token)
    if match:
        year, month, day = (int(g) for g in match.groups())
        iso = _safe_date(year, month, day)
        if iso:
            return iso

    match = _US_DATE_RE.match(token)
    if match:
        month, day, year_text = match.groups()
        year = int(year_text)
        if len(year_text) == 2:
            year += 2000 if year <= year_pivot else 1900
        iso = _safe_date(year, int(month), int(day))
        if iso:
            return iso

    match = _EU_DATE_RE.match(token)
    if match:
        day, month, year = (int(g) for g in match.groups())
        iso = _safe_date(year, month, day)
        if iso:
            return iso

    try:
        parsed = pd.to_datetime(text)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.date().isoformat()


def normalize_time(value: str | None) -> str | None:
    """Extract ``HH:MM`` from a time or timestamp cell; None if there is none."""
    if not value:
        return None
    text = value.strip()
    match = _HH_MM_RE.match(text) or _EMBEDDED_TIME_RE.search(text)
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def parse_number(value: str | None) -> float | None:
    """Parse a numeric cell, ignoring currency symbols and thousands separators."""
    if not value:
        return None
    cleaned = _NUMBER_NOISE_RE.sub("", value)
    if not cleaned:
        return None
    try:
        number = float(cleaned)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def normalize_side(value: str | None) -> Side | None:
    if not value:
        return None
    lower = value.strip().lower()
    for keyword, side in SIDE_KEYWORDS:
        if keyword in lower:
            return side
    if lower in SIDE_EXACT:
        return SIDE_EXACT[lower]
    if lower.startswith("b"):
        return Side.BUY
    if lower.startswith("s"):
        return Side.SELL
    return None


def normalize_asset_class(value: str | None) -> AssetClass | None:
    if not value:
        return None
    lower = value.strip().lower()
    for keyword, asset_class in ASSET_CLASS_KEYWORDS:
        if keyword in lower:
            return asset_class
    return None


# ---------------------------------------------------------------------------
# Row decoding
# ---------------------------------------------------------------------------

@dataclass
class DecodedRow:
    leg: RawLeg
    warnings: list[str] = field(default_factory=list)


def decode_row(
    cells: list[str],
    columns: ColumnMap,
    row: int,
    config: Settings | None = None,
) -> DecodedRow:
    """Decode one data row.

    Args:
        cells: Raw cell strings for the row.
        columns: Resolved header mapping.
        row: 1-based line number, used in messages.
        config: Decoder defaults; the module settings when omitted.

    Raises:
        RowDecodeError: missing/invalid date, missing symbol, missing/invalid price.
    """
    config = config or default_settings
    warnings: list[str] = []

    date_raw = columns.cell(cells, F.TRADE_DATE)
    if not date_raw:
        raise RowDecodeError(row, "Missing trade date")
    trade_date = normalize_date(date_raw, config.two_digit_year_pivot)
    if not trade_date:
        raise RowDecodeError(row, f'Invalid date format "{date_raw}"')

    symbol = columns.cell(cells, F.SYMBOL)
    if not symbol:
        raise RowDecodeError(row, "Missing symbol")
    symbol = symbol.upper()

    side = DEFAULT_SIDE
    if columns.has(F.SIDE):
        side_raw = columns.cell(cells, F.SIDE)
        parsed_side = normalize_side(side_raw)
        side = parsed_side or DEFAULT_SIDE
        if side_raw and parsed_side is None:
            warnings.append(f'Row {row}: Unrecognized side "{side_raw}", assuming {side.value}')

    size = parse_number(columns.cell(cells, F.SIZE))
    if size is not None and size < 0:
        size = abs(size)
        side = Side.SELL
    if not size:
        size = config.default_size

    price_raw = columns.cell(cells, F.PRICE)
    if not price_raw:
        raise RowDecodeError(row, "Missing price")
    price = parse_number(price_raw)
    if price is None:
        raise RowDecodeError(row, f'Invalid price "{price_raw}"')
    if price <= 0:
        raise RowDecodeError(row, f'Price must be positive, got "{price_raw}"')

    fees = parse_number(columns.cell(cells, F.FEES))
    fees = abs(fees) if fees is not None else 0.0

    if columns.has(F.TIME):
        time = normalize_time(columns.cell(cells, F.TIME))
    else:
        time = normalize_time(date_raw)

    asset_raw = columns.cell(cells, F.ASSET_CLASS)
    asset_class = normalize_asset_class(asset_raw)
    if asset_class is None:
        asset_class = config.default_asset_class
        if asset_raw:
            warnings.append(
                f'Row {row}: Unrecognized asset class "{asset_raw}", defaulting to {asset_class.value}'
            )

    exit_price = parse_number(columns.cell(cells, F.EXIT_PRICE))
    if exit_price is not None and exit_price <= 0:
        exit_price = None

    try:
        leg = RawLeg(
            trade_date=trade_date,
            symbol=symbol,
            asset_class=asset_class,
            side=side,
            price=price,
            size=size,
            fees=fees,
            time=time,
            source_row=row,
            exit_price=exit_price,
            stop_loss=parse_number(columns.cell(cells, F.STOP_LOSS)),
            time_closed=normalize_time(columns.cell(cells, F.TIME_CLOSED)),
            session=columns.cell(cells, F.SESSION),
            strategy=columns.cell(cells, F.STRATEGY),
            timeframe=columns.cell(cells, F.TIMEFRAME),
            notes=columns.cell(cells, F.NOTES),
        )
    except ValidationError as e:
        raise RowDecodeError(row, f"Invalid values ({e.error_count()} field errors)") from e

    return DecodedRow(leg=leg, warnings=warnings)


def decode_rows(
    rows: list[tuple[int, list[str]]],
    columns: ColumnMap,
    config: Settings | None = None,
) -> tuple[list[RawLeg], list[Diagnostic]]:
    """Decode every row, collecting row errors and warnings instead of stopping."""
    legs: list[RawLeg] = []
    diagnostics: list[Diagnostic] = []

    for row, cells in rows:
        try:
            decoded = decode_row(cells, columns, row, config)
        except RowDecodeError as e:
            logger.debug(f"Rejected row: {e}")
            diagnostics.append(Diagnostic.error(str(e), row=e.row))
            continue
        legs.append(decoded.leg)
        diagnostics.extend(Diagnostic.warning(w, row=row) for w in decoded.warnings)

    return legs, diagnostics
