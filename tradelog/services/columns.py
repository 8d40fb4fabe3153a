"""Column resolution: map arbitrary broker headers onto canonical fields.

For each field, aliases are tried in order and the first header cell that
equals or contains the alias wins. No scoring, no fuzzy distance.
"""

import logging
from dataclasses import dataclass

from tradelog.errors import MissingColumnError
from tradelog.utils.constants import (
    BROKER_FORMATS,
    COLUMN_ALIASES,
    REQUIRED_FIELDS,
    CanonicalField,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnMap:
    """Resolved column index per canonical field (None = unresolved)."""
    indices: dict[CanonicalField, int | None]

    def __getitem__(self, field: CanonicalField) -> int | None:
        return self.indices.get(field)

    def has(self, field: CanonicalField) -> bool:
        return self.indices.get(field) is not None

    def cell(self, cells: list[str], field: CanonicalField) -> str | None:
        """Trimmed cell for ``field``, or None if unresolved, out of range or blank."""
        index = self.indices.get(field)
        if index is None or index >= len(cells):
            return None
        value = cells[index].replace('"', "").strip()
        return value or None


def find_column(header: list[str], aliases: tuple[str, ...]) -> int | None:
    for alias in aliases:
        for index, name in enumerate(header):
            if name == alias or alias in name:
                return index
    return None


def resolve_columns(header: list[str]) -> ColumnMap:
    """Resolve every canonical field against a lower-cased header.

    Raises:
        MissingColumnError: trade_date or symbol could not be resolved.
    """
    header = [h.strip().lower() for h in header]
    indices = {field: find_column(header, aliases) for field, aliases in COLUMN_ALIASES.items()}

    for field in REQUIRED_FIELDS:
        if indices[field] is None:
            logger.warning(f"Required column '{field.value}' not found in header: {header}")
            raise MissingColumnError(field.value, header)

    resolved = {f.value: header[i] for f, i in indices.items() if i is not None}
    logger.debug(f"Resolved columns: {resolved}")
    return ColumnMap(indices=indices)


def detect_broker_format(header: list[str]) -> str | None:
    """Name the broker/platform whose export this header looks like, if any."""
    text = " ".join(header).lower()
    for name, keyword_sets in BROKER_FORMATS:
        if all(any(keyword in text for keyword in options) for options in keyword_sets):
            return name
    return None
