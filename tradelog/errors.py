"""Exceptions raised inside the engine.

Only ``PositionSizingError`` reaches callers directly; the parse orchestrator
turns the others into diagnostics.
"""


class TradeImportError(Exception):
    """Base class for engine errors."""


class EmptyInputError(TradeImportError):
    def __init__(self, message: str = "CSV must have at least a header row and one data row"):
        super().__init__(message)


class MissingColumnError(TradeImportError):
    def __init__(self, field: str, headers: list[str]):
        self.field = field
        self.headers = headers
        found = ", ".join(headers) if headers else "(none)"
        super().__init__(f"Missing required column '{field}'. Found columns: {found}")


class RowDecodeError(TradeImportError):
    """A single data row could not be decoded; the row is skipped."""

    def __init__(self, row: int, reason: str):
        self.row = row
        self.reason = reason
        super().__init__(f"Row {row}: {reason}")


class PositionSizingError(TradeImportError, ValueError):
    pass


class MalformedLineError(RowDecodeError):
    """A physical line could not be split into cells (unbalanced quotes)."""

    def __init__(self, row: int, line: str):
        self.line = line
        super().__init__(row, f'Malformed CSV line "{line.strip()}"')
