"""Parse output: trades plus categorized diagnostics."""

from enum import Enum

from pydantic import BaseModel, Field

from tradelog.models.trade import CompletedTrade


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class PipelineMode(str, Enum):
    TRANSACTION_LOG = "transaction_log"  # one row per leg, FIFO-paired
    PAIRED = "paired"  # each row already carries entry and exit


class Diagnostic(BaseModel):
    severity: Severity
    message: str
    row: int | None = None

    model_config = {"frozen": True}

    @classmethod
    def error(cls, message: str, row: int | None = None) -> "Diagnostic":
        return cls(severity=Severity.ERROR, message=message, row=row)

    @classmethod
    def warning(cls, message: str, row: int | None = None) -> "Diagnostic":
        return cls(severity=Severity.WARNING, message=message, row=row)

    def __str__(self) -> str:
        return self.message


class ParseResult(BaseModel):
    trades: list[CompletedTrade] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    mode: PipelineMode | None = None
    broker_format: str | None = None

    @property
    def errors(self) -> list[str]:
        return [d.message for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[str]:
        return [d.message for d in self.diagnostics if d.severity == Severity.WARNING]

    @property
    def fatal(self) -> bool:
        """True when the parse aborted before any row was decoded."""
        return self.mode is None and bool(self.errors)
