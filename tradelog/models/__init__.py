"""Engine data models."""

from tradelog.models.leg import RawLeg
from tradelog.models.trade import CompletedTrade
from tradelog.models.result import Diagnostic, ParseResult, PipelineMode, Severity

__all__ = [
    "RawLeg",
    "CompletedTrade",
    "Diagnostic",
    "ParseResult",
    "PipelineMode",
    "Severity",
]
