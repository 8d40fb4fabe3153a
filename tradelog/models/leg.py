"""RawLeg: one decoded buy or sell line from a broker export."""

from datetime import date

from pydantic import BaseModel, Field, field_validator

from tradelog.utils.constants import DEFAULT_ASSET_CLASS, AssetClass, Side


class RawLeg(BaseModel):
    trade_date: date
    symbol: str = Field(min_length=1)
    asset_class: AssetClass = DEFAULT_ASSET_CLASS
    side: Side = Side.BUY
    price: float = Field(gt=0)
    size: float = Field(gt=0)
    fees: float = Field(default=0.0, ge=0)
    time: str | None = None  # HH:MM
    source_row: int = Field(ge=1)

    # Optional cells carried from the same row
    exit_price: float | None = Field(default=None, gt=0)
    stop_loss: float | None = None
    time_closed: str | None = None
    session: str | None = None
    strategy: str | None = None
    timeframe: str | None = None
    notes: str | None = None

    model_config = {"frozen": True}

    @field_validator("symbol")
    @classmethod
    def _normalize_symbol(cls, value: str) -> str:
        text = value.strip().upper()
        if not text:
            raise ValueError("must not be empty")
        return text
