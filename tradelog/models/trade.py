"""CompletedTrade: a reconciled round trip, entry and exit both known."""

from datetime import date

from pydantic import BaseModel, Field

from tradelog.utils.constants import AssetClass, Side


class CompletedTrade(BaseModel):
    trade_date: date
    symbol: str
    asset_class: AssetClass
    direction: Side  # Buy = long, Sell = short
    entry_price: float = Field(gt=0)
    exit_price: float = Field(gt=0)
    size: float = Field(gt=0)
    fees: float = Field(default=0.0, ge=0)
    time_opened: str | None = None
    time_closed: str | None = None
    stop_loss: float | None = None

    # Copied from the source row when present; never inferred
    session: str | None = None
    strategy: str | None = None
    timeframe: str | None = None
    notes: str | None = None

    # Source rows of the opening and closing legs
    entry_row: int | None = None
    exit_row: int | None = None

    @property
    def is_long(self) -> bool:
        return self.direction == Side.BUY
