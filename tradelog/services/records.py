"""Flatten completed trades into insert-ready records for a storage layer."""

from collections.abc import Iterable, Iterator

from tradelog.config import settings
from tradelog.models.trade import CompletedTrade
from tradelog.services.pnl import calculate_pnl, risk_reward_ratio
from tradelog.utils.constants import RATIO_UNAVAILABLE


def to_import_record(trade: CompletedTrade, strategy: str | None = None) -> dict:
    """One JSON-friendly dict per trade, with P&L and derived fields filled in.

    ``strategy`` overrides the strategy carried on the trade when given.
    """
    pnl = calculate_pnl(trade)
    ratio = risk_reward_ratio(trade.entry_price, trade.exit_price, trade.stop_loss)

    return {
        "trade_date": trade.trade_date.isoformat(),
        "day_of_week": trade.trade_date.strftime("%A"),
        "symbol": trade.symbol,
        "pair": trade.symbol,
        "asset_class": trade.asset_class.value,
        "buy_sell": trade.direction.value,
        "entry_price": trade.entry_price,
        "exit_price": trade.exit_price,
        "stop_loss": trade.stop_loss,
        "size": trade.size,
        "fees": trade.fees,
        "time_opened": trade.time_opened,
        "time_closed": trade.time_closed,
        "session": trade.session,
        "strategy_type": strategy or trade.strategy,
        "entry_timeframe": trade.timeframe,
        "notes": trade.notes,
        "pips": pnl.movement,
        "profit": pnl.profit,
        "outcome": pnl.outcome.value,
        "risk_reward_ratio": None if ratio == RATIO_UNAVAILABLE else ratio,
    }


def batched(records: Iterable[dict], size: int | None = None) -> Iterator[list[dict]]:
    """Yield records in chunks of ``size`` (settings.import_batch_size by default)."""
    if size is None:
        size = settings.import_batch_size
    if size < 1:
        raise ValueError(f"Batch size must be positive, got {size}")

    batch: list[dict] = []
    for record in records:
        batch.append(record)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch
