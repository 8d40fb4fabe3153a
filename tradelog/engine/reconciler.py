"""FIFO reconciliation of individual legs into round-trip trades.

Legs are grouped per (symbol, trade_date). Within a group the earliest
unmatched buy is paired with the earliest unmatched sell; whichever of the two
came first opens the trade and sets its direction. Partial fills are not
split: the matched size is the smaller leg and both cursors advance, with the
larger leg's residual reported as a warning.

Pure computation over the legs passed in: no I/O, no state between calls.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date

from tradelog.models.leg import RawLeg
from tradelog.models.result import Diagnostic
from tradelog.models.trade import CompletedTrade
from tradelog.utils.constants import SIZE_DECIMALS, Side

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    trades: list[CompletedTrade] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Ordering helpers
# ---------------------------------------------------------------------------

def chronological(legs: list[RawLeg]) -> list[RawLeg]:
    """Order the legs of one group.

    By time of day with source row breaking ties, but only when every leg
    carries a time; a group with any untimed leg falls back to source row
    order so untimed legs keep their place among the timed ones.
    """
    if all(leg.time for leg in legs):
        return sorted(legs, key=lambda leg: (leg.time, leg.source_row))
    return sorted(legs, key=lambda leg: leg.source_row)


def opens_first(buy: RawLeg, sell: RawLeg) -> bool:
    """True if the buy leg precedes the sell leg.

    Times decide only when both legs carry one and they differ; otherwise the
    source row order does.
    """
    if buy.time and sell.time and buy.time != sell.time:
        return buy.time < sell.time
    return buy.source_row < sell.source_row


def trade_sort_key(trade: CompletedTrade) -> tuple[date, str, int]:
    return (trade.trade_date, trade.time_opened or "", trade.entry_row or 0)


# ---------------------------------------------------------------------------
# Pairing
# ---------------------------------------------------------------------------

def pair_legs(buy: RawLeg, sell: RawLeg) -> CompletedTrade:
    """Build the round trip for one matched buy/sell pair."""
    if opens_first(buy, sell):
        opening, closing, direction = buy, sell, Side.BUY
    else:
        opening, closing, direction = sell, buy, Side.SELL

    return CompletedTrade(
        trade_date=opening.trade_date,
        symbol=opening.symbol,
        asset_class=opening.asset_class,
        direction=direction,
        entry_price=opening.price,
        exit_price=closing.price,
        size=min(buy.size, sell.size),
        fees=opening.fees + closing.fees,
        time_opened=opening.time,
        time_closed=closing.time,
        stop_loss=opening.stop_loss,
        session=opening.session,
        strategy=opening.strategy,
        timeframe=opening.timeframe,
        notes=opening.notes,
        entry_row=opening.source_row,
        exit_row=closing.source_row,
    )


def _unmatched_warning(leg: RawLeg) -> Diagnostic:
    position = "long" if leg.side == Side.BUY else "short"
    message = (
        f"Row {leg.source_row}: Unmatched {leg.side.value} leg for {leg.symbol} on "
        f"{leg.trade_date.isoformat()} (likely still-open {position} position)"
    )
    return Diagnostic.warning(message, row=leg.source_row)


def _residual_warning(larger: RawLeg, other: RawLeg, residual: float) -> Diagnostic:
    message = (
        f"Row {larger.source_row}: {round(residual, SIZE_DECIMALS):g} of {larger.size:g} "
        f"{larger.symbol} {larger.side.value} left unmatched after pairing with row "
        f"{other.source_row} (partial fills are not split)"
    )
    return Diagnostic.warning(message, row=larger.source_row)


def reconcile_group(legs: list[RawLeg]) -> ReconcileResult:
    """FIFO-match the legs of one (symbol, trade_date) group."""
    ordered = chronological(legs)
    buys = [leg for leg in ordered if leg.side == Side.BUY]
    sells = [leg for leg in ordered if leg.side == Side.SELL]
    result = ReconcileResult()

    if not buys or not sells:
        result.warnings.extend(_unmatched_warning(leg) for leg in ordered)
        return result

    b = s = 0
    while b < len(buys) and s < len(sells):
        buy, sell = buys[b], sells[s]
        result.trades.append(pair_legs(buy, sell))

        if buy.size != sell.size:
            larger, other = (buy, sell) if buy.size > sell.size else (sell, buy)
            result.warnings.append(_residual_warning(larger, other, abs(buy.size - sell.size)))

        b += 1
        s += 1

    result.warnings.extend(_unmatched_warning(leg) for leg in buys[b:])
    result.warnings.extend(_unmatched_warning(leg) for leg in sells[s:])
    return result


def reconcile(legs: list[RawLeg]) -> ReconcileResult:
    """Partition legs into completed trades plus warnings for unpaired legs.

    Output trades are sorted by (trade_date, time_opened, entry_row); the input
    order of ``legs`` never affects the result.
    """
    groups: dict[tuple[str, date], list[RawLeg]] = defaultdict(list)
    for leg in legs:
        groups[(leg.symbol, leg.trade_date)].append(leg)

    result = ReconcileResult()
    for key in sorted(groups, key=lambda k: (k[1], k[0])):
        group_result = reconcile_group(groups[key])
        result.trades.extend(group_result.trades)
        result.warnings.extend(group_result.warnings)

    result.trades.sort(key=trade_sort_key)
    logger.debug(
        f"Reconciled {len(legs)} legs in {len(groups)} groups into {len(result.trades)} trades"
    )
    return result


def pass_through(legs: list[RawLeg]) -> ReconcileResult:
    """Convert already-paired rows (entry and exit on one line) into trades.

    Rows without an exit price are open positions: warned about and skipped.
    """
    result = ReconcileResult()
    for leg in sorted(legs, key=lambda leg: leg.source_row):
        if leg.exit_price is None:
            result.warnings.append(_unmatched_warning(leg))
            continue
        result.trades.append(
            CompletedTrade(
                trade_date=leg.trade_date,
                symbol=leg.symbol,
                asset_class=leg.asset_class,
                direction=leg.side,
                entry_price=leg.price,
                exit_price=leg.exit_price,
                size=leg.size,
                fees=leg.fees,
                time_opened=leg.time,
                time_closed=leg.time_closed,
                stop_loss=leg.stop_loss,
                session=leg.session,
                strategy=leg.strategy,
                timeframe=leg.timeframe,
                notes=leg.notes,
                entry_row=leg.source_row,
                exit_row=leg.source_row,
            )
        )

    result.trades.sort(key=trade_sort_key)
    return result
