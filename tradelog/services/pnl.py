"""P&L, position sizing and risk-reward for completed trades.

All functions are pure computation. Rounding happens only on the values
returned to callers; outcome is classified on the unrounded profit.
"""

from dataclasses import dataclass

from tradelog.errors import PositionSizingError
from tradelog.models.trade import CompletedTrade
from tradelog.utils.constants import (
    BREAKEVEN_THRESHOLD,
    MOVEMENT_DECIMALS,
    PNL_FACTORS,
    PROFIT_DECIMALS,
    RATIO_DECIMALS,
    RATIO_UNAVAILABLE,
    SIZE_DECIMALS,
    AssetClass,
    Outcome,
    Side,
)


@dataclass(frozen=True)
class PnLResult:
    movement: float  # pips for Forex, price units otherwise
    profit: float
    outcome: Outcome


# ---------------------------------------------------------------------------
# Trade P&L
# ---------------------------------------------------------------------------

def price_diff(direction: Side, entry: float, exit: float) -> float:
    """Signed price move in the trade's favour."""
    return exit - entry if direction == Side.BUY else entry - exit


def classify_outcome(profit: float) -> Outcome:
    if profit > BREAKEVEN_THRESHOLD:
        return Outcome.WIN
    if profit < -BREAKEVEN_THRESHOLD:
        return Outcome.LOSS
    return Outcome.BREAK_EVEN


def calculate_pnl(trade: CompletedTrade) -> PnLResult:
    factors = PNL_FACTORS[trade.asset_class]
    diff = price_diff(trade.direction, trade.entry_price, trade.exit_price)

    movement = diff * factors.movement
    profit = movement * trade.size * factors.value_per_unit - trade.fees

    return PnLResult(
        movement=round(movement, MOVEMENT_DECIMALS),
        profit=round(profit, PROFIT_DECIMALS),
        outcome=classify_outcome(profit),
    )


# ---------------------------------------------------------------------------
# Risk helpers
# ---------------------------------------------------------------------------

def position_size(asset_class: AssetClass, entry: float, stop: float, target_risk: float) -> float:
    """Size at which a stop-out loses exactly ``target_risk``.

    Inverse of the profit formula in ``calculate_pnl``, using the same factors.

    Raises:
        PositionSizingError: stop equals entry, or target_risk is not positive.
    """
    if target_risk <= 0:
        raise PositionSizingError(f"Target risk must be positive, got {target_risk}")
    distance = abs(entry - stop)
    if distance == 0:
        raise PositionSizingError("Stop loss must differ from entry price")

    risk_per_size = distance * PNL_FACTORS[asset_class].risk_per_unit
    return round(target_risk / risk_per_size, SIZE_DECIMALS)


def risk_reward_ratio(entry: float | None, exit: float | None, stop: float | None) -> str:
    """Format reward/risk as ``1:N.NN``; ``N/A`` when it cannot be computed."""
    if not entry or not exit or not stop:
        return RATIO_UNAVAILABLE
    risk = abs(entry - stop)
    if risk == 0:
        return RATIO_UNAVAILABLE
    reward = abs(exit - entry)
    return f"1:{reward / risk:.{RATIO_DECIMALS}f}"
