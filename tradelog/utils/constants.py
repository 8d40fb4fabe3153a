"""Shared constants: canonical fields, alias tables, default policies, P&L factors."""

from dataclasses import dataclass
from enum import Enum


class AssetClass(str, Enum):
    FOREX = "Forex"
    STOCKS = "Stocks"
    FUTURES = "Futures"
    CRYPTO = "Crypto"


class Side(str, Enum):
    BUY = "Buy"
    SELL = "Sell"


class Outcome(str, Enum):
    WIN = "Win"
    LOSS = "Loss"
    BREAK_EVEN = "Break Even"


class CanonicalField(str, Enum):
    """Canonical fields a broker column can resolve to."""

    TRADE_DATE = "trade_date"
    SYMBOL = "symbol"
    SIDE = "side"
    PRICE = "price"
    EXIT_PRICE = "exit_price"
    SIZE = "size"
    FEES = "fees"
    TIME = "time"
    TIME_CLOSED = "time_closed"
    ASSET_CLASS = "asset_class"
    STOP_LOSS = "stop_loss"
    SESSION = "session"
    STRATEGY = "strategy"
    TIMEFRAME = "timeframe"
    NOTES = "notes"


REQUIRED_FIELDS = (CanonicalField.TRADE_DATE, CanonicalField.SYMBOL)

# Ordered: earlier aliases win over later ones, regardless of column position.
COLUMN_ALIASES: dict[CanonicalField, tuple[str, ...]] = {
    CanonicalField.TRADE_DATE: (
        "trade_date", "trade date", "date", "datetime", "timestamp", "time",
        "execution date", "exec date", "transaction date", "trans date", "order date",
    ),
    CanonicalField.SYMBOL: (
        "symbol", "ticker", "stock", "instrument", "security", "asset", "pair", "market", "name",
    ),
    CanonicalField.SIDE: (
        "buy_sell", "buy/sell", "side", "direction", "type", "action", "order type",
        "trade type", "b/s", "position",
    ),
    CanonicalField.PRICE: (
        "entry_price", "entry", "price", "open price", "fill price", "exec price",
        "execution price", "avg price", "average price", "cost",
    ),
    CanonicalField.EXIT_PRICE: ("exit_price", "exit", "close price", "closing price"),
    CanonicalField.SIZE: (
        "size", "qty", "quantity", "shares", "lots", "contracts", "units", "volume",
        "amount", "position size",
    ),
    CanonicalField.FEES: (
        "fees", "fee", "commission", "commission amount", "commissions", "cost",
        "charges", "trading fees",
    ),
    CanonicalField.TIME: (
        "time_opened", "time", "open time", "entry time", "execution time", "exec time",
        "raw exec. time", "fill time", "trade time",
    ),
    CanonicalField.TIME_CLOSED: ("time_closed", "close time", "exit time"),
    CanonicalField.ASSET_CLASS: (
        "asset_class", "asset class", "security type", "instrument type", "market type",
        "product type", "type",
    ),
    CanonicalField.STOP_LOSS: ("stop_loss", "stop", "sl", "stoploss"),
    CanonicalField.SESSION: ("session", "market session", "trading session"),
    CanonicalField.STRATEGY: ("strategy_type", "strategy", "setup", "pattern", "trade setup"),
    CanonicalField.TIMEFRAME: ("entry_timeframe", "timeframe", "tf", "chart"),
    CanonicalField.NOTES: ("notes", "note", "comment", "comments", "description", "memo", "remarks"),
}

# Checked in order; the first keyword set fully present in the header wins.
BROKER_FORMATS: tuple[tuple[str, tuple[tuple[str, ...], ...]], ...] = (
    ("Brokerage Statement", (("account number",), ("cusip",))),
    ("TradingView", (("tradingview",),)),
    ("MetaTrader", (("metatrader", "mt4", "mt5"),)),
    ("ThinkOrSwim", (("thinkorswim", "tos"),)),
    ("Interactive Brokers", (("interactive brokers", "ibkr"),)),
)

# Substring -> side. "buy" is checked before "sell"/"short".
SIDE_KEYWORDS: tuple[tuple[str, Side], ...] = (
    ("buy", Side.BUY),
    ("sell", Side.SELL),
    ("short", Side.SELL),
)
SIDE_EXACT: dict[str, Side] = {"b": Side.BUY, "l": Side.BUY, "long": Side.BUY, "s": Side.SELL}

# Crypto goes first so "cryptocurrency" does not land on the "currency" keyword.
ASSET_CLASS_KEYWORDS: tuple[tuple[str, AssetClass], ...] = (
    ("crypto", AssetClass.CRYPTO),
    ("coin", AssetClass.CRYPTO),
    ("forex", AssetClass.FOREX),
    ("fx", AssetClass.FOREX),
    ("currency", AssetClass.FOREX),
    ("stock", AssetClass.STOCKS),
    ("equity", AssetClass.STOCKS),
    ("equities", AssetClass.STOCKS),
    ("future", AssetClass.FUTURES),
    ("option", AssetClass.STOCKS),  # options are booked as stocks
)

CURRENCY_SYMBOLS = "$€£¥"

# Default-value policies
DEFAULT_SIZE = 100.0
DEFAULT_ASSET_CLASS = AssetClass.STOCKS
DEFAULT_SIDE = Side.BUY
TWO_DIGIT_YEAR_PIVOT = 50  # yy <= pivot -> 20yy, else 19yy


@dataclass(frozen=True)
class PnLFactors:
    """Per-class multipliers shared by P&L and position sizing."""

    movement: float  # price difference -> pips/ticks
    value_per_unit: float  # pip/tick value per unit of size

    @property
    def risk_per_unit(self) -> float:
        return self.movement * self.value_per_unit


PNL_FACTORS: dict[AssetClass, PnLFactors] = {
    AssetClass.FOREX: PnLFactors(movement=10_000, value_per_unit=10),
    AssetClass.STOCKS: PnLFactors(movement=1, value_per_unit=1),
    AssetClass.FUTURES: PnLFactors(movement=1, value_per_unit=1),
    AssetClass.CRYPTO: PnLFactors(movement=1, value_per_unit=1),
}

BREAKEVEN_THRESHOLD = 0.01
PROFIT_DECIMALS = 2
MOVEMENT_DECIMALS = 4
SIZE_DECIMALS = 4
RATIO_DECIMALS = 2
RATIO_UNAVAILABLE = "N/A"

IMPORT_BATCH_SIZE = 50
