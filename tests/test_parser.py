"""End-to-end tests for parse_trades."""

import logging

from tradelog.config import Settings
from tradelog.engine.parser import NO_ROWS_MESSAGE, parse_trades
from tradelog.models.result import PipelineMode
from tradelog.services.pnl import calculate_pnl
from tradelog.utils.constants import AssetClass, Outcome, Side


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

class TestScenarios:
    def test_forex_round_trip(self):
        text = (
            "date,symbol,side,price,size,fees,asset class\n"
            "2024-01-15,EURUSD,Buy,1.0850,1.0,2.5,Forex\n"
            "2024-01-15,EURUSD,Sell,1.0920,1.0,2.5,Forex\n"
        )
        result = parse_trades(text)

        assert result.errors == []
        assert result.warnings == []
        assert result.mode == PipelineMode.TRANSACTION_LOG
        assert len(result.trades) == 1
        trade = result.trades[0]
        assert trade.asset_class == AssetClass.FOREX
        assert trade.direction == Side.BUY
        assert trade.fees == 5.0

        pnl = calculate_pnl(trade)
        assert pnl.movement == 70.0
        assert pnl.profit == 695.0
        assert pnl.outcome == Outcome.WIN

    def test_three_buys_one_sell(self):
        text = (
            "date,symbol,side,price,qty\n"
            "2024-01-15,AAPL,Buy,100,10\n"
            "2024-01-15,AAPL,Buy,101,10\n"
            "2024-01-15,AAPL,Buy,102,10\n"
            "2024-01-15,AAPL,Sell,105,10\n"
        )
        result = parse_trades(text)

        assert result.errors == []
        assert len(result.trades) == 1
        assert result.trades[0].entry_row == 2
        assert result.trades[0].entry_price == 100
        assert len(result.warnings) == 2
        assert all("Unmatched Buy leg" in w for w in result.warnings)

    def test_currency_formatted_price(self):
        text = (
            "date,symbol,side,price,qty\n"
            '2024-01-15,AAPL,Buy,"$1,085.50",10\n'
            '2024-01-15,AAPL,Sell,"$1,095.50",10\n'
        )
        result = parse_trades(text)

        trade = result.trades[0]
        assert trade.entry_price == 1085.50
        assert trade.exit_price == 1095.50
        assert calculate_pnl(trade).profit == 100.0

    def test_unrecognized_header_is_fatal(self):
        text = "foo,bar,baz\n" + "1,2,3\n" * 25
        result = parse_trades(text)

        assert result.trades == []
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Missing required column 'trade_date'")
        assert result.fatal
        assert result.mode is None


# ---------------------------------------------------------------------------
# Fatal input and row errors
# ---------------------------------------------------------------------------

class TestErrors:
    def test_empty_input(self):
        result = parse_trades("")
        assert result.errors == ["CSV must have at least a header row and one data row"]
        assert result.fatal

    def test_header_only(self):
        result = parse_trades("date,symbol,price\n")
        assert len(result.errors) == 1
        assert result.trades == []

    def test_row_errors_do_not_stop_good_rows(self):
        text = (
            "date,symbol,side,price\n"
            "2024-01-15,AAPL,Buy,100\n"
            "\n"
            "2024-01-15,AAPL,Sell,\n"
            "2024-01-15,AAPL,Sell,110\n"
            "garbage,AAPL,Sell,110\n"
        )
        result = parse_trades(text)

        assert result.errors == ["Row 4: Missing price", 'Row 6: Invalid date format "garbage"']
        assert not result.fatal
        assert len(result.trades) == 1
        assert result.trades[0].exit_row == 5

    def test_unclosed_quote_costs_only_its_line(self):
        text = (
            "date,symbol,side,price\n"
            "2024-01-15,MSFT,Buy,200\n"
            '2024-01-15,AAPL,Buy,"100\n'
            "2024-01-15,MSFT,Sell,210\n"
        )
        result = parse_trades(text)

        assert result.errors == ['Row 3: Malformed CSV line "2024-01-15,AAPL,Buy,"100"']
        assert not result.fatal
        assert len(result.trades) == 1
        assert result.trades[0].symbol == "MSFT"
        assert result.trades[0].exit_row == 4

    def test_unclosed_quote_without_side_column(self):
        result = parse_trades('date,symbol,price\n2024-01-15,AAPL,"100\n2024-01-16,MSFT,200\n')

        assert result.errors == ['Row 2: Malformed CSV line "2024-01-15,AAPL,"100"']
        assert not result.fatal
        assert result.mode == PipelineMode.TRANSACTION_LOG

    def test_malformed_header_is_fatal(self):
        result = parse_trades('date,"symbol,price\n2024-01-15,AAPL,100\n')
        assert result.fatal
        assert result.errors == ['Row 1: Malformed CSV line "date,"symbol,price"']

    def test_every_row_rejected(self):
        result = parse_trades("date,symbol,price\n2024-01-15,,100\n")
        assert result.errors == ["Row 2: Missing symbol"]
        assert NO_ROWS_MESSAGE not in result.errors
        assert result.trades == []

    def test_fatal_error_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="tradelog.engine.parser"):
            parse_trades("foo\n1\n")
        assert "Import aborted" in caplog.text


# ---------------------------------------------------------------------------
# Modes, formats and settings
# ---------------------------------------------------------------------------

def test_paired_mode():
    text = (
        "date,symbol,side,entry_price,exit_price,size,stop_loss,notes\n"
        "2024-01-15,NQ,Sell,17500,17450,2,17520,opening drive\n"
        "2024-01-15,NQ,Buy,17480,,1,,\n"
    )
    result = parse_trades(text)

    assert result.mode == PipelineMode.PAIRED
    assert len(result.trades) == 1
    trade = result.trades[0]
    assert trade.direction == Side.SELL
    assert (trade.entry_price, trade.exit_price, trade.size) == (17500, 17450, 2)
    assert trade.stop_loss == 17520
    assert trade.notes == "opening drive"
    assert calculate_pnl(trade).profit == 100.0

    assert len(result.warnings) == 1
    assert result.warnings[0].startswith("Row 3: Unmatched Buy leg")


def test_broker_format_notice():
    text = (
        "Account Number,CUSIP,Trade Date,Symbol,Action,Quantity,Price\n"
        "X123,037833100,01/15/2024,AAPL,BOUGHT,10,100\n"
        "X123,037833100,01/15/2024,AAPL,SOLD,10,105\n"
    )
    result = parse_trades(text)

    assert result.broker_format == "Brokerage Statement"
    assert result.warnings == ["Detected Brokerage Statement format"]
    assert len(result.trades) == 1
    assert result.trades[0].size == 10


def test_tab_separated_input():
    text = "Date\tSymbol\tSide\tPrice\n2024-01-15\tMSFT\tSell\t400\n2024-01-15\tMSFT\tBuy\t390\n"
    result = parse_trades(text)

    assert len(result.trades) == 1
    assert result.trades[0].direction == Side.SELL


def test_custom_settings():
    text = "date,symbol,side,price\n2024-01-15,BTCUSD,Buy,42000\n2024-01-15,BTCUSD,Sell,43000\n"
    settings = Settings(default_size=0.5, default_asset_class=AssetClass.CRYPTO)
    trade = parse_trades(text, settings=settings).trades[0]

    assert trade.size == 0.5
    assert trade.asset_class == AssetClass.CRYPTO
    assert calculate_pnl(trade).profit == 500.0
