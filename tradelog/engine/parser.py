"""Parse orchestrator: raw broker export text in, ParseResult out.

read -> resolve columns -> decode rows -> reconcile (or pass through paired
rows). Fatal header problems end the parse with a single error; row problems
are collected and the remaining rows still produce trades.
"""

import logging

from tradelog.config import Settings, settings as default_settings
from tradelog.engine.reconciler import pass_through, reconcile
from tradelog.errors import EmptyInputError, MalformedLineError, MissingColumnError
from tradelog.models.result import Diagnostic, ParseResult, PipelineMode
from tradelog.services.columns import detect_broker_format, resolve_columns
from tradelog.services.csv_reader import read_table
from tradelog.services.decoder import decode_rows
from tradelog.utils.constants import CanonicalField

logger = logging.getLogger(__name__)

NO_ROWS_MESSAGE = "No valid data rows found"


def parse_trades(text: str, settings: Settings | None = None) -> ParseResult:
    """Parse CSV/TSV text into completed trades plus diagnostics.

    Never raises for bad input: every problem ends up in ``diagnostics``.
    """
    config = settings or default_settings

    try:
        table = read_table(text)
        columns = resolve_columns(table.header)
    except (EmptyInputError, MalformedLineError, MissingColumnError) as e:
        logger.warning(f"Import aborted: {e}")
        return ParseResult(diagnostics=[Diagnostic.error(str(e))])

    broker_format = detect_broker_format(table.header)
    mode = PipelineMode.PAIRED if columns.has(CanonicalField.EXIT_PRICE) else PipelineMode.TRANSACTION_LOG
    logger.info(f"Parsing {len(table.rows)} rows in {mode.value} mode")

    legs, decoded = decode_rows(table.rows, columns, config)
    # Untokenizable lines are row errors like any other; keep line order
    malformed = [Diagnostic.error(str(e), row=e.row) for e in table.malformed]
    diagnostics = sorted(malformed + decoded, key=lambda d: d.row or 0)

    if mode == PipelineMode.PAIRED:
        reconciled = pass_through(legs)
    else:
        reconciled = reconcile(legs)
    diagnostics.extend(reconciled.warnings)

    if not legs and not diagnostics:
        diagnostics.append(Diagnostic.error(NO_ROWS_MESSAGE))
    if broker_format and legs:
        diagnostics.append(Diagnostic.warning(f"Detected {broker_format} format"))

    result = ParseResult(
        trades=reconciled.trades,
        diagnostics=diagnostics,
        mode=mode,
        broker_format=broker_format,
    )
    logger.info(
        f"Parsed {len(result.trades)} trades from {len(legs)} legs "
        f"({len(result.errors)} errors, {len(result.warnings)} warnings)"
    )
    return result
