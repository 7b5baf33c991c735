"""End-to-end import flow: text -> preview -> transactions and pattern groups.

Two entry points mirror the two steps of an interactive import:

- :func:`read_statement` parses the text and proposes a column mapping so the
  user can review a sample before confirming.
- :func:`import_statement` runs filtering, cleaning, normalization and
  clustering over the confirmed mapping.

Neither step touches disk or network. Given the same inputs the result is
identical, including transaction ids and group order.
"""

from __future__ import annotations

from typing import cast

from .ingest.columns import detect_column_mapping
from .ingest.normalize import is_iso_date, normalize_row, statement_date_range
from .ingest.reader import DEFAULT_DELIMITER, parse_delimited
from .logging_setup import get_logger
from .models import (
    ColumnMapping,
    ImportReport,
    ImportResult,
    NormalizedTransaction,
    RawTable,
    RowIssue,
    RowIssueKind,
    StatementPreview,
)
from .patterns import clean_note, detect_patterns, should_skip
from .ruleset import Ruleset, default_ruleset

_logger = get_logger("statement_import.pipeline")


def read_statement(
    text: str,
    *,
    delimiter: str = DEFAULT_DELIMITER,
    ruleset: Ruleset | None = None,
) -> StatementPreview:
    """Parse ``text`` and detect a column mapping.

    Raises :class:`~statement_import.ingest.reader.EmptyInputError` when the
    text holds no non-blank lines. ``mapping`` is ``None`` when detection
    fails; the caller must then ask for a manual mapping.
    """

    rules = ruleset if ruleset is not None else default_ruleset()
    table = parse_delimited(text, delimiter)
    mapping = detect_column_mapping(table.headers, rules.column_keywords)
    date_range = statement_date_range(table, mapping.date) if mapping is not None else None
    _logger.info(
        "read %d row(s) (%d malformed); mapping %s",
        table.total_rows,
        table.dropped_rows,
        "detected" if mapping is not None else "not detected",
    )
    return StatementPreview(table=table, mapping=mapping, date_range=date_range)


def import_statement(
    table: RawTable,
    mapping: ColumnMapping,
    *,
    ruleset: Ruleset | None = None,
) -> ImportResult:
    """Turn the rows of ``table`` into transactions and pattern groups.

    Rows are processed in order. Transfers are skipped on the raw
    description, surviving descriptions are cleaned into notes, and rows
    without exactly one usable amount or without a valid ISO date are held
    out as :class:`RowIssue` entries instead of aborting the import.

    Raises ``ValueError`` when ``mapping`` does not fit ``table.headers``.
    """

    if not mapping.is_valid_for(table.headers):
        raise ValueError(
            f"column mapping {mapping.columns()!r} does not name four distinct "
            f"headers of {table.headers!r}"
        )
    rules = ruleset if ruleset is not None else default_ruleset()

    transactions: list[NormalizedTransaction] = []
    issues: list[RowIssue] = []
    skipped = 0
    for idx, row in enumerate(table.rows):
        description = row[mapping.description]
        if should_skip(description, rules.skip_patterns):
            skipped += 1
            _logger.debug("row %d skipped as internal transfer: %r", idx, description)
            continue

        outcome = normalize_row(
            row,
            mapping,
            row_index=idx,
            note=clean_note(description, rules.note_replacements),
        )
        if outcome.issue is not None:
            issues.append(RowIssue(row_index=idx, kind=outcome.issue, detail=outcome.detail))
            _logger.debug("row %d held out (%s): %s", idx, outcome.issue, outcome.detail)
            continue

        tx = cast(NormalizedTransaction, outcome.transaction)
        if not is_iso_date(tx.date):
            detail = f"{mapping.date!r}={row[mapping.date]!r} is not a d.m.yyyy date"
            issues.append(RowIssue(row_index=idx, kind=RowIssueKind.UNPARSED_DATE, detail=detail))
            _logger.debug("row %d held out (%s): %s", idx, RowIssueKind.UNPARSED_DATE, detail)
            continue

        transactions.append(tx)

    groups = detect_patterns(transactions, vendor_prefixes=rules.vendor_prefixes)

    def _count(kind: RowIssueKind) -> int:
        return sum(1 for i in issues if i.kind is kind)

    report = ImportReport(
        rows_read=table.total_rows,
        malformed_rows=table.dropped_rows,
        skipped_transfers=skipped,
        missing_amounts=_count(RowIssueKind.MISSING_AMOUNT),
        ambiguous_amounts=_count(RowIssueKind.AMBIGUOUS_AMOUNT),
        unparsed_dates=_count(RowIssueKind.UNPARSED_DATE),
        imported=len(transactions),
    )
    _logger.info(
        "imported %d of %d row(s): %d transfer(s) skipped, %d held out, %d group(s)",
        report.imported,
        report.rows_read,
        report.skipped_transfers,
        len(issues),
        len(groups),
    )
    return ImportResult(
        transactions=tuple(transactions),
        groups=tuple(groups),
        issues=tuple(issues),
        report=report,
    )


__all__ = ["read_statement", "import_statement"]
