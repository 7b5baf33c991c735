"""Public interface for the ``statement_import`` package.

This module re-exports the pipeline operations and the public models/types
as the stable import surface. There is no runtime logic here.
"""

from .ingest.columns import detect_column_mapping
from .ingest.normalize import (
    is_iso_date,
    normalize_date,
    normalize_row,
    parse_amount,
    statement_date_range,
)
from .ingest.reader import EmptyInputError, parse_delimited, preview_table
from .models import (
    ColumnMapping,
    ImportReport,
    ImportResult,
    NormalizedTransaction,
    PatternGroup,
    RawTable,
    RowIssue,
    RowIssueKind,
    StatementPreview,
    TransactionType,
)
from .patterns import clean_note, detect_patterns, extract_pattern, should_skip
from .pipeline import import_statement, read_statement
from .ruleset import Ruleset, RulesetError, default_ruleset, load_ruleset

__all__ = [
    # Pipeline
    "read_statement",
    "import_statement",
    # Reader
    "parse_delimited",
    "preview_table",
    "EmptyInputError",
    # Detector
    "detect_column_mapping",
    # Normalizer
    "normalize_date",
    "is_iso_date",
    "parse_amount",
    "normalize_row",
    "statement_date_range",
    # Filter / clusterer
    "should_skip",
    "clean_note",
    "extract_pattern",
    "detect_patterns",
    # Configuration
    "Ruleset",
    "RulesetError",
    "default_ruleset",
    "load_ruleset",
    # Models / types
    "RawTable",
    "ColumnMapping",
    "TransactionType",
    "NormalizedTransaction",
    "PatternGroup",
    "RowIssueKind",
    "RowIssue",
    "ImportReport",
    "StatementPreview",
    "ImportResult",
]
