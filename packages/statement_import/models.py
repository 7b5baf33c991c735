"""Data models for ``statement_import``.

Domain records are frozen, slotted dataclasses: they are created once by a
pipeline stage and never mutated afterwards. Amounts are ``Decimal``
magnitudes; direction is carried by :class:`TransactionType`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum

# ---------------------------------------------------------------------------
# Reader output
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RawTable:
    """Header row plus data rows of a delimited text export.

    Every row maps each of ``headers`` (and nothing else) to its raw string
    value. ``dropped_rows`` counts data lines discarded because their field
    count did not match the header.
    """

    headers: tuple[str, ...]
    rows: tuple[Mapping[str, str], ...]
    dropped_rows: int = 0

    @property
    def total_rows(self) -> int:
        return len(self.rows)


# ---------------------------------------------------------------------------
# Column roles
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ColumnMapping:
    """Assignment of the four column roles to header names.

    A mapping is only usable when all four names are distinct members of the
    table's header set; :meth:`for_headers` enforces that.
    """

    date: str
    description: str
    amount_in: str
    amount_out: str

    def columns(self) -> tuple[str, str, str, str]:
        return (self.date, self.description, self.amount_in, self.amount_out)

    def is_valid_for(self, headers: Iterable[str]) -> bool:
        header_set = set(headers)
        cols = self.columns()
        return len(set(cols)) == len(cols) and all(c in header_set for c in cols)

    @classmethod
    def for_headers(
        cls,
        headers: Iterable[str],
        *,
        date: str | None,
        description: str | None,
        amount_in: str | None,
        amount_out: str | None,
    ) -> ColumnMapping | None:
        """Build a mapping for ``headers`` or return ``None`` when invalid.

        Partial mappings (any role missing) are rejected as a whole.
        """

        if not (date and description and amount_in and amount_out):
            return None
        mapping = cls(
            date=date,
            description=description,
            amount_in=amount_in,
            amount_out=amount_out,
        )
        return mapping if mapping.is_valid_for(headers) else None


# ---------------------------------------------------------------------------
# Normalized transactions and clustering
# ---------------------------------------------------------------------------


class TransactionType(StrEnum):
    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True, slots=True)
class NormalizedTransaction:
    """A canonical transaction derived from one raw row.

    ``amount`` is a non-negative magnitude. ``note`` is the cleaned text
    shown to the user; ``description`` keeps the raw bank text it came from.
    ``id`` is a deterministic fingerprint (see ``ingest.normalize``).
    """

    id: str
    row_index: int
    date: str
    amount: Decimal
    type: TransactionType
    note: str
    description: str

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.is_income else -self.amount


@dataclass(frozen=True, slots=True)
class PatternGroup:
    """A cluster of transactions sharing an extracted pattern key.

    ``total_amount`` is signed (income positive, expense negative).
    ``descriptions`` holds up to three distinct example notes in first-seen
    order; ``transaction_ids`` lists every member in input order.
    """

    pattern: str
    count: int
    total_amount: Decimal
    descriptions: tuple[str, ...]
    transaction_ids: tuple[str, ...]
    is_income: bool


# ---------------------------------------------------------------------------
# Import outcome
# ---------------------------------------------------------------------------


class RowIssueKind(StrEnum):
    MISSING_AMOUNT = "missing_amount"
    AMBIGUOUS_AMOUNT = "ambiguous_amount"
    UNPARSED_DATE = "unparsed_date"


@dataclass(frozen=True, slots=True)
class RowIssue:
    """A data row held out of the import, with the reason."""

    row_index: int
    kind: RowIssueKind
    detail: str


@dataclass(frozen=True, slots=True)
class ImportReport:
    """Aggregate counts for one import run."""

    rows_read: int
    malformed_rows: int
    skipped_transfers: int
    missing_amounts: int
    ambiguous_amounts: int
    unparsed_dates: int
    imported: int


@dataclass(frozen=True, slots=True)
class StatementPreview:
    """Parsed table plus what could be inferred before the user confirms."""

    table: RawTable
    mapping: ColumnMapping | None
    date_range: tuple[str, str] | None


@dataclass(frozen=True, slots=True)
class ImportResult:
    transactions: tuple[NormalizedTransaction, ...]
    groups: tuple[PatternGroup, ...]
    issues: tuple[RowIssue, ...]
    report: ImportReport


__all__ = [
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
