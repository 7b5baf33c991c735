"""Raw row -> :class:`NormalizedTransaction` conversion.

Locale handling follows the day-first, comma-decimal exports this package was
built for:

- dates: ``d.m.yyyy`` is reformatted to ``yyyy-mm-dd``; anything else passes
  through unchanged so the caller can flag it (see :func:`is_iso_date`).
- amounts: whitespace is removed, a decimal comma becomes a point and a
  leading minus is dropped. Direction comes from the column (credit vs debit),
  never from the textual sign.

Nothing here raises on malformed values. Unusable amounts are reported as
``None`` and unconvertible rows come back as a :class:`RowOutcome` carrying
the reason.
"""

from __future__ import annotations

import hashlib
import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date as _date
from decimal import Decimal
from typing import cast

from ..models import (
    ColumnMapping,
    NormalizedTransaction,
    RawTable,
    RowIssueKind,
    TransactionType,
)

_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
# Plain digits with an optional fraction, after separators are normalized.
_AMOUNT_RE = re.compile(r"\d{1,15}(?:\.\d+)?")


def normalize_date(value: str) -> str:
    """Reformat ``d.m.yyyy`` to ``yyyy-mm-dd``; return other input unchanged."""

    parts = value.split(".")
    if len(parts) != 3:
        return value
    day, month, year = (p.strip() for p in parts)
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def is_iso_date(value: str) -> bool:
    """Return True when ``value`` is a real calendar date as ``YYYY-MM-DD``."""

    if not _ISO_DATE_RE.fullmatch(value):
        return False
    try:
        _date.fromisoformat(value)
    except ValueError:
        return False
    return True


def parse_amount(value: str | None) -> Decimal | None:
    """Parse a locale-formatted amount into a non-negative magnitude.

    Returns ``None`` for empty or whitespace-only input and for anything that
    is not plain digits with an optional decimal part once separators are
    normalized: exponents (``"1e3"``), underscores, repeated signs, ``NaN``.
    At most one leading minus is dropped and the integer part is capped at 15
    digits. When both ``.`` and ``,`` occur and the comma comes last, dots are
    taken as thousands separators (``"1.234,56"``).
    """

    if value is None or not value.strip():
        return None
    s = "".join(value.split())
    if "," in s and "." in s and s.rfind(",") > s.rfind("."):
        s = s.replace(".", "")
    s = s.replace(",", ".", 1).removeprefix("-")
    if not _AMOUNT_RE.fullmatch(s):
        return None
    return Decimal(s)


def transaction_fingerprint(
    *, row_index: int, date: str, amount: Decimal, type: TransactionType, description: str
) -> str:
    """Stable SHA-256 id over the row position and canonical fields."""

    payload = {
        "row": row_index,
        "date": date,
        "amount": f"{amount:f}",
        "type": type.value,
        "description": description,
    }
    data = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class RowOutcome:
    """Result of normalizing one row: a transaction or the reason there is none."""

    transaction: NormalizedTransaction | None
    issue: RowIssueKind | None = None
    detail: str = ""


def _usable(amount: Decimal | None) -> bool:
    return amount is not None and amount != 0


def normalize_row(
    row: Mapping[str, str],
    mapping: ColumnMapping,
    *,
    row_index: int,
    note: str | None = None,
) -> RowOutcome:
    """Convert one raw row using ``mapping``.

    ``note`` overrides the transaction note (the pipeline passes the cleaned
    description); it defaults to the raw description. Exactly one of the
    credit/debit columns must hold a usable (present, non-zero) amount.
    """

    raw_in = row.get(mapping.amount_in, "")
    raw_out = row.get(mapping.amount_out, "")
    amount_in = parse_amount(raw_in)
    amount_out = parse_amount(raw_out)

    if _usable(amount_in) and _usable(amount_out):
        return RowOutcome(
            None,
            RowIssueKind.AMBIGUOUS_AMOUNT,
            f"both {mapping.amount_in!r}={raw_in!r} and {mapping.amount_out!r}={raw_out!r}",
        )
    if _usable(amount_in):
        amount, tx_type = cast(Decimal, amount_in), TransactionType.INCOME
    elif _usable(amount_out):
        amount, tx_type = cast(Decimal, amount_out), TransactionType.EXPENSE
    else:
        return RowOutcome(
            None,
            RowIssueKind.MISSING_AMOUNT,
            f"no usable amount in {mapping.amount_in!r}={raw_in!r} "
            f"or {mapping.amount_out!r}={raw_out!r}",
        )

    description = row.get(mapping.description, "")
    iso = normalize_date(row.get(mapping.date, ""))
    tx = NormalizedTransaction(
        id=transaction_fingerprint(
            row_index=row_index,
            date=iso,
            amount=amount,
            type=tx_type,
            description=description,
        ),
        row_index=row_index,
        date=iso,
        amount=amount,
        type=tx_type,
        note=description if note is None else note,
        description=description,
    )
    return RowOutcome(tx)


def statement_date_range(table: RawTable, date_column: str) -> tuple[str, str] | None:
    """Return the earliest and latest ISO dates found in ``date_column``.

    Values that do not normalize to a valid ISO date are ignored.
    """

    dates = sorted(
        iso
        for iso in (normalize_date(row.get(date_column, "")) for row in table.rows)
        if is_iso_date(iso)
    )
    if not dates:
        return None
    return dates[0], dates[-1]


__all__ = [
    "normalize_date",
    "is_iso_date",
    "parse_amount",
    "transaction_fingerprint",
    "RowOutcome",
    "normalize_row",
    "statement_date_range",
]
