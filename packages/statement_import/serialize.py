"""JSON-friendly views of pipeline results.

Amounts are emitted as strings with exactly two decimals (ASCII dot, leading
minus for negative group totals) so no precision is lost to floats. Object
keys follow a fixed order.
"""

from __future__ import annotations

import json
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from .models import (
    ImportResult,
    NormalizedTransaction,
    PatternGroup,
    RawTable,
    StatementPreview,
)


def format_amount(d: Decimal) -> str:
    q = d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{q:.2f}"


def transaction_to_dict(tx: NormalizedTransaction) -> dict[str, Any]:
    return {
        "id": tx.id,
        "row_index": tx.row_index,
        "date": tx.date,
        "amount": format_amount(tx.amount),
        "type": tx.type.value,
        "note": tx.note,
    }


def group_to_dict(group: PatternGroup) -> dict[str, Any]:
    return {
        "pattern": group.pattern,
        "count": group.count,
        "total_amount": format_amount(group.total_amount),
        "is_income": group.is_income,
        "descriptions": list(group.descriptions),
        "transaction_ids": list(group.transaction_ids),
    }


def table_to_dict(table: RawTable) -> dict[str, Any]:
    return {
        "headers": list(table.headers),
        "rows": [dict(r) for r in table.rows],
        "dropped_rows": table.dropped_rows,
    }


def preview_to_dict(preview: StatementPreview) -> dict[str, Any]:
    mapping = preview.mapping
    return {
        "table": table_to_dict(preview.table),
        "mapping": (
            {
                "date": mapping.date,
                "description": mapping.description,
                "amount_in": mapping.amount_in,
                "amount_out": mapping.amount_out,
            }
            if mapping is not None
            else None
        ),
        "date_range": list(preview.date_range) if preview.date_range else None,
    }


def result_to_dict(result: ImportResult) -> dict[str, Any]:
    r = result.report
    return {
        "report": {
            "rows_read": r.rows_read,
            "malformed_rows": r.malformed_rows,
            "skipped_transfers": r.skipped_transfers,
            "missing_amounts": r.missing_amounts,
            "ambiguous_amounts": r.ambiguous_amounts,
            "unparsed_dates": r.unparsed_dates,
            "imported": r.imported,
        },
        "transactions": [transaction_to_dict(tx) for tx in result.transactions],
        "groups": [group_to_dict(g) for g in result.groups],
        "issues": [
            {"row_index": i.row_index, "kind": i.kind.value, "detail": i.detail}
            for i in result.issues
        ],
    }


def dumps(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)


__all__ = [
    "format_amount",
    "transaction_to_dict",
    "group_to_dict",
    "table_to_dict",
    "preview_to_dict",
    "result_to_dict",
    "dumps",
]
