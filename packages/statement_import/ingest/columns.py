"""Heuristic column-role detection from header names.

Detection is advisory. Callers must let the user override the result and
must prompt for a manual mapping when :func:`detect_column_mapping` returns
``None``.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..logging_setup import get_logger
from ..models import ColumnMapping
from ..ruleset import ColumnKeywords, KeywordRule, default_ruleset

_logger = get_logger("statement_import.ingest.columns")

_ROLES: tuple[str, ...] = ("date", "description", "amount_in", "amount_out")


def _matches_any(header_lower: str, rules: Sequence[KeywordRule]) -> bool:
    return any(rule.matches(header_lower) for rule in rules)


def detect_column_mapping(
    headers: Sequence[str],
    keywords: ColumnKeywords | None = None,
) -> ColumnMapping | None:
    """Assign headers to the four column roles by keyword containment.

    Headers are scanned in order; the first header matching a role's keywords
    claims it. A single header may match several roles, but the result is
    only returned when all four roles resolve to distinct headers.
    """

    kw = keywords if keywords is not None else default_ruleset().column_keywords
    found: dict[str, str] = {}
    for header in headers:
        lower = header.lower()
        for role in _ROLES:
            if role in found:
                continue
            if _matches_any(lower, getattr(kw, role)):
                found[role] = header

    mapping = ColumnMapping.for_headers(
        headers,
        date=found.get("date"),
        description=found.get("description"),
        amount_in=found.get("amount_in"),
        amount_out=found.get("amount_out"),
    )
    if mapping is None:
        _logger.debug("column roles not resolved from headers %r (found %r)", headers, found)
    return mapping


__all__ = ["detect_column_mapping"]
