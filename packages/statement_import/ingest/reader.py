"""Lightweight delimited-text reader for bank statement exports.

This is deliberately not an RFC 4180 parser: a field is split on the
delimiter, trimmed, and one leading and one trailing double quote are
removed. A quoted field containing the delimiter is therefore mis-split;
such rows usually end up with the wrong field count and are dropped.

Rows whose field count differs from the header are discarded rather than
raised, since real exports routinely carry summary or footer lines. The
number of discarded rows is kept on the returned :class:`RawTable`.
"""

from __future__ import annotations

from ..logging_setup import get_logger
from ..models import RawTable

DEFAULT_DELIMITER = ";"
DEFAULT_PREVIEW_ROWS = 5

_logger = get_logger("statement_import.ingest.reader")


class EmptyInputError(ValueError):
    """The input held no non-blank lines."""


def _split_fields(line: str, delimiter: str) -> list[str]:
    fields: list[str] = []
    for raw in line.split(delimiter):
        v = raw.strip()
        if v.startswith('"'):
            v = v[1:]
        if v.endswith('"'):
            v = v[:-1]
        fields.append(v)
    return fields


def _unique_headers(names: list[str]) -> tuple[str, ...]:
    seen: dict[str, int] = {}
    out: list[str] = []
    for name in names:
        if name not in seen:
            seen[name] = 1
            out.append(name)
            continue
        n = seen[name]
        candidate = name
        while candidate in seen:
            n += 1
            candidate = f"{name} ({n})"
        seen[name] = n
        seen[candidate] = 1
        out.append(candidate)
        _logger.warning("duplicate header %r renamed to %r", name, candidate)
    return tuple(out)


def parse_delimited(text: str, delimiter: str = DEFAULT_DELIMITER) -> RawTable:
    """Split ``text`` into a header row and data rows.

    Raises
    ------
    EmptyInputError
        When no non-blank line remains after discarding whitespace-only lines.
    ValueError
        When ``delimiter`` is not a single character.
    """

    if len(delimiter) != 1:
        raise ValueError(f"delimiter must be a single character, got {delimiter!r}")

    lines = [line for line in text.split("\n") if line.strip()]
    if not lines:
        raise EmptyInputError("input is empty")

    headers = _unique_headers(_split_fields(lines[0], delimiter))
    width = len(headers)

    rows: list[dict[str, str]] = []
    dropped = 0
    for line_no, line in enumerate(lines[1:], start=2):
        values = _split_fields(line, delimiter)
        if len(values) != width:
            dropped += 1
            _logger.debug(
                "dropping line %d: %d fields, expected %d", line_no, len(values), width
            )
            continue
        rows.append(dict(zip(headers, values, strict=True)))

    if dropped:
        _logger.info("dropped %d malformed row(s) of %d", dropped, len(lines) - 1)
    return RawTable(headers=headers, rows=tuple(rows), dropped_rows=dropped)


def preview_table(table: RawTable, count: int = DEFAULT_PREVIEW_ROWS) -> RawTable:
    """Return a copy of ``table`` holding only its first ``count`` rows."""

    if count < 0:
        raise ValueError("preview count must be non-negative")
    return RawTable(
        headers=table.headers,
        rows=table.rows[:count],
        dropped_rows=table.dropped_rows,
    )


__all__ = [
    "DEFAULT_DELIMITER",
    "DEFAULT_PREVIEW_ROWS",
    "EmptyInputError",
    "parse_delimited",
    "preview_table",
]
