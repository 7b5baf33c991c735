"""CLI for the ``statement_import`` package.

This module exposes callable command handlers (``cmd_preview`` and
``cmd_import``) and a Typer-based console interface. Environment variables
(``STATEMENT_IMPORT_RULESET``, ``STATEMENT_IMPORT_LOG_LEVEL``) are loaded from
a local ``.env`` using ``python-dotenv`` before delegating to command logic.
Business logic lives in ``statement_import.pipeline``.

Handlers print JSON to stdout, write ``Error: ...`` lines to stderr and
return a process exit code.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .ingest.reader import DEFAULT_DELIMITER, DEFAULT_PREVIEW_ROWS, EmptyInputError, preview_table
from .logging_setup import configure_logging
from .models import ColumnMapping, StatementPreview
from .pipeline import import_statement, read_statement
from .ruleset import Ruleset, RulesetError, load_ruleset
from .serialize import dumps, preview_to_dict, result_to_dict


def _read_text(csv_path: str) -> str | None:
    """Read ``csv_path`` as UTF-8, reporting failures on stderr."""

    try:
        return Path(csv_path).read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
    except PermissionError:
        print(f"Error: Permission denied: {csv_path}", file=sys.stderr)
    except UnicodeDecodeError as e:
        print(f"Error: {csv_path} is not valid UTF-8: {e}", file=sys.stderr)
    except OSError as e:
        print(f"Error: Unexpected failure reading '{csv_path}': {e}", file=sys.stderr)
    return None


def _load_preview(
    csv_path: str, *, delimiter: str, ruleset_path: str | None
) -> tuple[StatementPreview, Ruleset] | None:
    try:
        ruleset = load_ruleset(ruleset_path)
    except RulesetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None

    text = _read_text(csv_path)
    if text is None:
        return None

    try:
        preview = read_statement(text, delimiter=delimiter, ruleset=ruleset)
    except EmptyInputError:
        print(f"Error: {csv_path} is empty", file=sys.stderr)
        return None
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None
    return preview, ruleset


def cmd_preview(
    csv_path: str,
    *,
    delimiter: str = DEFAULT_DELIMITER,
    rows: int = DEFAULT_PREVIEW_ROWS,
    ruleset_path: str | None = None,
) -> int:
    """Print headers, the first ``rows`` rows and the detected mapping as JSON."""

    if rows < 0:
        print("Error: --rows must be non-negative", file=sys.stderr)
        return 1
    loaded = _load_preview(csv_path, delimiter=delimiter, ruleset_path=ruleset_path)
    if loaded is None:
        return 1
    preview, _ruleset = loaded

    sample = StatementPreview(
        table=preview_table(preview.table, rows),
        mapping=preview.mapping,
        date_range=preview.date_range,
    )
    payload = preview_to_dict(sample)
    payload["total_rows"] = preview.table.total_rows
    print(dumps(payload))
    return 0


def cmd_import(
    csv_path: str,
    *,
    delimiter: str = DEFAULT_DELIMITER,
    date: str | None = None,
    description: str | None = None,
    amount_in: str | None = None,
    amount_out: str | None = None,
    ruleset_path: str | None = None,
) -> int:
    """Run the full import and print transactions, groups and counts as JSON.

    When none of the column options are given the mapping is auto-detected.
    When any is given, all four are required and must name distinct headers.
    """

    loaded = _load_preview(csv_path, delimiter=delimiter, ruleset_path=ruleset_path)
    if loaded is None:
        return 1
    preview, ruleset = loaded
    headers = preview.table.headers

    manual = (date, description, amount_in, amount_out)
    if any(v is not None for v in manual):
        mapping = ColumnMapping.for_headers(
            headers,
            date=date,
            description=description,
            amount_in=amount_in,
            amount_out=amount_out,
        )
        if mapping is None:
            print(
                "Error: --date, --description, --amount-in and --amount-out must name "
                f"four distinct columns of: {', '.join(headers)}",
                file=sys.stderr,
            )
            return 1
    elif preview.mapping is not None:
        mapping = preview.mapping
    else:
        print(
            "Error: could not detect the column mapping; pass --date, --description, "
            f"--amount-in and --amount-out. Columns: {', '.join(headers)}",
            file=sys.stderr,
        )
        return 1

    result = import_statement(preview.table, mapping, ruleset=ruleset)
    print(dumps(result_to_dict(result)))
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import delimited bank statement exports: preview and detect columns, "
        "then normalize, filter transfers and group transactions by pattern."
    ),
)


# Options shared by both commands.
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to the exported statement (UTF-8 delimited text).",
    dir_okay=False,
    file_okay=True,
    exists=False,  # allow non-existent here; the handler will report nice errors
)
DELIMITER_OPTION: OptionInfo = typer.Option(
    ..., "--delimiter", help="Single-character field delimiter."
)
RULESET_OPTION: OptionInfo = typer.Option(
    ...,
    "--ruleset",
    help="Ruleset JSON file (falls back to STATEMENT_IMPORT_RULESET, then the bundled default).",
)


@app.command("preview")
def preview_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    delimiter: Annotated[str, DELIMITER_OPTION] = DEFAULT_DELIMITER,
    ruleset: Annotated[Path | None, RULESET_OPTION] = None,
    *,
    rows: Annotated[
        int, typer.Option(help="Number of sample rows to show.")
    ] = DEFAULT_PREVIEW_ROWS,
) -> None:
    """Show headers, sample rows and the detected column mapping."""

    rc = cmd_preview(
        str(csv_path),
        delimiter=delimiter,
        rows=rows,
        ruleset_path=str(ruleset) if ruleset is not None else None,
    )
    if rc:
        raise typer.Exit(rc)


@app.command("import")
def import_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    delimiter: Annotated[str, DELIMITER_OPTION] = DEFAULT_DELIMITER,
    ruleset: Annotated[Path | None, RULESET_OPTION] = None,
    *,
    date: Annotated[str | None, typer.Option(help="Header of the date column.")] = None,
    description: Annotated[
        str | None, typer.Option(help="Header of the description column.")
    ] = None,
    amount_in: Annotated[
        str | None, typer.Option(help="Header of the credit (money in) column.")
    ] = None,
    amount_out: Annotated[
        str | None, typer.Option(help="Header of the debit (money out) column.")
    ] = None,
) -> None:
    """Normalize rows, skip transfers and group transactions by pattern."""

    rc = cmd_import(
        str(csv_path),
        delimiter=delimiter,
        date=date,
        description=description,
        amount_in=amount_in,
        amount_out=amount_out,
        ruleset_path=str(ruleset) if ruleset is not None else None,
    )
    if rc:
        raise typer.Exit(rc)


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging centrally.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m statement_import.cli`
    app()
