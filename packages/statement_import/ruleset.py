"""Injected configuration for the import pipeline.

A ruleset bundles every literal the pipeline needs to understand one bank's
export format in one locale:

- ``skip_patterns``: lowercase substrings marking internal transfers.
- ``note_replacements``: ordered lowercase substring -> canonical note.
- ``column_keywords``: per-role header keywords used by the detector.
- ``vendor_prefixes``: payment-processor prefixes stripped before pattern
  extraction.

Rulesets live in JSON files validated by the pydantic models below. The
bundled default (``rulesets/default.json``) targets a Norwegian bank export.
Resolution order for :func:`load_ruleset`: explicit path, then the
``STATEMENT_IMPORT_RULESET`` environment variable, then the bundled default.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from os import PathLike
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .logging_setup import get_logger

_RULESET_ENV_VAR = "STATEMENT_IMPORT_RULESET"
_DEFAULT_RESOURCE = "default.json"

_logger = get_logger("statement_import.ruleset")


class RulesetError(ValueError):
    """A ruleset file could not be read or failed validation."""


def _lower_non_empty(values: list[str]) -> list[str]:
    out: list[str] = []
    for v in values:
        s = v.strip().lower()
        if not s:
            raise ValueError("entries must be non-empty strings")
        out.append(s)
    return out


class KeywordRule(BaseModel):
    """A header keyword, optionally vetoed by other substrings.

    ``unless`` covers false positives such as ``"ut"`` matching a header that
    means "already executed" (``"utført"``).
    """

    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    keyword: str
    unless: tuple[str, ...] = ()

    @field_validator("keyword")
    @classmethod
    def _keyword_lower(cls, v: str) -> str:
        if not v:
            raise ValueError("keyword must be non-empty")
        return v.lower()

    @field_validator("unless")
    @classmethod
    def _unless_lower(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(_lower_non_empty(list(v)))

    def matches(self, header_lower: str) -> bool:
        if self.keyword not in header_lower:
            return False
        return not any(u in header_lower for u in self.unless)


class ColumnKeywords(BaseModel):
    """Keyword sets for the four column roles.

    Entries may be written as bare strings in JSON; they are promoted to
    :class:`KeywordRule` with no exclusions.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    date: tuple[KeywordRule, ...]
    description: tuple[KeywordRule, ...]
    amount_in: tuple[KeywordRule, ...]
    amount_out: tuple[KeywordRule, ...]

    @field_validator("date", "description", "amount_in", "amount_out", mode="before")
    @classmethod
    def _promote_strings(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [{"keyword": item} if isinstance(item, str) else item for item in v]
        return v

    @field_validator("date", "description", "amount_in", "amount_out")
    @classmethod
    def _non_empty(cls, v: tuple[KeywordRule, ...]) -> tuple[KeywordRule, ...]:
        if not v:
            raise ValueError("each role needs at least one keyword")
        return v


class Ruleset(BaseModel):
    """Top-level schema for a ruleset JSON file."""

    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    name: str
    skip_patterns: tuple[str, ...] = ()
    note_replacements: dict[str, str] = {}
    column_keywords: ColumnKeywords
    vendor_prefixes: tuple[str, ...] = ()

    @field_validator("skip_patterns", "vendor_prefixes")
    @classmethod
    def _patterns_lower(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(_lower_non_empty(list(v)))

    @field_validator("note_replacements")
    @classmethod
    def _replacement_keys_lower(cls, v: dict[str, str]) -> dict[str, str]:
        out: dict[str, str] = {}
        for key, replacement in v.items():
            k = key.strip().lower()
            if not k:
                raise ValueError("note replacement keys must be non-empty")
            if not replacement.strip():
                raise ValueError(f"note replacement for {key!r} must be non-empty")
            # First occurrence wins when two keys collapse to the same lowercase form.
            out.setdefault(k, replacement.strip())
        return out


def parse_ruleset(text: str, *, source: str = "<string>") -> Ruleset:
    """Validate ruleset JSON ``text``; raise :class:`RulesetError` on failure."""

    try:
        return Ruleset.model_validate_json(text)
    except ValidationError as e:
        raise RulesetError(f"invalid ruleset {source}: {e}") from e


@lru_cache(maxsize=1)
def default_ruleset() -> Ruleset:
    """Return the bundled default ruleset (parsed once per process)."""

    text = (
        resources.files("statement_import.rulesets")
        .joinpath(_DEFAULT_RESOURCE)
        .read_text(encoding="utf-8")
    )
    return parse_ruleset(text, source=f"statement_import.rulesets/{_DEFAULT_RESOURCE}")


def load_ruleset(path: str | PathLike[str] | None = None) -> Ruleset:
    """Load a ruleset from ``path``, the environment, or the bundled default."""

    if path is None:
        env_val = os.getenv(_RULESET_ENV_VAR)
        if env_val and env_val.strip():
            path = env_val.strip()
    if path is None:
        return default_ruleset()

    p = Path(path).expanduser()
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise RulesetError(f"cannot read ruleset {p}: {e}") from e
    ruleset = parse_ruleset(text, source=str(p))
    _logger.debug("loaded ruleset %r from %s", ruleset.name, p)
    return ruleset


__all__ = [
    "KeywordRule",
    "ColumnKeywords",
    "Ruleset",
    "RulesetError",
    "parse_ruleset",
    "default_ruleset",
    "load_ruleset",
]
