"""Transfer filtering, note cleaning and pattern clustering.

Clustering groups transactions whose notes share an extracted "pattern",
usually the merchant token, so the user can assign one category per group
instead of one per row. The key is a heuristic: unrelated merchants may
collide, which is accepted.

Groups are keyed by ``(pattern, is_income)``. Income and expenses that share
a pattern therefore land in separate groups, so ``is_income`` always holds
for every member of a group.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from .models import NormalizedTransaction, PatternGroup
from .ruleset import default_ruleset

MIN_GROUP_SIZE = 2
MAX_EXAMPLE_DESCRIPTIONS = 3
MIN_PATTERN_LENGTH = 3

_SEPARATORS_RE = re.compile(r"[\s\-_.,;]+")
_NUMERIC_RE = re.compile(r"[0-9]+")


def should_skip(description: str, skip_patterns: Iterable[str] | None = None) -> bool:
    """Return True when ``description`` looks like an internal transfer."""

    patterns = default_ruleset().skip_patterns if skip_patterns is None else skip_patterns
    lower = description.lower()
    return any(p.lower() in lower for p in patterns)


def clean_note(description: str, replacements: Mapping[str, str] | None = None) -> str:
    """Replace the whole note with the first matching canonical label.

    Keys are tested in table order; without a match the description is
    returned untouched.
    """

    table = default_ruleset().note_replacements if replacements is None else replacements
    lower = description.lower()
    for pattern, replacement in table.items():
        if pattern.lower() in lower:
            return replacement
    return description


def extract_pattern(description: str, vendor_prefixes: Sequence[str] | None = None) -> str:
    """Extract the cluster key (usually the merchant token) from a description.

    >>> extract_pattern("VIPPS*Joe's Coffee 123")
    "joe's"
    """

    prefixes = default_ruleset().vendor_prefixes if vendor_prefixes is None else vendor_prefixes
    cleaned = description.lower().strip()
    for prefix in prefixes:
        p = prefix.lower()
        if p and cleaned.startswith(p):
            cleaned = cleaned[len(p) :]
            break
    cleaned = cleaned.strip()

    for part in _SEPARATORS_RE.split(cleaned):
        if len(part) >= MIN_PATTERN_LENGTH and not _NUMERIC_RE.fullmatch(part):
            return part

    words = cleaned.split()
    return words[0] if words else cleaned


@dataclass(slots=True)
class _GroupAccumulator:
    pattern: str
    is_income: bool
    count: int = 0
    total: Decimal = Decimal("0")
    descriptions: list[str] = field(default_factory=list)
    transaction_ids: list[str] = field(default_factory=list)

    def add(self, tx: NormalizedTransaction) -> None:
        self.count += 1
        self.total += tx.signed_amount
        self.transaction_ids.append(tx.id)
        if len(self.descriptions) < MAX_EXAMPLE_DESCRIPTIONS and tx.note not in self.descriptions:
            self.descriptions.append(tx.note)

    def freeze(self) -> PatternGroup:
        return PatternGroup(
            pattern=self.pattern,
            count=self.count,
            total_amount=self.total,
            descriptions=tuple(self.descriptions),
            transaction_ids=tuple(self.transaction_ids),
            is_income=self.is_income,
        )


def detect_patterns(
    transactions: Iterable[NormalizedTransaction],
    *,
    vendor_prefixes: Sequence[str] | None = None,
) -> list[PatternGroup]:
    """Cluster ``transactions`` by extracted pattern.

    Groups with fewer than two members are dropped. The rest are ordered by
    count descending; ties keep the order in which their key first appeared.
    """

    by_key: dict[tuple[str, bool], _GroupAccumulator] = {}
    for tx in transactions:
        key = (extract_pattern(tx.note, vendor_prefixes), tx.is_income)
        acc = by_key.get(key)
        if acc is None:
            acc = by_key[key] = _GroupAccumulator(pattern=key[0], is_income=key[1])
        acc.add(tx)

    groups = [acc.freeze() for acc in by_key.values() if acc.count >= MIN_GROUP_SIZE]
    # list.sort is stable, so equal counts keep first-seen order.
    groups.sort(key=lambda g: g.count, reverse=True)
    return groups


__all__ = [
    "should_skip",
    "clean_note",
    "extract_pattern",
    "detect_patterns",
]
