"""
Cross-language matching.

Links a zh-HK / zh-CN record to the English entity it translates. Strategies
are tried in order of precision; the first hit wins:

    1. exact scientific name
    2. partial scientific name (cultivar / variety suffixes)
    3. image filename (locales often reuse the same upload)
    4. title containment ("Calcium (鈣)" contains "Calcium")

Usage:
    index = BaselineIndex.from_records(english_records)
    result = match_record(candidate, index)
    if result:
        print(result.slug, result.strategy)
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .extractors.page import derive_slug
from .models import LocalizedRecord

_NON_LETTER_RE = re.compile(r'[^a-z\s]')
_WS_RE = re.compile(r'\s+')


def normalize_scientific_name(name: Optional[str]) -> str:
    """Lower-case, letters and single spaces only."""
    if not name:
        return ''
    lowered = _NON_LETTER_RE.sub('', name.lower())
    return _WS_RE.sub(' ', lowered).strip()


@dataclass
class BaselineIndex:
    """English records of one run, keyed for lookup. Built once, then read-only."""

    records: Dict[str, LocalizedRecord] = field(default_factory=dict)
    by_scientific_name: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: Iterable[LocalizedRecord]) -> "BaselineIndex":
        index = cls()
        for record in records:
            index.add(record)
        return index

    def add(self, record: LocalizedRecord) -> None:
        self.records[record.slug] = record
        normalized = normalize_scientific_name(record.scientific_name)
        if normalized:
            self.by_scientific_name.setdefault(normalized, record.slug)

    def __contains__(self, slug: str) -> bool:
        return slug in self.records

    def __len__(self) -> int:
        return len(self.records)


# ---------------------------------------------------------------------------
# Strategies: (candidate, index) -> slug | None
# ---------------------------------------------------------------------------

def match_exact_scientific_name(candidate: LocalizedRecord, index: BaselineIndex) -> Optional[str]:
    normalized = normalize_scientific_name(candidate.scientific_name)
    if not normalized:
        return None
    return index.by_scientific_name.get(normalized)


def match_partial_scientific_name(candidate: LocalizedRecord, index: BaselineIndex) -> Optional[str]:
    normalized = normalize_scientific_name(candidate.scientific_name)
    if not normalized:
        return None
    for slug, record in index.records.items():
        other = normalize_scientific_name(record.scientific_name)
        if other and (normalized in other or other in normalized):
            return slug
    return None


def match_image_filename(candidate: LocalizedRecord, index: BaselineIndex) -> Optional[str]:
    slug = derive_slug(candidate.image_url)
    if slug and slug in index:
        return slug
    return None


def match_title(candidate: LocalizedRecord, index: BaselineIndex) -> Optional[str]:
    title = candidate.title.lower().strip()
    if not title:
        return None
    for slug, record in index.records.items():
        other = record.title.lower().strip()
        if other and (other in title or title in other):
            return slug
    for slug in index.records:
        if slug.replace('-', ' ') in title:
            return slug
    return None


MatchStrategy = Callable[[LocalizedRecord, BaselineIndex], Optional[str]]

STRATEGIES: List[Tuple[str, MatchStrategy]] = [
    ('scientific_name', match_exact_scientific_name),
    ('partial_scientific_name', match_partial_scientific_name),
    ('image_filename', match_image_filename),
    ('title', match_title),
]


@dataclass(frozen=True)
class MatchResult:
    slug: str
    strategy: str


def match_record(
    candidate: LocalizedRecord,
    index: BaselineIndex,
    strategies: List[Tuple[str, MatchStrategy]] = STRATEGIES,
) -> Optional[MatchResult]:
    """Run the strategies in order; None if every one of them misses."""
    for name, strategy in strategies:
        slug = strategy(candidate, index)
        if slug:
            return MatchResult(slug=slug, strategy=name)
    return None
