"""
Schema verification across language variants.

English is the authority: every field present in ``en.yaml`` must also be
present in ``zh-HK.yaml`` and ``zh-CN.yaml``. The pass is read-only.

Usage:
    from herbapedia.store import ContentStore
    from herbapedia.verifier import verify_store

    result = verify_store(ContentStore(content_dir))
    print(result.complete, result.incomplete)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .models import LocalizedRecord, utc_now
from .site import BASELINE_LANGUAGE, LANGUAGE_NAMES, LANGUAGES
from .store import ContentStore
from .utils.config import PRIMARY_FIELDS
from .utils.exceptions import StoreError

MISSING_FIELD = 'missing_field'
EXTRA_FIELD = 'extra_field'


@dataclass(frozen=True)
class SchemaIssue:
    type: str        # missing_field | extra_field
    language: str
    field: str

    @property
    def message(self) -> str:
        name = LANGUAGE_NAMES.get(self.language, self.language)
        if self.type == MISSING_FIELD:
            return f"{name} is missing '{self.field}' which exists in English"
        return f"{name} has '{self.field}' which does NOT exist in English (extra content)"

    def to_dict(self) -> Dict[str, str]:
        return {'type': self.type, 'language': self.language,
                'field': self.field, 'message': self.message}


@dataclass
class EntityReport:
    """Findings for one entity directory."""
    slug: str
    path: str
    source_url: Optional[str] = None
    baseline_title: Optional[str] = None
    missing_languages: List[str] = field(default_factory=list)
    parse_errors: Dict[str, str] = field(default_factory=dict)
    languages: Dict[str, List[str]] = field(default_factory=dict)
    issues: List[SchemaIssue] = field(default_factory=list)

    def missing_fields(self, language: Optional[str] = None) -> List[SchemaIssue]:
        return [i for i in self.issues
                if i.type == MISSING_FIELD and (language is None or i.language == language)]

    def extra_fields(self) -> List[SchemaIssue]:
        return [i for i in self.issues if i.type == EXTRA_FIELD]

    @property
    def is_complete(self) -> bool:
        return not self.missing_languages and not self.parse_errors and not self.missing_fields()

    def missing_fields_by_language(self) -> Dict[str, List[str]]:
        grouped: Dict[str, List[str]] = {}
        for issue in self.missing_fields():
            grouped.setdefault(issue.language, []).append(issue.field)
        return grouped

    def to_dict(self) -> Dict[str, Any]:
        languages: Dict[str, Any] = {lang: {'fields': fields} for lang, fields in self.languages.items()}
        for lang, error in self.parse_errors.items():
            languages[lang] = {'error': error, 'fields': []}
        return {
            'slug': self.slug,
            'path': self.path,
            'source_url': self.source_url,
            'baseline_title': self.baseline_title,
            'missing_languages': list(self.missing_languages),
            'languages': languages,
            'missing_fields': self.missing_fields_by_language(),
            'schema_inconsistencies': [i.to_dict() for i in self.issues],
            'complete': self.is_complete,
        }


def coverage_percent(present: int, total: int) -> int:
    """round(present / total * 100), halves rounded up; 0 for an empty store."""
    if total <= 0:
        return 0
    return (200 * present + total) // (2 * total)


@dataclass
class VerificationResult:
    """Aggregate over the whole store."""
    timestamp: str
    total: int = 0
    complete: int = 0
    incomplete: int = 0
    missing_languages: Dict[str, int] = field(default_factory=lambda: {lang: 0 for lang in LANGUAGES})
    parse_errors: Dict[str, int] = field(default_factory=lambda: {lang: 0 for lang in LANGUAGES})
    schema_inconsistencies: int = 0
    extra_fields: int = 0
    field_gaps: Dict[str, Dict[str, int]] = field(
        default_factory=lambda: {lang: {} for lang in LANGUAGES if lang != BASELINE_LANGUAGE}
    )
    entities: List[EntityReport] = field(default_factory=list)

    @property
    def problematic(self) -> List[EntityReport]:
        return [e for e in self.entities if not e.is_complete]

    def coverage(self, language: str) -> Tuple[int, int]:
        """(files present, percentage) for one language."""
        present = self.total - self.missing_languages.get(language, 0)
        return present, coverage_percent(present, self.total)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'total': self.total,
            'summary': {
                'complete': self.complete,
                'incomplete': self.incomplete,
                'missing_languages': dict(self.missing_languages),
                'parse_errors': dict(self.parse_errors),
                'coverage': {lang: self.coverage(lang)[1] for lang in LANGUAGES},
                'schema_inconsistencies': self.schema_inconsistencies,
                'extra_fields': self.extra_fields,
                'field_gaps': {lang: dict(gaps) for lang, gaps in self.field_gaps.items()},
            },
            'entities': [e.to_dict() for e in self.entities],
            'problematic': [e.to_dict() for e in self.problematic],
        }


def diff_fields(baseline: List[str], other: List[str], language: str) -> List[SchemaIssue]:
    """missing_field for baseline-only fields, extra_field for other-only fields."""
    baseline_set = set(baseline)
    other_set = set(other)
    issues = [SchemaIssue(MISSING_FIELD, language, f) for f in baseline if f not in other_set]
    issues += [SchemaIssue(EXTRA_FIELD, language, f) for f in other if f not in baseline_set]
    return issues


def load_entity(store: ContentStore, slug: str) -> Tuple[Dict[str, LocalizedRecord], EntityReport]:
    """Read every language file of an entity, noting missing and unparseable ones."""
    report = EntityReport(slug=slug, path=str(store.entity_dir(slug)))
    records: Dict[str, LocalizedRecord] = {}
    for lang in LANGUAGES:
        if not store.has_record(slug, lang):
            report.missing_languages.append(lang)
            continue
        try:
            records[lang] = store.read_record(slug, lang)
        except StoreError as e:
            report.parse_errors[lang] = e.message
    return records, report


def validate_entity(
    store: ContentStore,
    slug: str,
    fields: Optional[List[str]] = None,
) -> Tuple[Dict[str, LocalizedRecord], EntityReport]:
    """
    Check one entity against its baseline.

    Returns:
        (records by language, report). Records are returned so the repair
        flow can reuse them without re-reading.
    """
    fields = list(dict.fromkeys(fields if fields is not None else PRIMARY_FIELDS))
    records, report = load_entity(store, slug)

    for lang, record in records.items():
        report.languages[lang] = record.present_fields(fields)

    baseline = records.get(BASELINE_LANGUAGE)
    if baseline is None:
        return records, report

    report.source_url = baseline.source_url or None
    report.baseline_title = baseline.title or None
    baseline_fields = report.languages[BASELINE_LANGUAGE]

    for lang in LANGUAGES:
        if lang == BASELINE_LANGUAGE or lang not in records:
            continue
        report.issues.extend(diff_fields(baseline_fields, report.languages[lang], lang))

    return records, report


def verify_store(store: ContentStore, fields: Optional[List[str]] = None) -> VerificationResult:
    """Verify every entity directory of the store."""
    result = VerificationResult(timestamp=utc_now())

    for slug in store.slugs():
        _, report = validate_entity(store, slug, fields)
        result.entities.append(report)
        result.total += 1

        for lang in report.missing_languages:
            result.missing_languages[lang] += 1
        for lang in report.parse_errors:
            result.parse_errors[lang] += 1

        for issue in report.missing_fields():
            result.schema_inconsistencies += 1
            gaps = result.field_gaps.setdefault(issue.language, {})
            gaps[issue.field] = gaps.get(issue.field, 0) + 1
        result.extra_fields += len(report.extra_fields())

        if report.is_complete:
            result.complete += 1
        else:
            result.incomplete += 1

    return result
