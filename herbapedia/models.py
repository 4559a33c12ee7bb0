"""
Record types shared by the extractor, matcher, store and verifier.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

# Persisted order of content sections
CANONICAL_FIELDS: List[str] = [
    'history',
    'introduction',
    'botanical_source',
    'traditional_usage',
    'modern_usage',
    'modern_research',
    'functions',
    'importance',
    'food_sources',
    'precautions',
    'dosage',
]


def is_present(value) -> bool:
    """A field is present iff it is a string with non-whitespace content."""
    return isinstance(value, str) and value.strip() != ''


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'


@dataclass
class LocalizedRecord:
    """One entity's content in one language."""
    source_url: str
    language: str
    title: str = ''
    slug: str = ''
    category: str = ''
    scientific_name: str = ''
    image_url: Optional[str] = None
    image: Optional[str] = None  # relative path inside the entity directory
    sections: Dict[str, str] = field(default_factory=dict)
    # Non-canonical keys found in a stored document, kept verbatim
    extra: Dict[str, str] = field(default_factory=dict)
    scraped_at: str = field(default_factory=utc_now)

    def present_fields(self, fields: Optional[List[str]] = None) -> List[str]:
        """Fields (canonical order) whose value is a non-empty trimmed string."""
        candidates = fields if fields is not None else CANONICAL_FIELDS
        return [f for f in candidates
                if is_present(self.sections.get(f, self.extra.get(f)))]
