"""
YAML content store.

Layout:
    {content_dir}/
    ├── index.yaml
    └── {slug}/
        ├── en.yaml
        ├── zh-HK.yaml
        ├── zh-CN.yaml
        └── images/{slug}.jpg

Every language file is rewritten whole; there is no merge on write.
"""
import shutil
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Iterator, List, Optional
from urllib.parse import urlparse

import yaml

from .models import CANONICAL_FIELDS, LocalizedRecord, utc_now
from .site import BASELINE_LANGUAGE, SOURCE_NAME
from .utils.exceptions import StoreError
from .utils.logger import get_logger

logger = get_logger(__name__)

INDEX_FILE = 'index.yaml'
IMAGES_DIR = 'images'
DEFAULT_IMAGE_EXT = '.jpg'

_FIXED_KEYS = {'id', 'slug', 'category', 'title', 'scientific_name', 'image', 'metadata', 'source_url'}


class LiteralText(str):
    """String dumped as a YAML literal block."""


class _StoreDumper(yaml.SafeDumper):
    pass


def _literal_representer(dumper: yaml.SafeDumper, data: LiteralText):
    return dumper.represent_scalar('tag:yaml.org,2002:str', str(data), style='|')


_StoreDumper.add_representer(LiteralText, _literal_representer)


def image_relpath(slug: str, image_url: Optional[str]) -> str:
    """Relative path of an entity's image, keeping the source extension."""
    ext = DEFAULT_IMAGE_EXT
    if image_url:
        suffix = PurePosixPath(urlparse(image_url).path).suffix
        if suffix:
            ext = suffix.lower()
    return f"{IMAGES_DIR}/{slug}{ext}"


# =============================================================================
# DOCUMENT <-> RECORD
# =============================================================================

def record_to_document(record: LocalizedRecord) -> Dict[str, Any]:
    """Ordered mapping in the persisted key order."""
    doc: Dict[str, Any] = {
        'id': record.slug,
        'slug': record.slug,
        'category': record.category,
        'title': record.title,
    }
    if record.scientific_name:
        doc['scientific_name'] = record.scientific_name
    doc['image'] = record.image or image_relpath(record.slug, record.image_url)

    for key in CANONICAL_FIELDS:
        value = record.sections.get(key)
        if value and value.strip():
            doc[key] = LiteralText(value)
    for key, value in record.extra.items():
        if key not in doc and value and value.strip():
            doc[key] = LiteralText(value)

    doc['metadata'] = {
        'source': SOURCE_NAME,
        'source_url': record.source_url,
        'scraped_at': record.scraped_at,
        'language': record.language,
    }
    return doc


def dump_record(record: LocalizedRecord) -> str:
    """Serialize a record with its header comment."""
    header = (
        f"# {record.title}\n"
        f"# Source: {record.source_url or 'N/A'}\n"
        f"# Language: {record.language}\n\n"
    )
    body = yaml.dump(
        record_to_document(record),
        Dumper=_StoreDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=10000,
    )
    return header + body


def _as_text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def document_to_record(data: Dict[str, Any], language: Optional[str] = None) -> LocalizedRecord:
    """Build a record from a parsed document, tolerating unknown keys."""
    metadata = data.get('metadata') or {}
    if not isinstance(metadata, dict):
        metadata = {}

    sections: Dict[str, str] = {}
    extra: Dict[str, str] = {}
    for key, value in data.items():
        if key in _FIXED_KEYS or not isinstance(value, str):
            continue
        if key in CANONICAL_FIELDS:
            sections[key] = value.strip()
        else:
            extra[key] = value.strip()

    return LocalizedRecord(
        source_url=_as_text(metadata.get('source_url') or data.get('source_url')),
        language=_as_text(metadata.get('language') or language),
        title=_as_text(data.get('title')),
        slug=_as_text(data.get('slug') or data.get('id')),
        category=_as_text(data.get('category')),
        scientific_name=_as_text(data.get('scientific_name')),
        image=_as_text(data.get('image')) or None,
        sections=sections,
        extra=extra,
        scraped_at=_as_text(metadata.get('scraped_at')) or utc_now(),
    )


# =============================================================================
# STORE
# =============================================================================

class ContentStore:
    """File-system content store rooted at ``root``."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def entity_dir(self, slug: str) -> Path:
        return self.root / slug

    def language_path(self, slug: str, language: str) -> Path:
        return self.root / slug / f"{language}.yaml"

    def image_path(self, slug: str, image_url: Optional[str]) -> Path:
        return self.root / slug / image_relpath(slug, image_url)

    def slugs(self) -> List[str]:
        """Entity directories, sorted; hidden entries excluded."""
        if not self.root.exists():
            return []
        return sorted(
            p.name for p in self.root.iterdir()
            if p.is_dir() and not p.name.startswith('.')
        )

    def has_entity(self, slug: str) -> bool:
        return self.entity_dir(slug).is_dir()

    def has_record(self, slug: str, language: str) -> bool:
        return self.language_path(slug, language).is_file()

    def write_record(self, record: LocalizedRecord) -> Path:
        """Overwrite the language file of a record, creating directories as needed."""
        if not record.slug:
            raise StoreError("Record has no slug", operation='write')
        path = self.language_path(record.slug, record.language)
        (path.parent / IMAGES_DIR).mkdir(parents=True, exist_ok=True)
        try:
            path.write_text(dump_record(record), encoding='utf-8')
        except OSError as e:
            raise StoreError(f"Failed to write {path}", file_path=str(path),
                             operation='write', cause=e) from e
        return path

    def read_record(self, slug: str, language: str) -> LocalizedRecord:
        """
        Load one language file.

        Raises:
            StoreError: Missing, unreadable, or not a YAML mapping
        """
        path = self.language_path(slug, language)
        try:
            text = path.read_text(encoding='utf-8')
        except OSError as e:
            raise StoreError(f"Failed to read {path}", file_path=str(path),
                             operation='read', cause=e) from e
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise StoreError("Failed to parse YAML", file_path=str(path),
                             operation='read', cause=e) from e
        if not isinstance(data, dict):
            raise StoreError("Document is not a mapping", file_path=str(path), operation='read')

        record = document_to_record(data, language)
        record.slug = record.slug or slug
        record.language = language
        return record

    def load_baseline(self) -> List[LocalizedRecord]:
        """Every readable baseline record in the store."""
        records = []
        for slug in self.slugs():
            if not self.has_record(slug, BASELINE_LANGUAGE):
                continue
            try:
                records.append(self.read_record(slug, BASELINE_LANGUAGE))
            except StoreError as e:
                logger.warning("Skipping %s: %s", slug, e)
        return records

    def write_index(self) -> Dict[str, Any]:
        """
        Regenerate index.yaml from the baseline record of every entity.

        Returns:
            {"total": int, "categories": {category: count}}
        """
        slugs = self.slugs()
        categories: Dict[str, int] = {}
        for record in self.load_baseline():
            if record.category:
                categories[record.category] = categories.get(record.category, 0) + 1

        index = {'total': len(slugs), 'categories': dict(sorted(categories.items()))}
        header = f"# Herbapedia Index\n# Auto-generated at {utc_now()}\n\n"
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / INDEX_FILE
        path.write_text(
            header + yaml.dump(index, sort_keys=False, allow_unicode=True, default_flow_style=False),
            encoding='utf-8',
        )
        logger.info("Saved index with %d entries", index['total'])
        return index


# =============================================================================
# STAGED REBUILD
# =============================================================================

def swap_in(staging: Path, target: Path) -> None:
    """Replace ``target`` with ``staging`` using renames only."""
    backup = target.with_name(target.name + '.previous')
    if backup.exists():
        shutil.rmtree(backup)
    try:
        if target.exists():
            target.rename(backup)
        try:
            staging.rename(target)
        except OSError:
            if backup.exists():
                backup.rename(target)
            raise
    except OSError as e:
        raise StoreError(f"Failed to swap {staging} into {target}",
                         file_path=str(target), operation='swap', cause=e) from e
    if backup.exists():
        shutil.rmtree(backup)


@contextmanager
def staged_rebuild(target: Path) -> Iterator[Path]:
    """
    Build a fresh store next to ``target`` and swap it in on success.

    The live store is untouched until the block completes; on any exception
    the staging directory is discarded.

    Usage:
        with staged_rebuild(content_dir) as staging:
            scrape_into(ContentStore(staging))
    """
    target = Path(target)
    staging = target.with_name(target.name + '.staging')
    if staging.exists():
        shutil.rmtree(staging)
    staging.mkdir(parents=True)
    try:
        yield staging
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise
    swap_in(staging, target)
    logger.info("Swapped rebuilt store into %s", target)
