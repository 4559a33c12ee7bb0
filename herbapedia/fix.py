#!/usr/bin/env python3
"""
Repair schema gaps by re-fetching translated source pages.

Usage:
    python -m herbapedia.fix              # update files in place
    python -m herbapedia.fix --dry-run    # report what would change

For every entity the verifier's diff is reused. Each translation that lacks
a field present in English is re-fetched from its own source URL (or the
English URL with the locale segment swapped), re-classified, and only the
missing fields that were found are written back. Fields the source page does
not have are reported and left empty.
"""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from bs4 import BeautifulSoup

from .extractors.sections import extract_sections
from .fetch import PageFetcher
from .site import BASELINE_LANGUAGE, localize_url
from .store import ContentStore
from .utils.config import Config
from .utils.logger import get_logger, add_logging_arguments, setup_logging_from_args
from .verifier import validate_entity

logger = get_logger(__name__)

UNCHANGED = 'unchanged'
FIXED = 'fixed'
HAS_ISSUES = 'has_issues'


@dataclass
class EntityFix:
    """What the repair pass did for one entity."""
    slug: str
    filled: Dict[str, List[str]] = field(default_factory=dict)
    remaining: Dict[str, List[str]] = field(default_factory=dict)
    problems: List[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        if self.remaining or self.problems:
            return HAS_ISSUES
        if self.filled:
            return FIXED
        return UNCHANGED


@dataclass
class FixSummary:
    total: int = 0
    unchanged: int = 0
    fixed: int = 0
    has_issues: int = 0
    entities: List[EntityFix] = field(default_factory=list)

    def add(self, entity: EntityFix) -> None:
        self.entities.append(entity)
        self.total += 1
        if entity.status == FIXED:
            self.fixed += 1
        elif entity.status == UNCHANGED:
            self.unchanged += 1
        else:
            self.has_issues += 1


class SchemaFixer:
    """Backfills missing translation fields from the live site."""

    def __init__(
        self,
        fetcher: PageFetcher,
        store: ContentStore,
        fields: Optional[List[str]] = None,
        dry_run: bool = False,
    ):
        self.fetcher = fetcher
        self.store = store
        self.fields = fields
        self.dry_run = dry_run

    def run(self) -> FixSummary:
        summary = FixSummary()
        for slug in self.store.slugs():
            summary.add(self.fix_entity(slug))
        return summary

    def fix_entity(self, slug: str) -> EntityFix:
        """
        Repair one entity.

        Args:
            slug: Entity directory name

        Returns:
            EntityFix with filled and still-missing fields per language
        """
        records, report = validate_entity(self.store, slug, self.fields)
        result = EntityFix(slug=slug)

        for lang in report.missing_languages:
            result.problems.append(f"{lang}: missing file")
        for lang, error in report.parse_errors.items():
            result.problems.append(f"{lang}: parse error ({error})")

        baseline = records.get(BASELINE_LANGUAGE)
        if baseline is None:
            return result

        gaps = report.missing_fields_by_language()
        if not gaps:
            return result

        logger.info("%s - %d schema gaps", slug, sum(len(f) for f in gaps.values()))

        for lang, missing in gaps.items():
            record = records[lang]
            url = record.source_url or localize_url(baseline.source_url, lang)
            if not url:
                logger.warning("  No URL for %s", lang)
                result.problems.append(f"{lang}: no source URL")
                result.remaining[lang] = list(missing)
                continue

            logger.info("  Fetching %s from %s", lang, url)
            html = self.fetcher.fetch(url)
            self.fetcher.pause()
            if html is None:
                result.problems.append(f"{lang}: fetch failed")
                result.remaining[lang] = list(missing)
                continue

            sections = extract_sections(BeautifulSoup(html, 'html.parser'))
            filled = []
            for field_name in missing:
                if sections.get(field_name):
                    logger.info("  Found %s for %s", field_name, lang)
                    record.sections[field_name] = sections[field_name]
                    filled.append(field_name)
                else:
                    logger.warning("  %s not found in %s source", field_name, lang)
                    result.remaining.setdefault(lang, []).append(field_name)

            if not filled:
                continue
            result.filled[lang] = filled
            if self.dry_run:
                logger.info("  [DRY RUN] Would update %s", self.store.language_path(slug, lang))
            else:
                path = self.store.write_record(record)
                logger.info("  Updated %s", path)

        return result


def print_summary(summary: FixSummary) -> None:
    print(f"\n{'=' * 60}")
    print("SUMMARY")
    print('=' * 60)
    print(f"  Total entries: {summary.total}")
    print(f"  Schema complete: {summary.unchanged}")
    print(f"  Fixed: {summary.fixed}")
    print(f"  Still has issues: {summary.has_issues}")
    for entity in summary.entities:
        if entity.status != HAS_ISSUES:
            continue
        details = list(entity.problems)
        details += [f"{lang}: still missing {', '.join(fields)}"
                    for lang, fields in entity.remaining.items()]
        print(f"    {entity.slug}: {'; '.join(details)}")
    print('=' * 60)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Herbapedia schema fixer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m herbapedia.fix --dry-run
    python -m herbapedia.fix --content-dir src/content/herbs
        """
    )
    parser.add_argument("--dry-run", action="store_true", help="Show changes without writing")
    parser.add_argument("--content-dir", help="Content store directory")
    parser.add_argument("--config", help="YAML config file")
    add_logging_arguments(parser)
    args = parser.parse_args(argv)

    setup_logging_from_args(args)
    config = Config.load(args.config)
    content_dir = Path(args.content_dir) if args.content_dir else config.store.content_dir

    print('=' * 60)
    print("HERBAPEDIA SCHEMA FIX")
    print(f"Mode: {'DRY RUN (no changes)' if args.dry_run else 'LIVE (will update files)'}")
    print('=' * 60)

    fixer = SchemaFixer(
        PageFetcher.from_config(config.scraper),
        ContentStore(content_dir),
        fields=config.verify.fields,
        dry_run=args.dry_run,
    )
    print_summary(fixer.run())
    return 0


if __name__ == "__main__":
    sys.exit(main())
