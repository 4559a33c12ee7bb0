#!/usr/bin/env python3
"""
Scrape vitaherbapedia.com into the content store.

Usage:
    python -m herbapedia.scrape                    # English (baseline)
    python -m herbapedia.scrape --lang zh-HK       # Traditional Chinese
    python -m herbapedia.scrape --lang zh-CN       # Simplified Chinese
    python -m herbapedia.scrape --all-languages    # en, then zh-HK, zh-CN
    python -m herbapedia.scrape --rebuild          # all languages into a fresh store
    python -m herbapedia.scrape --dry-run          # list category URLs only
    python -m herbapedia.scrape --skip-images      # no image downloads

Output structure:
    {content_dir}/{slug}/{en,zh-HK,zh-CN}.yaml
    {content_dir}/{slug}/images/{slug}.jpg
    {content_dir}/index.yaml

English pages create entities. Chinese pages are matched to an existing
English entity and dropped when no match is found.
"""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from tqdm import tqdm

from .extractors import ListingCrawler, parse_page
from .fetch import PageFetcher
from .matching import BaselineIndex, match_record
from .models import LocalizedRecord
from .site import BASELINE_LANGUAGE, CATEGORIES, LANGUAGES, category_url
from .store import ContentStore, image_relpath, staged_rebuild
from .utils.config import Config, ScraperConfig
from .utils.exceptions import ExtractionError
from .utils.logger import get_logger, add_logging_arguments, setup_logging_from_args

logger = get_logger(__name__)


@dataclass
class LanguageResult:
    """Outcome of one language pass."""
    language: str
    saved: List[str] = field(default_factory=list)
    skipped: List[Tuple[str, str]] = field(default_factory=list)   # (url, reason)
    unmatched: List[LocalizedRecord] = field(default_factory=list)


class Scraper:
    """Runs language passes against one content store."""

    def __init__(
        self,
        fetcher: PageFetcher,
        store: ContentStore,
        config: Optional[ScraperConfig] = None,
        *,
        skip_images: bool = False,
        dry_run: bool = False,
    ):
        self.fetcher = fetcher
        self.store = store
        self.config = config or ScraperConfig()
        self.skip_images = skip_images
        self.dry_run = dry_run
        self.crawler = ListingCrawler(fetcher, self.config.base_url, self.config.max_pages)

    def run(self, languages: List[str]) -> List[LanguageResult]:
        """
        Scrape the given languages in order, baseline first.

        The baseline index starts from the English records already in the
        store and grows as the English pass saves new ones.
        """
        ordered = sorted(set(languages), key=LANGUAGES.index)
        index = BaselineIndex.from_records(self.store.load_baseline())

        results = [self.scrape_language(lang, index) for lang in ordered]

        if not self.dry_run:
            self.store.write_index()
        return results

    def scrape_language(self, language: str, index: BaselineIndex) -> LanguageResult:
        result = LanguageResult(language=language)
        logger.info("%s", '=' * 50)
        logger.info("Scraping language: %s", language)
        logger.info("%s", '=' * 50)

        if language != BASELINE_LANGUAGE and not len(index) and not self.dry_run:
            logger.warning("No English records to match against; run the English pass first")

        for category in CATEGORIES:
            if self.dry_run:
                logger.info("[DRY RUN] Would scrape %s",
                            category_url(self.config.base_url, category, language))
                continue

            urls = self.crawler.crawl(category, language)
            self.fetcher.pause()
            for url in tqdm(urls, desc=f"{category} [{language}]", unit="page", disable=None):
                self._scrape_item(url, language, index, result)
                self.fetcher.pause()

        logger.info("[%s] saved %d, skipped %d, unmatched %d",
                    language, len(result.saved), len(result.skipped), len(result.unmatched))
        return result

    def _scrape_item(self, url: str, language: str, index: BaselineIndex, result: LanguageResult) -> None:
        html = self.fetcher.fetch(url)
        if html is None:
            result.skipped.append((url, 'fetch_failed'))
            return

        try:
            record = parse_page(html, url, language)
        except ExtractionError as e:
            logger.info("Skipping %s - %s", url, e.reason)
            result.skipped.append((url, e.reason or 'extraction_failed'))
            return

        if language == BASELINE_LANGUAGE:
            self._warn_if_saved(record, result)
            self._save_baseline(record)
            index.add(record)
        else:
            match = match_record(record, index)
            if match is None:
                logger.warning("No English match for %r (%s)", record.title, url)
                result.unmatched.append(record)
                return
            baseline = index.records[match.slug]
            logger.debug("Matched %r -> %s via %s", record.title, match.slug, match.strategy)
            record.slug = match.slug
            self._warn_if_saved(record, result)
            record.category = record.category or baseline.category
            record.image = baseline.image or image_relpath(baseline.slug, baseline.image_url)
            self.store.write_record(record)

        result.saved.append(record.slug)

    @staticmethod
    def _warn_if_saved(record: LocalizedRecord, result: LanguageResult) -> None:
        if record.slug in result.saved:
            logger.warning("%s already saved in this %s pass; overwriting with %s",
                           record.slug, result.language, record.source_url,
                           extra={"slug": record.slug, "url": record.source_url})

    def _save_baseline(self, record: LocalizedRecord) -> None:
        logger.debug("Title: %s | Slug: %s | Sections: %s", record.title, record.slug,
                     ', '.join(record.sections) or 'none')
        record.image = image_relpath(record.slug, record.image_url)
        path = self.store.write_record(record)
        logger.info("Saved: %s", path)

        if self.skip_images or not record.image_url:
            return
        image_path = self.store.image_path(record.slug, record.image_url)
        if image_path.exists():
            logger.debug("Image exists: %s", image_path.name)
            return
        self.fetcher.download(record.image_url, image_path)


def print_summary(results: List[LanguageResult]) -> None:
    print(f"\n{'=' * 50}")
    print("Scraping complete!")
    for r in results:
        print(f"  {r.language}: {len(r.saved)} saved, {len(r.skipped)} skipped, "
              f"{len(r.unmatched)} unmatched")

    unmatched = [rec for r in results for rec in r.unmatched]
    if unmatched:
        print(f"\nUnmatched records ({len(unmatched)}) - add them to the manual override map:")
        for rec in unmatched:
            print(f"  [{rec.language}] {rec.title}  {rec.source_url}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Herbapedia scraper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m herbapedia.scrape
    python -m herbapedia.scrape --lang zh-HK
    python -m herbapedia.scrape --all-languages --skip-images
    python -m herbapedia.scrape --rebuild
    python -m herbapedia.scrape --all-languages --quiet --log-file scrape.log --log-json
        """
    )
    parser.add_argument("--lang", choices=LANGUAGES, default=BASELINE_LANGUAGE,
                        help="Language to scrape (default: en)")
    parser.add_argument("--all-languages", action="store_true", help="Scrape en, zh-HK and zh-CN")
    parser.add_argument("--rebuild", action="store_true",
                        help="Scrape all languages into a fresh store and swap it in")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be scraped")
    parser.add_argument("--skip-images", action="store_true", help="Skip image downloads")
    parser.add_argument("--content-dir", help="Content store directory")
    parser.add_argument("--config", help="YAML config file")
    add_logging_arguments(parser)
    args = parser.parse_args(argv)

    setup_logging_from_args(args)
    config = Config.load(args.config)
    content_dir = Path(args.content_dir) if args.content_dir else config.store.content_dir
    languages = LANGUAGES if (args.all_languages or args.rebuild) else [args.lang]
    fetcher = PageFetcher.from_config(config.scraper)

    logger.info("Content store: %s", content_dir)

    if args.rebuild and not args.dry_run:
        with staged_rebuild(content_dir) as staging:
            scraper = Scraper(fetcher, ContentStore(staging), config.scraper,
                              skip_images=args.skip_images)
            results = scraper.run(languages)
    else:
        scraper = Scraper(fetcher, ContentStore(content_dir), config.scraper,
                          skip_images=args.skip_images, dry_run=args.dry_run)
        results = scraper.run(languages)

    print_summary(results)
    return 0


if __name__ == "__main__":
    sys.exit(main())
