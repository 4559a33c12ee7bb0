"""
Page extractors for vitaherbapedia.com.

    ListingCrawler   - item URLs of a category (paginated)
    parse_page       - product page -> LocalizedRecord
    extract_sections - content blocks -> canonical fields

Usage:
    from herbapedia.extractors import ListingCrawler, parse_page

    urls = ListingCrawler(fetcher, base_url).crawl("vitamins", "en")
    record = parse_page(fetcher.fetch(urls[0]), urls[0], "en")
"""

from .sections import clean_text, classify_title, extract_sections
from .page import parse_page, derive_slug, safe_filename
from .listing import ListingCrawler, extract_item_urls, parse_result_count

__all__ = [
    'clean_text',
    'classify_title',
    'extract_sections',
    'parse_page',
    'derive_slug',
    'safe_filename',
    'ListingCrawler',
    'extract_item_urls',
    'parse_result_count',
]
