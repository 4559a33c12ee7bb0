"""
Category listing crawler.

Collects every item URL of one category in one locale by walking the
numbered listing pages until the advertised result count is reached.
"""
import re
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ..fetch import PageFetcher
from ..site import category_url
from ..utils.logger import get_logger

logger = get_logger(__name__)

# An item link carries a path segment after /shop/; the bare shop root is not an item
ITEM_PATTERN = re.compile(r'/shop/[^/?#\s]+')
MAX_PAGES = 20

# "Showing 1–9 of 100 results", then the zh-HK and zh-CN phrasings
RESULT_COUNT_PATTERNS = [
    re.compile(r'Showing\s+\d+\s*(?:–|—|-|&ndash;|&#8211;)\s*\d+\s+of\s+(\d+)', re.IGNORECASE),
    re.compile(r'顯示\s*(\d+)\s*筆結果'),
    re.compile(r'显示\s*(\d+)\s*条'),
]


def extract_item_urls(html: str, base_url: str) -> List[str]:
    """Absolute item-page URLs in document order, deduplicated by exact string."""
    soup = BeautifulSoup(html, 'html.parser')
    urls: List[str] = []
    seen = set()
    for link in soup.find_all('a', href=True):
        href = link['href'].strip()
        if not ITEM_PATTERN.search(href):
            continue
        url = href if href.startswith('http') else urljoin(base_url + '/', href.lstrip('/'))
        if url not in seen:
            seen.add(url)
            urls.append(url)
    return urls


def parse_result_count(html: str) -> Optional[int]:
    """Total item count advertised on a listing page, or None."""
    for pattern in RESULT_COUNT_PATTERNS:
        match = pattern.search(html)
        if match:
            return int(match.group(1))
    return None


class ListingCrawler:
    """Walks the paginated listing of a category."""

    def __init__(self, fetcher: PageFetcher, base_url: str, max_pages: int = MAX_PAGES):
        self.fetcher = fetcher
        self.base_url = base_url.rstrip('/')
        self.max_pages = max_pages

    def crawl(self, category: str, language: str) -> List[str]:
        """
        Discover all item URLs for a category.

        Args:
            category: Category key (e.g. "chinese-herbs")
            language: Language code (e.g. "zh-HK")

        Returns:
            Unique item URLs. Empty or partial if any fetch fails.
        """
        first_url = category_url(self.base_url, category, language)
        logger.info("Category %s [%s]: %s", category, language, first_url)

        html = self.fetcher.fetch(first_url)
        if html is None:
            logger.warning("Failed to fetch category page %s", first_url)
            return []

        urls = extract_item_urls(html, self.base_url)
        seen = set(urls)
        total = parse_result_count(html)
        if total is None:
            total = len(urls)
        logger.info("  Found %d items (first page: %d)", total, len(urls))

        page = 2
        while len(urls) < total and page <= self.max_pages:
            self.fetcher.pause()
            page_url = category_url(self.base_url, category, language, page)
            logger.debug("  Fetching page %d: %s", page, page_url)
            page_html = self.fetcher.fetch(page_url)
            if page_html is None:
                break

            new_urls = [u for u in extract_item_urls(page_html, self.base_url) if u not in seen]
            if not new_urls:
                break
            urls.extend(new_urls)
            seen.update(new_urls)
            page += 1

        logger.info("  Total URLs collected: %d", len(urls))
        return urls
