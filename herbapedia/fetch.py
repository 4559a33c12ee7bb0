"""
Sequential, rate-limited HTTP access to the source site.

Only one request is ever outstanding; callers call ``pause()`` between
consecutive fetches so the site sees at most one request per ``delay``.

Usage:
    fetcher = PageFetcher(delay=0.3)
    html = fetcher.fetch(url)      # None on any failure
    fetcher.pause()
"""
import time
from pathlib import Path
from typing import Callable, Optional

import requests

from .utils.config import ScraperConfig
from .utils.exceptions import FetchError
from .utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_HTML_ENCODING = 'utf-8'


class PageFetcher:
    """requests.Session wrapper returning page text, or None on failure."""

    def __init__(
        self,
        delay: float = 0.3,
        timeout: float = 30.0,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.delay = delay
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'text/html,application/xhtml+xml',
        })
        if user_agent:
            self.session.headers['User-Agent'] = user_agent
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: ScraperConfig) -> "PageFetcher":
        return cls(delay=config.delay, timeout=config.timeout, user_agent=config.user_agent)

    def get(self, url: str) -> requests.Response:
        """
        GET a URL.

        Raises:
            FetchError: On network errors or non-2xx status
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(f"Request failed: {e}", url=url, cause=e) from e
        if not response.ok:
            raise FetchError(f"HTTP {response.status_code}", url=url,
                             status_code=response.status_code)
        return response

    def fetch(self, url: str) -> Optional[str]:
        """Fetch page text; log and return None on failure."""
        try:
            response = self.get(url)
        except FetchError as e:
            logger.error("Error fetching %s: %s", url, e.message)
            return None
        encoding = response.encoding or DEFAULT_HTML_ENCODING
        if encoding.lower() == 'iso-8859-1':
            # requests' default when the server omits a charset
            encoding = DEFAULT_HTML_ENCODING
        try:
            return response.content.decode(encoding)
        except (LookupError, UnicodeDecodeError):
            logger.debug("Failed to decode %s with %s; falling back to %s",
                         url, encoding, DEFAULT_HTML_ENCODING)
            return response.content.decode(DEFAULT_HTML_ENCODING, errors='replace')

    def download(self, url: str, output_path: Path) -> bool:
        """Save a binary resource to disk. Returns True on success."""
        try:
            response = self.get(url)
        except FetchError as e:
            logger.error("Failed to download %s: %s", url, e.message)
            return False
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(response.content)
        logger.info("Downloaded image: %s", output_path.name)
        return True

    def pause(self) -> None:
        """Wait out the inter-request delay."""
        if self.delay > 0:
            self._sleep(self.delay)
