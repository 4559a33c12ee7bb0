"""
Shared fixtures: an offline fetcher and HTML builders for product and
listing pages.
"""
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

BASE_URL = "https://www.vitaherbapedia.com"


class FakeFetcher:
    """Serves canned pages by URL and records every request."""

    def __init__(self, pages: Optional[Dict[str, str]] = None):
        self.pages = dict(pages or {})
        self.requested: List[str] = []
        self.downloaded: List[str] = []
        self.pauses = 0

    def fetch(self, url: str) -> Optional[str]:
        self.requested.append(url)
        return self.pages.get(url)

    def download(self, url: str, output_path: Path) -> bool:
        self.downloaded.append(url)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(b"\x89PNG fake image")
        return True

    def pause(self) -> None:
        self.pauses += 1


def product_page(
    title: Optional[str] = None,
    image_url: Optional[str] = None,
    scientific_name: Optional[str] = None,
    sections: Optional[List[Tuple[str, str]]] = None,
    site_name: str = "Vita Herbapedia",
    tabs: Optional[List[Tuple[str, str]]] = None,
) -> str:
    """A product page in the site's markup."""
    head = []
    if title:
        head.append(f'<meta property="og:title" content="{title} - {site_name}" />')
    if image_url:
        head.append(f'<meta property="og:image" content="{image_url}" />')

    body = []
    if scientific_name:
        body.append(f'<h4 class="product_academic_title"><i>{scientific_name}</i></h4>')
    for heading, content in sections or []:
        body.append(
            '<div class="desc_containter clearfix">'
            '<div class="desc_title_container">'
            f'<div class="desc_title left"><div class="inner">{heading}</div></div>'
            '</div>'
            f'<div class="desc_content_container right"><p>{content}</p></div>'
            '</div>'
        )
    for tab_id, content in tabs or []:
        body.append(f'<div class="woocommerce-Tabs-panel" id="tab-{tab_id}"><p>{content}</p></div>')

    return (
        "<html><head>" + "".join(head) + "</head>"
        "<body>" + "".join(body) + "</body></html>"
    )


def listing_page(item_urls: List[str], count_text: Optional[str] = None) -> str:
    """A category listing page linking to the given item URLs."""
    links = "".join(
        f'<li class="product"><a href="{url}"><img src="x.jpg" /></a>'
        f'<a href="{url}">Item</a></li>'
        for url in item_urls
    )
    count = f'<p class="woocommerce-result-count">{count_text}</p>' if count_text else ""
    return (
        f'<html><body>{count}<a href="{BASE_URL}/en/about/">About</a>'
        f'<ul class="products">{links}</ul></body></html>'
    )


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def store(tmp_path):
    from herbapedia.store import ContentStore
    return ContentStore(tmp_path / "herbs")
