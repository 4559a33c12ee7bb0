"""
Product page extractor.

Turns one raw product page into a ``LocalizedRecord``:
    title            og:title, minus the trailing site name
    scientific_name  h4.product_academic_title > i (optional)
    image_url        og:image, falling back to the WooCommerce main image
    category         inferred from the URL path
    sections         see ``herbapedia.extractors.sections``

The slug is only derived for baseline pages; other languages get theirs
from the matcher.
"""
import re
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from ..models import LocalizedRecord
from ..site import BASELINE_LANGUAGE, TITLE_SUFFIXES, category_from_url
from ..utils.exceptions import ExtractionError
from .sections import clean_text, extract_sections

_SUFFIX_RE = re.compile(
    r'\s*-\s*(?:' + '|'.join(re.escape(s) for s in TITLE_SUFFIXES) + r')\s*$'
)
_EXTENSION_RE = re.compile(r'\.[^.]+$')
_SIZE_SUFFIX_RE = re.compile(r'-\d+$')
_NON_SLUG_RE = re.compile(r'[^a-z0-9-]+')
_DASHES_RE = re.compile(r'-+')


def safe_filename(text: str) -> str:
    """Lower-case, hyphen-separated ``[a-z0-9-]`` form of a string."""
    if not text:
        return ''
    slug = text.lower().replace('&#039;', "'").replace('&amp;', '&')
    slug = _NON_SLUG_RE.sub('-', slug)
    slug = _DASHES_RE.sub('-', slug)
    return slug.strip('-')


def derive_slug(image_url: Optional[str]) -> str:
    """
    Derive an entity slug from an image URL.

    ".../uploads/2019/03/Ginkgo-Biloba-2.jpg" becomes "ginkgo-biloba".
    Returns '' when no slug can be derived.

    The CMS size suffix is only stripped from filenames that carry an
    extension, so a derived slug such as "vitamin-b-12" passes through
    unchanged.
    """
    if not image_url:
        return ''
    path = urlparse(image_url).path if '://' in image_url else image_url
    name = PurePosixPath(path).name
    stem = _EXTENSION_RE.sub('', name)
    if stem != name:
        stem = _SIZE_SUFFIX_RE.sub('', stem)
    return safe_filename(stem)


def strip_site_suffix(title: str) -> str:
    return _SUFFIX_RE.sub('', title).strip()


def _meta_content(soup: BeautifulSoup, prop: str) -> str:
    tag = soup.find('meta', attrs={'property': prop})
    if tag is None:
        return ''
    return (tag.get('content') or '').strip()


def _extract_title(soup: BeautifulSoup) -> str:
    title = strip_site_suffix(_meta_content(soup, 'og:title'))
    if title:
        return title
    node = soup.select_one('.product_title')
    return clean_text(node.get_text()) if node else ''


def _extract_scientific_name(soup: BeautifulSoup) -> str:
    node = soup.select_one('h4.product_academic_title i') or soup.select_one('h4 em')
    return clean_text(node.get_text()) if node else ''


def _extract_image_url(soup: BeautifulSoup) -> Optional[str]:
    image = _meta_content(soup, 'og:image')
    if image:
        return image
    img = soup.select_one('img.wp-post-image')
    if img is not None and img.get('src'):
        return img['src']
    return None


def parse_page(html: str, url: str, language: str) -> LocalizedRecord:
    """
    Parse a product page.

    Args:
        html: Raw page markup
        url: Page URL (used for category inference and metadata)
        language: Language code of the page

    Returns:
        LocalizedRecord; ``slug`` is set for baseline pages only

    Raises:
        ExtractionError: No title, or (baseline) no derivable slug
    """
    soup = BeautifulSoup(html, 'html.parser')

    title = _extract_title(soup)
    if not title:
        raise ExtractionError("No title found", url=url, reason='no_title')

    image_url = _extract_image_url(soup)
    record = LocalizedRecord(
        source_url=url,
        language=language,
        title=title,
        category=category_from_url(url),
        scientific_name=_extract_scientific_name(soup),
        image_url=image_url,
        sections=extract_sections(soup),
    )

    if language == BASELINE_LANGUAGE:
        record.slug = derive_slug(image_url)
        if not record.slug:
            raise ExtractionError("Could not derive slug from image URL",
                                  url=url, reason='no_slug')

    return record
