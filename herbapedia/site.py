"""
Site map for vitaherbapedia.com.

Three locales share one URL scheme:
    {base}/{locale}/product-category/{category_path}/          listing, page 1
    {base}/{locale}/product-category/{category_path}/page/N/   listing, page N
    {base}/{locale}/shop/...                                   item pages
"""
from typing import Dict, List, Optional

BASELINE_LANGUAGE = 'en'

# language code -> locale path segment on the site
LANGUAGE_PATHS: Dict[str, str] = {
    'en': 'en',
    'zh-HK': 'zh',
    'zh-CN': 'cn',
}

LANGUAGES: List[str] = list(LANGUAGE_PATHS)

LANGUAGE_NAMES: Dict[str, str] = {
    'en': 'English',
    'zh-HK': 'Traditional Chinese',
    'zh-CN': 'Simplified Chinese',
}

# category -> language -> category path segment
CATEGORY_PATHS: Dict[str, Dict[str, str]] = {
    'chinese-herbs': {'en': 'chiherbs-en', 'zh-HK': 'chiherbs', 'zh-CN': 'chiherbs-cn'},
    'western-herbs': {'en': 'westherbs-en', 'zh-HK': 'westherbs', 'zh-CN': 'westherbs-cn'},
    'vitamins': {'en': 'vitamins-en', 'zh-HK': 'vitamins', 'zh-CN': 'vitamins-cn'},
    'minerals': {'en': 'minerals-en', 'zh-HK': 'minerals', 'zh-CN': 'minerals-cn'},
    'nutrients': {'en': 'nutrients-en', 'zh-HK': 'nutrients', 'zh-CN': 'nutrients-cn'},
}

CATEGORIES: List[str] = list(CATEGORY_PATHS)

# URL fragment -> category, checked in order
CATEGORY_URL_FRAGMENTS = [
    ('chiherbs', 'chinese-herbs'),
    ('westherbs', 'western-herbs'),
    ('vitamins', 'vitamins'),
    ('minerals', 'minerals'),
    ('nutrients', 'nutrients'),
]

# Trailing site names appended to og:title
TITLE_SUFFIXES = ('Vita Herbapedia', '維特草本百科', '维特草本百科')

SOURCE_NAME = 'vitaherbapedia.com'


def category_url(base_url: str, category: str, language: str, page: int = 1) -> str:
    """Listing URL for one page of a category in one locale."""
    locale = LANGUAGE_PATHS[language]
    path = CATEGORY_PATHS[category][language]
    url = f"{base_url.rstrip('/')}/{locale}/product-category/{path}/"
    if page > 1:
        url += f"page/{page}/"
    return url


def category_from_url(url: str) -> str:
    """Infer the category from a URL path fragment; empty string if none match."""
    for fragment, category in CATEGORY_URL_FRAGMENTS:
        if fragment in url:
            return category
    return ''


def localize_url(baseline_url: Optional[str], language: str) -> Optional[str]:
    """Swap the /en/ locale segment of a baseline URL for another language's."""
    if not baseline_url:
        return None
    if language == BASELINE_LANGUAGE:
        return baseline_url
    locale = LANGUAGE_PATHS.get(language)
    if not locale:
        return None
    return baseline_url.replace(f"/{LANGUAGE_PATHS[BASELINE_LANGUAGE]}/", f"/{locale}/", 1)
