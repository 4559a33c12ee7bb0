"""
Section classifier.

Product pages carry their content as a repeated block:

    <div class="desc_containter ...">
      <div class="desc_title_container">
        <div class="desc_title ..."><div class="inner">TITLE</div></div>
      </div>
      <div class="desc_content_container ...">CONTENT</div>
    </div>

Titles are free text in English, Traditional or Simplified Chinese. They are
mapped onto the canonical field names in ``herbapedia.models``; titles that
match no keyword are dropped.
"""
import re
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

MIN_CONTENT_LENGTH = 10

# Ordered: first match wins. "food source" must precede the bare "source",
# and modern_usage must precede the bare "用法" so 現代用法 is not traditional.
SECTION_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ('history', ('history', '歷史', '历史')),
    ('introduction', ('introduction', 'intro', '簡介', '简介')),
    ('modern_usage', ('modern', '現代', '现代')),
    ('traditional_usage', ('traditional', '傳統', '传统', '傅統', '傅统', '用法')),
    ('functions', ('function', '功能')),
    ('food_sources', ('food source', '食物來源', '食物来源')),
    ('botanical_source', ('botanical', 'source', '來源', '来源')),
    ('modern_research', ('research', '研究')),
    ('importance', ('importance', '重要性')),
    ('precautions', ('precaution', '注意')),
    ('dosage', ('dosage', '劑量', '剂量')),
]

_ENTITIES = [
    ('&nbsp;', ' '),
    ('&lt;', '<'),
    ('&gt;', '>'),
    ('&#039;', "'"),
    ('&quot;', '"'),
    ('&ndash;', '–'),
    ('&amp;', '&'),  # last, so "&amp;lt;" stays literal
]

_BR_RE = re.compile(r'<br\s*/?>', re.IGNORECASE)
_TAG_RE = re.compile(r'<[^>]+>')
_WS_RE = re.compile(r'\s+')


def clean_text(markup: str) -> str:
    """Reduce an HTML fragment to a single line of plain text."""
    if not markup:
        return ''
    text = _BR_RE.sub('\n', markup)
    text = _TAG_RE.sub('', text)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return _WS_RE.sub(' ', text).strip()


def classify_title(title: str) -> Optional[str]:
    """Map a section heading to its canonical field, or None if unrecognized."""
    lowered = title.lower()
    for key, keywords in SECTION_KEYWORDS:
        if any(kw in lowered for kw in keywords):
            return key
    return None


def extract_sections(soup: BeautifulSoup) -> Dict[str, str]:
    """
    Collect canonical sections from a parsed product page.

    Returns:
        {canonical_field: cleaned text}; blocks shorter than
        MIN_CONTENT_LENGTH and unrecognized titles are skipped.
    """
    sections: Dict[str, str] = {}

    for block in soup.select('div.desc_containter'):
        inner = block.select_one('div.inner')
        body = block.select_one('div.desc_content_container')
        if inner is None or body is None:
            continue

        key = classify_title(clean_text(inner.get_text()))
        content = clean_text(body.decode_contents())
        if key is None or len(content) < MIN_CONTENT_LENGTH:
            continue
        sections[key] = content

    # WooCommerce tab panels (older page template), only for unfilled keys
    for panel in soup.select('div.woocommerce-Tabs-panel'):
        panel_id = panel.get('id') or ''
        if not panel_id.startswith('tab-'):
            continue
        tab_name = panel_id[len('tab-'):].replace('_', ' ').replace('-', ' ')
        key = classify_title(tab_name)
        content = clean_text(panel.decode_contents())
        if key is None or key in sections or len(content) < MIN_CONTENT_LENGTH:
            continue
        sections[key] = content

    return sections
