"""
Tests for the section classifier.

Run with: pytest tests/test_sections.py -v
"""
import sys
from pathlib import Path

from bs4 import BeautifulSoup

sys.path.insert(0, str(Path(__file__).parent.parent))

from herbapedia.extractors.sections import clean_text, classify_title, extract_sections
from conftest import product_page


def _sections(html):
    return extract_sections(BeautifulSoup(html, "html.parser"))


class TestCleanText:
    """Tests for HTML fragment cleaning."""

    def test_strips_tags_and_collapses_whitespace(self):
        """Tags vanish and whitespace runs become one space."""
        assert clean_text("<p>Ginkgo   <b>leaves</b>\n\n are used</p>") == "Ginkgo leaves are used"

    def test_line_breaks_collapse(self):
        """<br> turns into whitespace before collapsing."""
        assert clean_text("first<br/>second<BR>third") == "first second third"

    def test_decodes_entities(self):
        """The fixed entity set is decoded."""
        assert clean_text("a&nbsp;&lt;b&gt; &#039;c&#039; &quot;d&quot; 1&ndash;2") == "a <b> 'c' \"d\" 1–2"

    def test_amp_decoded_last(self):
        """&amp;lt; decodes to a literal &lt;, not to <."""
        assert clean_text("Tom &amp;lt; Jerry") == "Tom &lt; Jerry"

    def test_empty(self):
        """Empty input gives empty output."""
        assert clean_text("") == ""
        assert clean_text("   <p> </p> ") == ""


class TestClassifyTitle:
    """Tests for heading -> canonical field mapping."""

    def test_english_headings(self):
        """English headings map case-insensitively."""
        assert classify_title("History") == "history"
        assert classify_title("INTRODUCTION") == "introduction"
        assert classify_title("Traditional Usage") == "traditional_usage"
        assert classify_title("Modern Usage") == "modern_usage"
        assert classify_title("Functions") == "functions"
        assert classify_title("Botanical Source") == "botanical_source"
        assert classify_title("Modern Research") == "modern_usage"
        assert classify_title("Research") == "modern_research"
        assert classify_title("Importance") == "importance"
        assert classify_title("Precautions") == "precautions"
        assert classify_title("Dosage") == "dosage"

    def test_chinese_headings(self):
        """Traditional and Simplified variants both map."""
        assert classify_title("歷史") == "history"
        assert classify_title("历史") == "history"
        assert classify_title("簡介") == "introduction"
        assert classify_title("传统用法") == "traditional_usage"
        assert classify_title("現代用途") == "modern_usage"
        assert classify_title("功能") == "functions"
        assert classify_title("注意事項") == "precautions"
        assert classify_title("剂量") == "dosage"

    def test_misspelled_traditional_variant(self):
        """The site's 傅統 typo still maps to traditional_usage."""
        assert classify_title("傅統用法") == "traditional_usage"

    def test_modern_usage_not_taken_by_usage_suffix(self):
        """現代用法 ends in 用法 but is the modern usage heading."""
        assert classify_title("現代用法") == "modern_usage"
        assert classify_title("现代用法") == "modern_usage"
        assert classify_title("傳統用法") == "traditional_usage"
        assert classify_title("用法") == "traditional_usage"

    def test_food_source_before_source(self):
        """Food sources are not mistaken for botanical sources."""
        assert classify_title("Food Sources") == "food_sources"
        assert classify_title("食物來源") == "food_sources"
        assert classify_title("來源") == "botanical_source"

    def test_unrecognized(self):
        """Unknown headings give None."""
        assert classify_title("Reviews") is None
        assert classify_title("") is None


class TestExtractSections:
    """Tests for section extraction from a page."""

    def test_blocks_are_classified(self):
        """Each recognised block lands under its canonical key."""
        html = product_page("Ginkgo", sections=[
            ("History", "Ginkgo has been used for centuries."),
            ("Functions", "Supports memory and circulation."),
        ])
        assert _sections(html) == {
            "history": "Ginkgo has been used for centuries.",
            "functions": "Supports memory and circulation.",
        }

    def test_short_content_discarded(self):
        """Content under ten characters is noise."""
        html = product_page("Ginkgo", sections=[("History", "N/A")])
        assert _sections(html) == {}

    def test_unrecognized_title_dropped(self):
        """Blocks with unknown headings are not kept."""
        html = product_page("Ginkgo", sections=[("Customer Reviews", "Great product, five stars.")])
        assert _sections(html) == {}

    def test_duplicate_heading_last_wins(self):
        """A repeated heading keeps the later block."""
        html = product_page("Ginkgo", sections=[
            ("History", "First history paragraph."),
            ("History", "Second history paragraph."),
        ])
        assert _sections(html)["history"] == "Second history paragraph."

    def test_traditional_and_modern_usage_both_kept(self):
        """A zh-HK page with both usage headings keeps both sections."""
        html = product_page("銀杏", sections=[
            ("傳統用法", "銀杏葉傳統上用於改善血液循環。"),
            ("現代用法", "現代多製成銀杏葉提取物補充劑。"),
        ])
        assert _sections(html) == {
            "traditional_usage": "銀杏葉傳統上用於改善血液循環。",
            "modern_usage": "現代多製成銀杏葉提取物補充劑。",
        }

    def test_tab_panels_fill_gaps_only(self):
        """Tab panels are used only for keys the blocks did not fill."""
        html = product_page(
            "Ginkgo",
            sections=[("History", "History from the description block.")],
            tabs=[("history", "History from the tab panel."),
                  ("precautions", "Not for use during pregnancy.")],
        )
        sections = _sections(html)
        assert sections["history"] == "History from the description block."
        assert sections["precautions"] == "Not for use during pregnancy."
