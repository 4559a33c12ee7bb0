"""
Rendering of verification results: console, Markdown and JSON.
"""
import json
from pathlib import Path
from typing import List, Tuple

from .site import LANGUAGE_NAMES, LANGUAGES
from .utils.logger import COLORS, SUPPORTS_COLOR
from .verifier import EntityReport, VerificationResult

LANG_FLAGS = {'en': '🇬🇧', 'zh-HK': '🇭🇰', 'zh-CN': '🇨🇳'}

# Extra palette entries the logger does not need
_EXTRA_COLORS = {
    'RED': '\033[31m',
    'GREEN': '\033[32m',
    'YELLOW': '\033[33m',
    'CYAN': '\033[36m',
    'WHITE': '\033[37m',
}


class _Palette:
    def __init__(self, use_color: bool):
        table = {**COLORS, **_EXTRA_COLORS} if use_color else {}
        self.reset = table.get('RESET', '')
        self.bold = table.get('BOLD', '')
        self.dim = table.get('DIM', '')
        self.red = table.get('RED', '')
        self.green = table.get('GREEN', '')
        self.yellow = table.get('YELLOW', '')
        self.cyan = table.get('CYAN', '')
        self.white = table.get('WHITE', '')


def _schema_rows(entity: EntityReport) -> List[Tuple[str, str]]:
    """(language, fields text) per language, with a marker for missing or broken files."""
    rows = []
    for lang in LANGUAGES:
        if lang in entity.missing_languages:
            rows.append((lang, 'MISSING FILE'))
        elif lang in entity.parse_errors:
            rows.append((lang, f"PARSE ERROR ({entity.parse_errors[lang]})"))
        else:
            fields = entity.languages.get(lang, [])
            rows.append((lang, ', '.join(fields) if fields else '(none)'))
    return rows


# =============================================================================
# CONSOLE
# =============================================================================

def render_console(result: VerificationResult, use_color: bool = SUPPORTS_COLOR) -> str:
    c = _Palette(use_color)
    out: List[str] = []

    out.append('=' * 70)
    out.append(f"{c.bold}{c.cyan}🌿 HERBAPEDIA CONTENT VERIFICATION REPORT 🌿{c.reset}")
    out.append('=' * 70)
    out.append(f"{c.dim}Generated: {result.timestamp}{c.reset}\n")

    out.append(f"{c.bold}{c.white}📊 OVERALL SUMMARY{c.reset}")
    out.append('─' * 50)
    out.append(f"  📁 Total entries: {c.bold}{result.total}{c.reset}")
    complete_color = c.green if result.complete == result.total else c.yellow
    out.append(f"  ✅ Schema complete: {complete_color}{result.complete}{c.reset}")
    out.append(f"  ❌ Has issues: {c.red}{result.incomplete}{c.reset}\n")

    out.append(f"{c.bold}{c.white}🌐 LANGUAGE COVERAGE{c.reset}")
    out.append('─' * 50)
    for lang in LANGUAGES:
        missing = result.missing_languages.get(lang, 0)
        present, percentage = result.coverage(lang)
        if missing == 0:
            color, status = c.green, '✅'
        else:
            color, status = (c.yellow if percentage >= 90 else c.red), '⚠️'
        out.append(
            f"  {LANG_FLAGS[lang]} {LANGUAGE_NAMES[lang]:<20} "
            f"{color}{present}/{result.total}{c.reset} ({color}{percentage}%{c.reset}) {status}"
        )
    out.append('')

    if result.schema_inconsistencies > 0:
        out.append(f"{c.bold}{c.yellow}📋 SCHEMA INCONSISTENCIES ({result.schema_inconsistencies}){c.reset}")
        out.append('─' * 50)
        for lang, gaps in result.field_gaps.items():
            if not gaps:
                continue
            out.append(f"\n  {LANG_FLAGS.get(lang, '')} {LANGUAGE_NAMES.get(lang, lang)} missing fields:")
            for field_name, count in gaps.items():
                out.append(f"     {c.red}{field_name}{c.reset}: missing in {c.yellow}{count}{c.reset} entries")
        out.append('')

    problematic = result.problematic
    if problematic:
        out.append(f"{c.bold}{c.red}🚨 ENTRIES WITH ISSUES ({len(problematic)}){c.reset}")
        out.append('─' * 50)
        for entity in problematic:
            out.append(f"\n{c.bold}{c.yellow}🌿 {entity.baseline_title or entity.slug}{c.reset}")
            out.append(f"   {c.dim}Slug: {entity.slug}{c.reset}")
            if entity.source_url:
                out.append(f"   🔗 {c.cyan}{entity.source_url}{c.reset}")
            out.append("   📋 Content schema:")
            for lang, text in _schema_rows(entity):
                color = c.red if text.startswith(('MISSING', 'PARSE')) else c.dim
                out.append(f"      {LANG_FLAGS[lang]} {lang}: {color}{text}{c.reset}")
            if entity.missing_languages:
                langs = ', '.join(f"{LANG_FLAGS[l]} {l}" for l in entity.missing_languages)
                out.append(f"   ❌ {c.red}Missing files:{c.reset} {langs}")
            gaps = entity.missing_fields()
            if gaps:
                out.append(f"   ⚠️ {c.yellow}Schema gaps:{c.reset}")
                for issue in gaps:
                    out.append(f"      {LANG_FLAGS[issue.language]} {issue.language} missing: "
                               f"{c.red}{issue.field}{c.reset}")
    else:
        out.append(f"\n{c.bold}{c.green}✅ ALL ENTRIES COMPLETE WITH CONSISTENT SCHEMA!{c.reset}")

    out.append('\n' + '=' * 70)
    return '\n'.join(out)


# =============================================================================
# MARKDOWN
# =============================================================================

def render_markdown(result: VerificationResult) -> str:
    md: List[str] = [
        "# Herbapedia Content Verification Report",
        "",
        f"**Generated:** {result.timestamp}",
        "",
        "## 📊 Summary",
        "",
        "| Metric | Count |",
        "|--------|-------|",
        f"| Total entries | {result.total} |",
        f"| Schema complete | {result.complete} |",
        f"| Has issues | {result.incomplete} |",
        f"| Schema inconsistencies | {result.schema_inconsistencies} |",
        "",
        "## 🌐 Language Coverage",
        "",
        "| Language | Present | Missing | Coverage |",
        "|----------|---------|---------|----------|",
    ]
    for lang in LANGUAGES:
        present, percentage = result.coverage(lang)
        missing = result.missing_languages.get(lang, 0)
        md.append(f"| {LANG_FLAGS[lang]} {LANGUAGE_NAMES[lang]} | {present} | {missing} | {percentage}% |")

    if result.schema_inconsistencies > 0:
        md += ["", "## 📋 Schema Gaps by Language", "",
               "These fields exist in English but are missing in translations:", ""]
        for lang, gaps in result.field_gaps.items():
            if not gaps:
                continue
            md += [f"### {LANG_FLAGS.get(lang, '')} {LANGUAGE_NAMES.get(lang, lang)}", "",
                   "| Field | Missing Count |", "|-------|---------------|"]
            md += [f"| `{field_name}` | {count} |" for field_name, count in gaps.items()]
            md.append("")

    problematic = result.problematic
    if problematic:
        md += ["", "## 🚨 Entries With Issues", ""]
        for entity in problematic:
            md += _markdown_entity(entity)
    else:
        md += ["", "## ✅ All Entries Complete!", "",
               "All entries have complete language coverage with consistent schema."]

    return '\n'.join(md) + '\n'


def _markdown_entity(entity: EntityReport) -> List[str]:
    title = entity.baseline_title or entity.slug
    md = [f"### {title}", "", f"- **Slug:** `{entity.slug}`"]
    if entity.source_url:
        md.append(f"- **Source:** {entity.source_url}")

    md += ["", "**Current content schema:**", "", "| Language | Fields |", "|----------|--------|"]
    for lang, text in _schema_rows(entity):
        if text.startswith(('MISSING', 'PARSE')):
            md.append(f"| {LANG_FLAGS[lang]} {lang} | ❌ {text} |")
        else:
            fields = entity.languages.get(lang, [])
            shown = ', '.join(f"`{f}`" for f in fields) if fields else '(none)'
            md.append(f"| {LANG_FLAGS[lang]} {lang} | {shown} |")

    md += ["", "#### GitHub Issue Checklist", "", "Copy this to a new issue:", "", "```markdown",
           f"## {title}", "",
           f"**Source:** {entity.source_url or 'N/A'}",
           f"**Slug:** `{entity.slug}`", "",
           "### Tasks", ""]
    for lang in entity.missing_languages:
        md.append(f"- [ ] Create {LANGUAGE_NAMES[lang]} ({lang}) translation file")
    for lang in entity.parse_errors:
        md.append(f"- [ ] Fix unparseable {LANGUAGE_NAMES[lang]} ({lang}) file")
    for issue in entity.missing_fields():
        md.append(f"- [ ] Add `{issue.field}` to {LANGUAGE_NAMES[issue.language]} ({issue.language})")
    md += ["```", ""]
    return md


# =============================================================================
# JSON
# =============================================================================

def render_json(result: VerificationResult) -> str:
    return json.dumps(result.to_dict(), ensure_ascii=False, indent=2)


def write_reports(result: VerificationResult, markdown_path: Path, json_path: Path) -> None:
    """Write the Markdown and JSON reports to disk."""
    Path(markdown_path).write_text(render_markdown(result), encoding='utf-8')
    Path(json_path).write_text(render_json(result), encoding='utf-8')
