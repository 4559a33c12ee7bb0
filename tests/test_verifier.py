"""
Tests for schema verification and its reports.

Run with: pytest tests/test_verifier.py -v
"""
import json
import sys
from pathlib import Path

import pytest
import yaml

sys.path.insert(0, str(Path(__file__).parent.parent))

from herbapedia.reports import render_console, render_json, render_markdown, write_reports
from herbapedia.store import ContentStore
from herbapedia.verifier import (
    EXTRA_FIELD,
    MISSING_FIELD,
    coverage_percent,
    diff_fields,
    verify_store,
)

TEXT = "Some meaningful paragraph of content."


def write_lang(root: Path, slug: str, lang: str, fields=(), **extra):
    """Write a minimal language file with the given fields present."""
    doc = {"id": slug, "slug": slug, "title": extra.pop("title", slug.title())}
    doc.update({f: TEXT for f in fields})
    doc.update(extra)
    doc["metadata"] = {"source_url": f"https://www.vitaherbapedia.com/en/shop/{slug}/", "language": lang}
    path = root / slug / f"{lang}.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(doc, allow_unicode=True), encoding="utf-8")
    return path


def write_entity(root, slug, en=(), zh_hk=(), zh_cn=()):
    write_lang(root, slug, "en", en)
    if zh_hk is not None:
        write_lang(root, slug, "zh-HK", zh_hk)
    if zh_cn is not None:
        write_lang(root, slug, "zh-CN", zh_cn)


ALL = ("history", "introduction", "functions")


class TestDiff:
    """Tests for the field diff."""

    def test_missing_and_extra(self):
        issues = diff_fields(["history", "functions"], ["history", "dosage"], "zh-HK")
        assert [(i.type, i.field) for i in issues] == [(MISSING_FIELD, "functions"), (EXTRA_FIELD, "dosage")]

    def test_messages(self):
        missing, extra = diff_fields(["history"], ["functions"], "zh-CN")
        assert missing.message == "Simplified Chinese is missing 'history' which exists in English"
        assert "does NOT exist in English" in extra.message


class TestCoverage:
    """Tests for coverage percentages."""

    def test_rounding(self):
        assert coverage_percent(175, 178) == 98
        assert coverage_percent(1, 8) == 13
        assert coverage_percent(1, 3) == 33
        assert coverage_percent(10, 10) == 100

    def test_empty_store(self):
        assert coverage_percent(0, 0) == 0


class TestVerifyStore:
    """Tests for whole-store verification."""

    def test_single_gap(self, tmp_path):
        """One field missing in zh-HK: one issue, incomplete, file still counted present."""
        write_entity(tmp_path, "ginkgo", en=ALL, zh_hk=("history", "introduction"), zh_cn=ALL)

        result = verify_store(ContentStore(tmp_path))

        entity = result.entities[0]
        assert [(i.type, i.language, i.field) for i in entity.issues] == [
            (MISSING_FIELD, "zh-HK", "functions")
        ]
        assert not entity.is_complete
        assert result.incomplete == 1
        assert result.complete == 0
        assert result.schema_inconsistencies == 1
        assert result.missing_languages["zh-HK"] == 0
        assert result.coverage("zh-HK") == (1, 100)
        assert result.field_gaps == {"zh-HK": {"functions": 1}, "zh-CN": {}}

    def test_extra_field_is_not_a_violation(self, tmp_path):
        """Translation-only fields are reported but keep the entity complete."""
        write_entity(tmp_path, "ginkgo", en=("history",), zh_hk=("history", "functions"), zh_cn=("history",))

        result = verify_store(ContentStore(tmp_path))

        assert result.complete == 1
        assert result.schema_inconsistencies == 0
        assert result.extra_fields == 1
        assert result.entities[0].extra_fields()[0].field == "functions"

    def test_coverage_with_missing_files(self, tmp_path):
        """178 entities, zh-CN missing for 3: 98% coverage."""
        for i in range(178):
            write_entity(tmp_path, f"herb-{i:03d}", en=ALL, zh_hk=ALL, zh_cn=None if i < 3 else ALL)

        result = verify_store(ContentStore(tmp_path))

        assert result.total == 178
        assert result.missing_languages == {"en": 0, "zh-HK": 0, "zh-CN": 3}
        assert result.coverage("zh-CN") == (175, 98)
        assert result.coverage("zh-HK") == (178, 100)
        assert result.incomplete == 3

    def test_parse_error_is_not_missing(self, tmp_path):
        """An unparseable file is its own finding and makes the entity incomplete."""
        write_entity(tmp_path, "ginkgo", en=ALL, zh_hk=ALL, zh_cn=ALL)
        (tmp_path / "ginkgo" / "zh-CN.yaml").write_text("title: [unclosed", encoding="utf-8")

        result = verify_store(ContentStore(tmp_path))

        entity = result.entities[0]
        assert "zh-CN" in entity.parse_errors
        assert entity.missing_languages == []
        assert result.missing_languages["zh-CN"] == 0
        assert result.parse_errors["zh-CN"] == 1
        assert not entity.is_complete

    def test_one_issue_per_field(self, tmp_path):
        """Repeated field names never duplicate an issue."""
        write_entity(tmp_path, "ginkgo", en=ALL, zh_hk=(), zh_cn=ALL)

        result = verify_store(ContentStore(tmp_path), fields=["history", "history", "functions"])

        keys = [(i.language, i.field) for i in result.entities[0].issues]
        assert keys == [("zh-HK", "history"), ("zh-HK", "functions")]
        assert len(keys) == len(set(keys))

    def test_primary_fields_by_default(self, tmp_path):
        """Non-primary sections are not verified unless configured."""
        write_entity(tmp_path, "ginkgo", en=ALL + ("dosage",), zh_hk=ALL, zh_cn=ALL)
        assert verify_store(ContentStore(tmp_path)).complete == 1
        assert verify_store(ContentStore(tmp_path), fields=["dosage"]).complete == 0

    def test_blank_value_is_absent(self, tmp_path):
        """Whitespace-only strings do not count as present."""
        write_entity(tmp_path, "ginkgo", en=ALL, zh_hk=ALL, zh_cn=None)
        write_lang(tmp_path, "ginkgo", "zh-CN", ("history", "introduction"), functions="   ")

        result = verify_store(ContentStore(tmp_path))
        assert result.field_gaps["zh-CN"] == {"functions": 1}

    def test_read_only(self, tmp_path):
        """Verification never modifies the store."""
        write_entity(tmp_path, "ginkgo", en=ALL, zh_hk=("history",), zh_cn=None)
        before = {p: p.read_bytes() for p in tmp_path.rglob("*") if p.is_file()}

        verify_store(ContentStore(tmp_path))

        after = {p: p.read_bytes() for p in tmp_path.rglob("*") if p.is_file()}
        assert before == after

    def test_empty_store(self, tmp_path):
        result = verify_store(ContentStore(tmp_path / "missing"))
        assert result.total == 0
        assert result.coverage("en") == (0, 0)


class TestReports:
    """Tests for the report renderers."""

    @pytest.fixture
    def result(self, tmp_path):
        write_entity(tmp_path, "ginkgo", en=ALL, zh_hk=("history", "introduction"), zh_cn=None)
        write_entity(tmp_path, "zinc", en=ALL, zh_hk=ALL, zh_cn=ALL)
        return verify_store(ContentStore(tmp_path))

    def test_console_without_color(self, result):
        text = render_console(result, use_color=False)
        assert "\033[" not in text
        assert "Total entries: 2" in text
        assert "functions: missing in 1 entries" in text
        assert "Ginkgo" in text

    def test_console_all_complete(self, tmp_path):
        write_entity(tmp_path, "zinc", en=ALL, zh_hk=ALL, zh_cn=ALL)
        text = render_console(verify_store(ContentStore(tmp_path)), use_color=False)
        assert "ALL ENTRIES COMPLETE" in text

    def test_markdown_checklist(self, result):
        text = render_markdown(result)
        assert "| Total entries | 2 |" in text
        assert "- [ ] Create Simplified Chinese (zh-CN) translation file" in text
        assert "- [ ] Add `functions` to Traditional Chinese (zh-HK)" in text
        assert "### Zinc" not in text

    def test_json(self, result):
        data = json.loads(render_json(result))
        assert data["total"] == 2
        assert data["summary"]["incomplete"] == 1
        assert data["summary"]["coverage"]["zh-CN"] == 50
        assert [e["slug"] for e in data["problematic"]] == ["ginkgo"]
        assert data["problematic"][0]["missing_fields"] == {"zh-HK": ["functions"]}

    def test_write_reports(self, result, tmp_path):
        md, js = tmp_path / "out" / "REPORT.md", tmp_path / "out" / "report.json"
        md.parent.mkdir()
        write_reports(result, md, js)
        assert md.read_text(encoding="utf-8").startswith("# Herbapedia Content Verification Report")
        assert json.loads(js.read_text(encoding="utf-8"))["total"] == 2


class TestVerifyCli:
    """Tests for python -m herbapedia.verify."""

    def test_exit_codes(self, tmp_path, capsys):
        """Incomplete entities fail only in strict mode."""
        from herbapedia.verify import main

        store = tmp_path / "herbs"
        write_entity(store, "ginkgo", en=ALL, zh_hk=("history",), zh_cn=ALL)

        assert main(["--content-dir", str(store)]) == 0
        assert main(["--content-dir", str(store), "--strict"]) == 1
        capsys.readouterr()

    def test_strict_from_config(self, tmp_path, capsys):
        from herbapedia.verify import main

        store = tmp_path / "herbs"
        write_entity(store, "ginkgo", en=ALL, zh_hk=(), zh_cn=ALL)
        config = tmp_path / "herbapedia.yaml"
        config.write_text("verify:\n  strict: true\n", encoding="utf-8")

        assert main(["--content-dir", str(store), "--config", str(config)]) == 1
        capsys.readouterr()

    def test_json_output_and_reports(self, tmp_path, capsys):
        from herbapedia.verify import main

        store = tmp_path / "herbs"
        write_entity(store, "zinc", en=ALL, zh_hk=ALL, zh_cn=ALL)
        config = tmp_path / "herbapedia.yaml"
        config.write_text(
            "verify:\n"
            f"  markdown_report: {tmp_path / 'REPORT.md'}\n"
            f"  json_report: {tmp_path / 'report.json'}\n",
            encoding="utf-8",
        )

        assert main(["--content-dir", str(store), "--config", str(config), "--json", "--report"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["summary"]["complete"] == 1
        assert (tmp_path / "REPORT.md").exists()
        assert (tmp_path / "report.json").exists()
