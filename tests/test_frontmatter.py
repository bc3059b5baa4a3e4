"""
Tests for artifact header parsing.
"""

import pytest

from utils.frontmatter import ContentFrontmatter, parse_frontmatter, parse_writer_ids, render_frontmatter


class TestWriterIds:
    """writerIds normalization."""

    def test_literal_free_text(self):
        """Test trimming, blank removal and first-occurrence dedup."""
        assert parse_writer_ids("a, b ,b,") == ["a", "b"]

    def test_non_adjacent_duplicates(self):
        assert parse_writer_ids("code, prose, code") == ["code", "prose"]

    def test_list_input(self):
        assert parse_writer_ids([" prose ", "", "code", "prose"]) == ["prose", "code"]

    def test_missing(self):
        assert parse_writer_ids(None) == []
        assert parse_writer_ids(" , ,") == []


class TestHeaderBlock:
    """--- delimited YAML headers."""

    def test_header_and_body(self):
        data, body = parse_frontmatter("---\nid: tutorial\nwriterIds: prose, code\n---\n\nBody text\n")

        assert data == {"id": "tutorial", "writerIds": "prose, code"}
        assert body.strip() == "Body text"

    def test_no_header(self):
        assert parse_frontmatter("# Just markdown") == ({}, "# Just markdown")

    def test_empty_header(self):
        data, body = parse_frontmatter("---\n\n---\nBody")
        assert data == {}
        assert body == "Body"

    def test_invalid_yaml(self):
        with pytest.raises(ValueError, match="not valid YAML"):
            parse_frontmatter("---\nid: [unclosed\n---\nBody")

    def test_non_mapping(self):
        with pytest.raises(ValueError, match="mapping"):
            parse_frontmatter("---\n- a\n- b\n---\nBody")

    def test_render_keeps_key_order(self):
        rendered = render_frontmatter({"id": "x", "title": "Título", "writerIds": ["a"]})

        assert rendered.startswith("---\nid: x\ntitle: Título\n")
        assert rendered.endswith("---\n")


class TestContentFrontmatter:
    def test_hub_header_survives_render_and_parse(self):
        """Test a rendered hub header reads back with the same fields."""
        original = ContentFrontmatter(id="rust-ownership", persona_id="standard", language="English",
                                      writer_ids=["prose", "code"], model="m", title="Rust Ownership",
                                      date="2026-01-31")

        data, _ = parse_frontmatter(render_frontmatter(original.to_dict()) + "\n# Rust Ownership\n")
        parsed = ContentFrontmatter.from_dict(data)

        assert data["type"] == "hub"
        assert parsed == original

    def test_defaults_from_sparse_header(self):
        parsed = ContentFrontmatter.from_dict({"hubId": "legacy", "writerIds": "a, b ,b,"})

        assert parsed.id == "legacy"
        assert parsed.language == "English"
        assert parsed.writer_ids == ["a", "b"]
        assert "model" not in parsed.to_dict()
