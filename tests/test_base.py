"""
Tests for shared agent utilities.
"""

import json

import pytest

from agents.base import (
    MAX_TRUTHS_FOR_CONTEXT, AgentTruth, clean_output, compute_slug,
    extract_json, format_learned_context, rank_truths,
)


class TestTruthRanking:
    """Learned truths are ranked by weight and bounded."""

    def test_top_ten_by_descending_weight(self):
        """Test only the ten heaviest truths survive, heaviest first."""
        truths = [AgentTruth(f"t{i}", weight=i / 20) for i in range(15)]

        ranked = rank_truths(truths)

        assert len(ranked) == MAX_TRUTHS_FOR_CONTEXT == 10
        assert [t.text for t in ranked] == [f"t{i}" for i in range(14, 4, -1)]

    def test_ties_keep_insertion_order(self):
        """Test equal weights are not reordered."""
        truths = [AgentTruth("first", 0.5), AgentTruth("heavy", 0.9), AgentTruth("second", 0.5),
                  AgentTruth("third", 0.5)]

        assert [t.text for t in rank_truths(truths)] == ["heavy", "first", "second", "third"]

    def test_ties_at_the_cut_are_stable(self):
        """Test the truncation boundary honors insertion order among equals."""
        truths = [AgentTruth(f"same{i}", 0.5) for i in range(12)]

        assert [t.text for t in rank_truths(truths)] == [f"same{i}" for i in range(10)]

    def test_learned_context_lines(self):
        """Test the learned context renders one bullet per ranked truth."""
        context = format_learned_context([AgentTruth("Prefers tables", 0.2), AgentTruth("Uses voseo", 0.8)])

        assert context == "- Uses voseo\n- Prefers tables"
        assert format_learned_context([]) == ""


class TestOutputParsing:
    """Cleaning and extracting model replies."""

    def test_clean_output_drops_think_block(self):
        assert clean_output("<think>plan it</think>\n  Final answer ") == "Final answer"

    def test_extract_json_from_fence(self):
        """Test a fenced JSON payload with chatter around it parses."""
        reply = 'Here you go:\n```json\n{"title": "Hub"}\n```\nEnjoy!'
        assert extract_json(reply) == {"title": "Hub"}

    def test_extract_json_from_chatter(self):
        assert extract_json('Sure! {"a": 1} hope it helps') == {"a": 1}

    def test_extract_json_failure(self):
        with pytest.raises(json.JSONDecodeError):
            extract_json("no payload at all")


class TestSlug:
    @pytest.mark.parametrize("raw,expected", [
        ("Rust Ownership", "rust-ownership"),
        ("  Hello,   World! ", "hello-world"),
        ("Guía de React", "gua-de-react"),
        ("--a--b--", "a-b"),
    ])
    def test_compute_slug(self, raw, expected):
        assert compute_slug(raw) == expected
