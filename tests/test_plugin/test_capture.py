"""Tests for the auto-capture policy."""

import re

import pytest

from memstore.plugin.capture import DEFAULT_CAPTURE_PATTERNS, CapturePolicy


class TestDefaultPatterns:
    @pytest.mark.parametrize(
        "text",
        [
            "I prefer dark mode in every editor",
            "I work at a small robotics company",
            "I'm a backend developer",
            "I decided to drop the ORM",
            "my favorite editor is neovim",
            "Remember that the staging DB resets nightly",
            "Don't forget the release notes",
            "our stack is Python and Postgres",
            "We switched to uv last month",
        ],
    )
    def test_factual_statements_captured(self, text):
        assert CapturePolicy().should_capture(text)

    @pytest.mark.parametrize(
        "text",
        [
            "What time is the meeting?",
            "Summarize this article",
            "",
        ],
    )
    def test_other_messages_ignored(self, text):
        assert not CapturePolicy().should_capture(text)

    def test_case_insensitive(self):
        assert CapturePolicy().should_capture("WE USE POSTGRES")

    def test_nine_defaults(self):
        assert len(DEFAULT_CAPTURE_PATTERNS) == 9
        assert len(CapturePolicy().patterns) == 9


class TestCustomPatterns:
    def test_replace_defaults(self):
        policy = CapturePolicy([r"\bnote to self\b"])

        assert policy.should_capture("Note to self: rotate keys")
        assert not policy.should_capture("We use Postgres")

    def test_add_pattern_appended(self):
        policy = CapturePolicy([])
        assert not policy.should_capture("ticket ABC-123 is blocked")

        policy.add_pattern(r"\b[A-Z]+-\d+\b")

        assert policy.should_capture("ticket ABC-123 is blocked")

    def test_precompiled_pattern_kept(self):
        compiled = re.compile(r"exact")
        policy = CapturePolicy([compiled])

        assert policy.patterns == [compiled]
        assert not policy.should_capture("EXACT")

    def test_matching_pattern_returns_first(self):
        policy = CapturePolicy([r"postgres", r"we use"])
        assert policy.matching_pattern("we use postgres").pattern == "postgres"
