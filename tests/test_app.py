"""
Tests for the command line entry point.
"""

import pytest

import app
from decision_log import FetchError, initial_state, to_page
from decision_log import state as transitions
from news_ingestion import CryptoNews
from tests.decision_log.factories import make_records


class TestArguments:
    """Tests for argument parsing and validation."""

    def test_decisions_arguments(self):
        args = app.create_parser().parse_args(
            ["decisions", "-t", "trader-1", "--status", "failed", "--page", "2"]
        )
        assert args.trader_id == "trader-1"
        assert args.status == "failed"
        assert args.page == 2
        assert app.validate_args(args) == []

    def test_invalid_page(self):
        args = app.create_parser().parse_args(["decisions", "-t", "trader-1", "--page", "0"])
        assert app.validate_args(args) == ["--page must be at least 1"]

    def test_unknown_status_rejected(self):
        with pytest.raises(SystemExit):
            app.create_parser().parse_args(["decisions", "-t", "x", "--status", "maybe"])

    def test_main_returns_two_on_validation_error(self):
        assert app.main(["decisions", "-t", "   "]) == 2


class TestRendering:
    """Tests for plain-text rendering."""

    def test_page(self):
        state = transitions.apply_records(initial_state("trader-1"), make_records(25))
        text = app.format_page(to_page(state))

        assert "showing 1-20 of 25 (page 1/2)" in text
        assert "#25" in text

    def test_no_decisions(self):
        state = transitions.apply_records(initial_state("trader-1"), [])
        assert app.format_page(to_page(state)) == "No decisions yet."

    def test_no_matches(self):
        state = transitions.apply_records(initial_state("trader-1"), make_records(3))
        state = transitions.set_search_term(state, "nothing")
        assert "Try different filters" in app.format_page(to_page(state))

    def test_failure_before_data(self):
        state = transitions.apply_failure(initial_state("trader-1"), FetchError("refused"))
        assert app.format_page(to_page(state)) == "Failed to load decisions: refused"

    def test_news(self):
        item = CryptoNews(
            index=0,
            news_id="1",
            content="Long content",
            content_prefix="Headline",
            link="",
            poster="金色财经",
            time="2026-01-01 12:00:00",
        )
        assert app.format_news([item]) == "[2026-01-01 12:00:00] Headline"
        assert app.format_news([]) == "No news in the last 30 minutes."

    def test_failed_refresh_with_no_matches(self):
        state = transitions.apply_records(initial_state("trader-1"), make_records(5))
        state = transitions.apply_failure(state, FetchError("refused"))
        text = app.format_page(to_page(transitions.set_search_term(state, "nothing")))

        assert text.splitlines() == [
            "Failed to load decisions: refused",
            "No decisions match the current filters. Try different filters.",
        ]
