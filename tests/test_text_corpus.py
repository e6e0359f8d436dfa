"""
Tests for the text corpus extractor.

Range resolution, text answer flattening and the time-window query.
"""

import pytest
from datetime import datetime
from sqlalchemy.exc import OperationalError

from umrah_feedback.exceptions import CorpusFetchError
from umrah_feedback.services.text_corpus import (
    extract_text_responses,
    fetch_corpus,
    normalize_range,
    resolve_cutoff,
)

NOW = datetime(2026, 3, 31, 12, 0, 0)


class TestNormalizeRange:
    """Tests for range token handling."""

    @pytest.mark.parametrize("token", ["1m", "6m", "1y"])
    def test_known_tokens_kept(self, token):
        assert normalize_range(token) == token

    @pytest.mark.parametrize("token", [None, "", "3m", "1Y", "week"])
    def test_unknown_tokens_default_to_one_month(self, token):
        assert normalize_range(token) == "1m"


class TestResolveCutoff:
    """Tests for calendar-based cutoffs."""

    def test_one_month_clamps_to_end_of_february(self):
        assert resolve_cutoff("1m", NOW) == datetime(2026, 2, 28, 12, 0, 0)

    def test_six_months(self):
        assert resolve_cutoff("6m", NOW) == datetime(2025, 9, 30, 12, 0, 0)

    def test_one_year_from_leap_day(self):
        assert resolve_cutoff("1y", datetime(2024, 2, 29, 8, 30)) == datetime(2023, 2, 28, 8, 30)

    def test_default_is_one_month(self):
        assert resolve_cutoff(None, NOW) == resolve_cutoff("1m", NOW)
        assert resolve_cutoff("bogus", NOW) == resolve_cutoff("1m", NOW)

    def test_uses_current_time_when_now_missing(self):
        before = datetime.utcnow()
        cutoff = resolve_cutoff("1m")
        assert cutoff < before


class TestExtractTextResponses:
    """Tests for flattening survey answers."""

    def test_only_trimmed_non_blank_text(self):
        answer_sets = [
            {
                "responses": [
                    {"id": "q1", "type": "text", "value": "  slow lifts "},
                    {"id": "q2", "type": "rating", "value": 5},
                    {"id": "q3", "type": "text", "value": "   "},
                    {"id": "q4", "type": "text", "value": ""},
                    {"id": "q5", "type": "checkbox", "value": ["bad", "slow"]},
                ]
            },
            {"responses": [{"id": "q6", "type": "text", "value": "poor food"}]},
        ]
        assert extract_text_responses(answer_sets) == ["slow lifts", "poor food"]

    def test_tolerates_malformed_payloads(self):
        answer_sets = [
            None,
            "not a dict",
            {},
            {"responses": "oops"},
            {"responses": [{"type": "text", "value": 42}, "junk", {"type": "text"}]},
            {"responses": [{"type": "text", "value": "missing maps"}]},
        ]
        assert extract_text_responses(answer_sets) == ["missing maps"]

    def test_empty_input(self):
        assert extract_text_responses([]) == []


class TestFetchCorpus:
    """Tests for the time-filtered survey query."""

    @pytest.mark.asyncio
    async def test_excludes_surveys_before_cutoff(self, test_db, add_survey):
        await add_survey(["old slow lifts"], created_at=datetime(2026, 2, 28, 11, 59, 59))
        await add_survey(["edge poor food"], created_at=datetime(2026, 2, 28, 12, 0, 0))
        await add_survey(["new bad wifi"], created_at=datetime(2026, 3, 15, 9, 0, 0))

        corpus = await fetch_corpus(test_db, "1m", now=NOW)

        assert corpus.range == "1m"
        assert corpus.cutoff == datetime(2026, 2, 28, 12, 0, 0)
        assert corpus.total_surveys == 2
        assert corpus.texts == ["edge poor food", "new bad wifi"]

    @pytest.mark.asyncio
    async def test_wider_range_includes_older_surveys(self, test_db, add_survey):
        await add_survey(["old slow lifts"], created_at=datetime(2026, 1, 5))
        await add_survey(["new bad wifi"], created_at=datetime(2026, 3, 15))

        corpus = await fetch_corpus(test_db, "6m", now=NOW)

        assert corpus.total_surveys == 2
        assert corpus.texts == ["old slow lifts", "new bad wifi"]

    @pytest.mark.asyncio
    async def test_unknown_range_uses_one_month(self, test_db, add_survey):
        await add_survey(["old slow lifts"], created_at=datetime(2026, 1, 5))

        corpus = await fetch_corpus(test_db, "2w", now=NOW)

        assert corpus.range == "1m"
        assert corpus.total_surveys == 0
        assert corpus.texts == []

    @pytest.mark.asyncio
    async def test_surveys_without_text_still_counted(self, test_db, add_survey):
        await add_survey([], created_at=datetime(2026, 3, 20))

        corpus = await fetch_corpus(test_db, "1m", now=NOW)

        assert corpus.total_surveys == 1
        assert corpus.texts == []

    @pytest.mark.asyncio
    async def test_query_failure_raises_corpus_fetch_error(self, test_db, monkeypatch):
        cause = OperationalError("SELECT", {}, Exception("disk I/O error"))

        async def failing_execute(*args, **kwargs):
            raise cause

        monkeypatch.setattr(test_db, "execute", failing_execute)

        with pytest.raises(CorpusFetchError) as exc_info:
            await fetch_corpus(test_db, "1m", now=NOW)

        assert exc_info.value.cause is cause
        assert exc_info.value.status_code == 500
        assert "Failed to fetch surveys" in exc_info.value.detail
