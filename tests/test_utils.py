"""
Unit tests for utility functions and configuration
"""

import pytest

from tango.config import Settings, StudyTimings
from tango.utils import (
    Timer,
    calculate_success_rate,
    extract_json_safely,
    format_json_safely,
    safe_int,
)


class TestJsonHelpers:
    """Test JSON helpers used for the local progress blob"""

    def test_extract_json_object(self):
        assert extract_json_safely('{"1": {"isLearned": true}}') == {"1": {"isLearned": True}}

    @pytest.mark.parametrize("raw", [None, "", "not json", "[1, 2]", "42"])
    def test_extract_json_non_object(self, raw):
        assert extract_json_safely(raw) == {}

    def test_format_json_keeps_japanese(self):
        assert format_json_safely({"word": "単語"}) == '{"word":"単語"}'

    def test_format_json_unserializable(self):
        assert format_json_safely({"bad": object()}) == "{}"


class TestNumberHelpers:
    """Test numeric helpers"""

    @pytest.mark.parametrize("value,expected", [("5", 5), (3.9, 3), (None, 0), ("x", 0)])
    def test_safe_int(self, value, expected):
        assert safe_int(value) == expected

    def test_safe_int_default(self):
        assert safe_int("x", default=-1) == -1

    @pytest.mark.parametrize(
        "correct,total,expected",
        [(7, 10, 70), (2, 3, 67), (1, 3, 33), (0, 5, 0), (3, 0, 0)],
    )
    def test_calculate_success_rate(self, correct, total, expected):
        assert calculate_success_rate(correct, total) == expected


class TestTimer:
    """Test the session duration timer"""

    def test_not_started(self):
        timer = Timer()

        assert timer.elapsed() is None
        assert timer.get_elapsed_time() == 0.0

    def test_stopped_timer_is_frozen(self):
        timer = Timer()
        timer.start()
        timer.stop()

        assert timer.elapsed() == timer.elapsed()
        assert timer.get_elapsed_time() >= 0.0


class TestSettings:
    """Test configuration defaults and overrides"""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.flashcard_time_limit_ms == 5000
        assert settings.flashcard_expiry_grace_ms == 1000
        assert settings.quiz_time_limit_ms == 10000
        assert settings.quiz_review_delay_ms == 2000
        assert settings.min_quiz_word_count == 4

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("QUIZ_TIME_LIMIT_MS", "15000")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        settings = Settings(_env_file=None)

        assert settings.quiz_time_limit_ms == 15000
        assert settings.log_level == "DEBUG"

    def test_study_timings_from_settings(self):
        settings = Settings(_env_file=None, quiz_tick_ms=50, flashcard_time_limit_ms=3000)

        timings = StudyTimings.from_settings(settings)

        assert timings.quiz_tick_ms == 50
        assert timings.flashcard_time_limit_ms == 3000
        assert timings.quiz_review_delay_ms == 2000
        assert StudyTimings() == StudyTimings.from_settings(Settings(_env_file=None))
