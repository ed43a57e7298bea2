"""Tests for formatting and datetime helpers used in job presentation."""

from datetime import datetime, timedelta, timezone

import pytest

from core.utils.datetime import days_since, ensure_utc, format_posted_ago
from core.utils.formatting import (
    escape_like,
    file_extension,
    format_file_size,
    format_percentage,
    format_salary_range,
    normalize_skills,
)


class TestSalaryRange:

    @pytest.mark.parametrize("salary_min,salary_max,expected", [
        (120000, 150000, "$120k - $150k"),
        (80000, None, "From $80k"),
        (None, 90000, "Up to $90k"),
        (None, None, "Salary not specified"),
        (0, 0, "Salary not specified"),
        (85500, None, "From $86k"),
    ])
    def test_formats(self, salary_min, salary_max, expected):
        assert format_salary_range(salary_min, salary_max) == expected


class TestPostedAgo:

    REFERENCE = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("days,expected", [
        (0, "Today"),
        (1, "Yesterday"),
        (3, "3 days ago"),
        (6, "6 days ago"),
        (7, "1 weeks ago"),
        (20, "2 weeks ago"),
        (29, "4 weeks ago"),
        (30, "1 months ago"),
        (95, "3 months ago"),
    ])
    def test_buckets(self, days, expected):
        posted = self.REFERENCE - timedelta(days=days, hours=1)
        assert format_posted_ago(posted, self.REFERENCE) == expected

    def test_naive_datetimes_are_utc(self):
        naive = datetime(2024, 6, 29, 12, 0)
        assert ensure_utc(naive).tzinfo == timezone.utc
        assert days_since(naive, self.REFERENCE) == 1

    def test_future_dates_count_as_today(self):
        assert format_posted_ago(self.REFERENCE + timedelta(days=2), self.REFERENCE) == "Today"


class TestMisc:

    def test_percentage(self):
        assert format_percentage(33.333) == "33.3%"
        assert format_percentage(50, decimals=0) == "50%"

    def test_file_size(self):
        assert format_file_size(512) == "512.0 B"
        assert format_file_size(5 * 1024 * 1024) == "5.0 MB"

    @pytest.mark.parametrize("filename,expected", [
        ("cv.PDF", "pdf"),
        ("my.resume.docx", "docx"),
        ("noext", "pdf"),
        ("evil.p/df", "pdf"),
    ])
    def test_file_extension(self, filename, expected):
        assert file_extension(filename) == expected

    def test_normalize_skills(self):
        assert normalize_skills([" python", "", "  ", "sql "]) == ["python", "sql"]


class TestEscapeLike:

    @pytest.mark.parametrize("text,expected", [
        ("python", "python"),
        ("100%", "100\\%"),
        ("C_Sharp", "C\\_Sharp"),
        ("a\\b", "a\\\\b"),
        ("\\%", "\\\\\\%"),
    ])
    def test_escapes_wildcards(self, text, expected):
        assert escape_like(text) == expected
