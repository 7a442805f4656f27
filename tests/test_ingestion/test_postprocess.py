"""Tests for date-window filtering, relative-date buckets and truncation."""

from datetime import date, datetime, timedelta, timezone

import pytest

from conftest import FIXED_NOW

from hotboard.ingestion.postprocess import (
    DateBucket,
    classify_relative_date,
    filter_date_window,
    item_field,
    truncate_text,
)
from hotboard.ingestion.schemas import CanonicalItem


def _issue(name: str, apply_date, **extra) -> CanonicalItem:
    return CanonicalItem(
        title=name,
        link=f"https://ipo.example.com/{name}",
        extra={"apply_date": apply_date, **extra},
    )


class TestFilterDateWindow:
    """Tests for filter_date_window (now = 2024-06-15)."""

    def test_keeps_inside_and_drops_outside(self):
        items = [
            _issue("a", "2024-06-10"),
            _issue("b", "2024-06-22"),
            _issue("c", "2024-06-05"),
            _issue("d", "2024-06-23"),
        ]

        kept = filter_date_window(items, "apply_date", FIXED_NOW)

        assert {i.title for i in kept} == {"a", "b"}

    def test_window_bounds_are_inclusive(self):
        items = [_issue("start", "2024-06-08"), _issue("end", "2024-06-22")]

        kept = filter_date_window(items, "apply_date", FIXED_NOW)

        assert len(kept) == 2

    def test_sorted_latest_first(self):
        items = [
            _issue("mid", "2024-06-15"),
            _issue("early", "2024-06-09"),
            _issue("late", "2024-06-20"),
        ]

        kept = filter_date_window(items, "apply_date", FIXED_NOW)

        assert [i.title for i in kept] == ["late", "mid", "early"]

    def test_ties_keep_input_order(self):
        items = [_issue("first", "2024-06-16"), _issue("second", "2024-06-16")]

        kept = filter_date_window(items, "apply_date", FIXED_NOW)

        assert [i.title for i in kept] == ["first", "second"]

    def test_unparseable_dates_dropped(self):
        items = [_issue("bad", "not a date"), _issue("none", None), _issue("ok", "2024-06-14")]

        kept = filter_date_window(items, "apply_date", FIXED_NOW)

        assert [i.title for i in kept] == ["ok"]

    def test_mixed_date_formats(self):
        items = [
            _issue("compact", "20240612"),
            _issue("slashes", "2024/06/13"),
            _issue("epoch_ms", int(datetime(2024, 6, 14, tzinfo=timezone.utc).timestamp() * 1000)),
        ]

        kept = filter_date_window(items, "apply_date", FIXED_NOW)

        assert [i.title for i in kept] == ["epoch_ms", "slashes", "compact"]

    def test_custom_window(self):
        items = [_issue("near", "2024-06-16"), _issue("far", "2024-06-18")]

        kept = filter_date_window(items, "apply_date", FIXED_NOW, window_days=1)

        assert [i.title for i in kept] == ["near"]

    def test_result_is_new_list(self):
        items = [_issue("a", "2024-06-15")]

        kept = filter_date_window(items, "apply_date", FIXED_NOW)

        assert kept is not items
        assert len(items) == 1


class TestClassifyRelativeDate:
    """Tests for classify_relative_date."""

    @pytest.mark.parametrize(
        "target,bucket,days",
        [
            ("2024-06-15", DateBucket.TODAY, 0),
            ("2024-06-16", DateBucket.TOMORROW, 1),
            ("2024-06-14", DateBucket.YESTERDAY, -1),
            ("2024-06-17", DateBucket.UPCOMING, 2),
            ("2024-06-18", DateBucket.UPCOMING, 3),
            ("2024-06-19", DateBucket.FUTURE, 4),
            ("2024-06-13", DateBucket.PAST, -2),
        ],
    )
    def test_buckets(self, target, bucket, days):
        result = classify_relative_date(target, FIXED_NOW)

        assert result.bucket == bucket
        assert result.days == days

    def test_time_of_day_does_not_matter(self):
        late = FIXED_NOW.replace(hour=23, minute=59)
        early = FIXED_NOW.replace(hour=0, minute=1)

        assert classify_relative_date("2024-06-16", late).bucket == DateBucket.TOMORROW
        assert classify_relative_date("2024-06-16", early).bucket == DateBucket.TOMORROW

    def test_timestamp_converted_to_reference_timezone(self):
        tz = timezone(timedelta(hours=8))
        now = datetime(2024, 6, 15, 9, 0, tzinfo=tz)

        # 17:00 UTC on the 15th is 01:00 on the 16th at UTC+8
        result = classify_relative_date("2024-06-15T17:00:00Z", now)

        assert result.bucket == DateBucket.TOMORROW

    def test_date_reference(self):
        assert classify_relative_date(date(2024, 6, 15), date(2024, 6, 15)).bucket == DateBucket.TODAY

    def test_unknown(self):
        result = classify_relative_date("whenever", FIXED_NOW)

        assert result.bucket == DateBucket.UNKNOWN
        assert result.days is None


class TestTruncateText:
    """Tests for truncate_text."""

    def test_long_text_cut_with_marker(self):
        text = "a" * 50

        assert truncate_text(text, 40) == "a" * 40 + "..."

    def test_short_text_unchanged(self):
        text = "a" * 30

        assert truncate_text(text, 40) == text

    def test_exact_length_unchanged(self):
        assert truncate_text("b" * 40) == "b" * 40

    def test_custom_marker(self):
        assert truncate_text("abcdef", 3, marker="…") == "abc…"


class TestItemField:
    """Tests for item_field."""

    def test_canonical_and_extra_fields(self):
        item = CanonicalItem(
            title="T",
            link="https://l",
            description="D",
            pubDate="2024-06-15",
            extra={"code": "301001"},
        )

        assert item_field(item, "title") == "T"
        assert item_field(item, "pubDate") == "2024-06-15"
        assert item_field(item, "code") == "301001"
        assert item_field(item, "missing") is None
