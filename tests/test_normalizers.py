"""
Tests for opening-hours normalization and free-text parsing.
"""
from uuid import uuid4

import pytest

from app.errors import InvalidArgumentError
from app.models.places import PlaceCategory, ProviderPeriod, ProviderPeriodPoint
from app.utils.normalizers import (
    is_all_categories,
    is_closed_status,
    normalize_opening_hours,
    parse_category,
    parse_place_id,
    parse_visited,
)


def _period(day, open_at, close_at=None, close_day=None):
    close = None
    if close_at is not None:
        close = ProviderPeriodPoint(
            day=day if close_day is None else close_day,
            hour=close_at[0],
            minute=close_at[1],
        )
    return ProviderPeriod(
        open=ProviderPeriodPoint(day=day, hour=open_at[0], minute=open_at[1]),
        close=close,
    )


class TestNormalizeOpeningHours:
    def test_maps_day_index_to_weekday_name(self):
        hours = normalize_opening_hours([
            _period(0, (9, 0), (17, 0)),
            _period(6, (10, 15), (23, 45)),
        ])

        assert set(hours) == {"Sunday", "Saturday"}
        saturday = hours["Saturday"][0]
        assert (saturday.open_hour, saturday.open_minute) == (10, 15)
        assert (saturday.close_hour, saturday.close_minute) == (23, 45)

    def test_split_shifts_keep_input_order(self):
        hours = normalize_opening_hours([
            _period(2, (11, 30), (14, 30)),
            _period(2, (17, 30), (22, 0)),
        ])

        tuesday = hours["Tuesday"]
        assert [p.open_hour for p in tuesday] == [11, 17]
        assert [p.close_hour for p in tuesday] == [14, 22]

    def test_missing_days_have_no_entry(self):
        hours = normalize_opening_hours([_period(1, (8, 0), (16, 0))])

        assert list(hours) == ["Monday"]
        assert "Wednesday" not in hours

    def test_period_without_close_keeps_zero_closing_time(self):
        hours = normalize_opening_hours([_period(0, (0, 0))])

        assert len(hours["Sunday"]) == 1
        period = hours["Sunday"][0]
        assert (period.close_hour, period.close_minute) == (0, 0)

    def test_empty_schedule(self):
        assert normalize_opening_hours([]) == {}

    @pytest.mark.parametrize("day", [-1, 7, 12])
    def test_invalid_day_index_raises(self, day):
        with pytest.raises(ValueError):
            normalize_opening_hours([_period(day, (9, 0), (17, 0))])

    def test_normalization_is_idempotent(self):
        schedule = [
            _period(5, (17, 0), (2, 0), close_day=6),
            _period(5, (11, 0), (14, 0)),
            _period(3, (9, 0)),
        ]

        assert normalize_opening_hours(schedule) == normalize_opening_hours(schedule)

    def test_serializes_with_original_field_names(self):
        hours = normalize_opening_hours([_period(4, (7, 5), (15, 10))])

        assert hours["Thursday"][0].model_dump(by_alias=True) == {
            "openingHour": 7,
            "openingMinute": 5,
            "closingHour": 15,
            "closingMinute": 10,
        }


class TestClosedStatus:
    @pytest.mark.parametrize(
        "status,expected",
        [
            ("OPERATIONAL", False),
            ("CLOSED_PERMANENTLY", True),
            ("CLOSED_TEMPORARILY", True),
            (None, None),
        ],
    )
    def test_closed_marker(self, status, expected):
        assert is_closed_status(status) is expected


class TestParsers:
    def test_parse_place_id(self):
        place_id = uuid4()
        assert parse_place_id(str(place_id)) == place_id
        assert parse_place_id(place_id) == place_id

    def test_parse_place_id_rejects_garbage(self):
        with pytest.raises(InvalidArgumentError):
            parse_place_id("not-a-uuid")

    def test_parse_category_exact_names(self):
        assert parse_category("RESTAURANT") is PlaceCategory.RESTAURANT
        assert parse_category(" CAFE ") is PlaceCategory.CAFE
        assert parse_category("") is None
        assert parse_category(None) is None

    @pytest.mark.parametrize("text", ["restaurant", "Restaurant", "PUB"])
    def test_parse_category_rejects_unknown_or_wrong_case(self, text):
        with pytest.raises(InvalidArgumentError):
            parse_category(text)

    @pytest.mark.parametrize(
        "raw,expected",
        [("true", True), ("FALSE", False), (" True ", True), ("", None), (None, None), (True, True)],
    )
    def test_parse_visited(self, raw, expected):
        assert parse_visited(raw) is expected

    def test_parse_visited_rejects_garbage(self):
        with pytest.raises(InvalidArgumentError):
            parse_visited("maybe")

    def test_all_categories_is_case_insensitive(self):
        assert is_all_categories("all")
        assert is_all_categories("ALL")
        assert not is_all_categories("BAR")
