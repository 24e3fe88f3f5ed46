import datetime
import json

import pytest

from chronomap.data.event_model import Domain, Event, load_events, load_events_json, time_bounds
from chronomap.rendering.viewport_optimizer import ViewportOptimizer, get_visible_events
from chronomap.utils.civil_time import EARLIEST_MS, from_civil, to_datetime, to_ms
from chronomap.utils.error_handler import InvalidCoordinate, InvalidDomain, InvalidInstant, OutOfRangeInput
from chronomap.utils.timestamp_parser import TimestampParseError, TimestampParser

UTC = datetime.timezone.utc


class TestTimestampParser:

    @pytest.mark.parametrize('value', [
        "2021-01-01",
        "2021-01-01T00:00:00Z",
        "2021-01-01T00:00:00.000Z",
        "2021-01-01 00:00",
        "2021-01-01T01:00:00+01:00",
        "2021/01/01",
        1609459200000,
        "1609459200000",
        datetime.date(2021, 1, 1),
        datetime.datetime(2021, 1, 1),
    ])
    def test_formats_parse_to_utc(self, value):
        assert TimestampParser.parse_timestamp(value) == datetime.datetime(2021, 1, 1, tzinfo=UTC)

    @pytest.mark.parametrize('value', [None, "", "   ", "yesterday", True, float('nan'), [2021]])
    def test_invalid_values_raise(self, value):
        with pytest.raises(TimestampParseError):
            TimestampParser.parse_timestamp(value)

    def test_parse_error_is_invalid_instant(self):
        with pytest.raises(InvalidInstant):
            TimestampParser.parse_timestamp("not a date")

    def test_time_bounds(self):
        earliest, latest = TimestampParser.get_time_bounds(["2021-06-01", "1999-12-31", 0])

        assert earliest == datetime.datetime(1970, 1, 1, tzinfo=UTC)
        assert latest == datetime.datetime(2021, 6, 1, tzinfo=UTC)
        assert TimestampParser.get_time_bounds([]) == (None, None)

    def test_format_timestamp(self):
        assert TimestampParser.format_timestamp(datetime.datetime(2021, 1, 1, 8, 5, tzinfo=UTC)) == "2021-01-01 08:05:00"
        assert TimestampParser.format_timestamp(None) == ""


class TestCivilTime:

    def test_to_ms(self):
        assert to_ms(datetime.datetime(2021, 1, 1, tzinfo=UTC)) == 1609459200000
        assert to_ms(datetime.datetime(2021, 1, 1, 2, tzinfo=datetime.timezone(datetime.timedelta(hours=2)))) == 1609459200000
        assert to_ms(datetime.date(1970, 1, 2)) == 86400000

    def test_to_ms_rejects_non_instants(self):
        with pytest.raises(InvalidInstant):
            to_ms("2021-01-01")
        with pytest.raises(InvalidInstant):
            to_ms(True)
        with pytest.raises(OutOfRangeInput):
            to_ms(float('inf'))

    def test_to_datetime(self):
        assert to_datetime(1609459200123) == datetime.datetime(2021, 1, 1, 0, 0, 0, 123000, tzinfo=UTC)
        assert to_datetime(EARLIEST_MS) == datetime.datetime(1, 1, 1, tzinfo=UTC)
        with pytest.raises(OutOfRangeInput):
            to_datetime(from_civil(0, 6, 1))


class TestEvent:

    def test_from_record(self):
        event = Event.from_record({'date': "1969-07-20T20:17:00Z", 'title': "Apollo 11",
                                   'latitude': 0.67, 'lon': 23.47})

        assert event.date == datetime.datetime(1969, 7, 20, 20, 17, tzinfo=UTC)
        assert event.title == "Apollo 11"
        assert (event.lat, event.lng) == (0.67, 23.47)
        assert event.time_value == to_ms(event.date)

    def test_invalid_coordinates(self):
        with pytest.raises(InvalidCoordinate):
            Event(datetime.datetime(2021, 1, 1, tzinfo=UTC), "North of north", lat=91.0)
        with pytest.raises(InvalidCoordinate):
            Event(datetime.datetime(2021, 1, 1, tzinfo=UTC), "Nowhere", lng=float('nan'))

    def test_offsets_at_edges_of_datetime_range(self):
        early = datetime.datetime(1, 1, 1, 2, tzinfo=datetime.timezone(datetime.timedelta(hours=5)))
        late = datetime.datetime(9999, 12, 31, 22, tzinfo=datetime.timezone(datetime.timedelta(hours=-5)))

        assert to_ms(early) == EARLIEST_MS - 3 * 3600 * 1000
        assert to_ms(late) == from_civil(10000, 1, 1, 3)
        assert Event(early, "early").time_value == EARLIEST_MS - 3 * 3600 * 1000

    def test_parser_rejects_offsets_outside_utc_range(self):
        with pytest.raises(TimestampParseError):
            TimestampParser.parse_timestamp("0001-01-01T02:00:00+05:00")
        with pytest.raises(TimestampParseError):
            TimestampParser.parse_timestamp("9999-12-31T22:00:00-05:00")

    def test_invalid_date(self):
        with pytest.raises(InvalidInstant):
            Event("2021-01-01", "String date")
        with pytest.raises(InvalidInstant):
            Event.from_record({'title': "No date"})

    def test_events_are_immutable(self):
        event = Event(datetime.datetime(2021, 1, 1, tzinfo=UTC), "Fixed")

        with pytest.raises(AttributeError):
            event.title = "Changed"

    def test_load_events_keeps_order(self):
        records = [{'date': "2021-01-02", 'title': "B"}, {'date': "2021-01-01", 'title': "A"}]

        assert [e.title for e in load_events(records)] == ["B", "A"]

    def test_load_events_skip_invalid(self):
        records = [{'date': "2021-01-01", 'title': "ok"}, {'date': "bad", 'title': "broken"},
                   {'date': "2021-01-03", 'title': "far north", 'lat': 120}]

        with pytest.raises(InvalidInstant):
            load_events(records)
        assert [e.title for e in load_events(records, skip_invalid=True)] == ["ok"]

    def test_load_events_skips_dates_outside_utc_range(self):
        records = [{'date': "0001-01-01T02:00:00+05:00", 'title': "too early"},
                   {'date': "2021-01-01", 'title': "ok"}]

        assert [e.title for e in load_events(records, skip_invalid=True)] == ["ok"]

    def test_load_events_json(self, tmp_path):
        path = tmp_path / 'events.json'
        path.write_text(json.dumps({'events': [{'date': "2020-02-29", 'title': "Leap", 'lat': 1, 'lng': 2}]}))

        events = load_events_json(str(path))

        assert len(events) == 1
        assert events[0].date == datetime.datetime(2020, 2, 29, tzinfo=UTC)
        assert time_bounds(events) == (events[0].time_value, events[0].time_value)
        assert time_bounds([]) == (None, None)


class TestDomain:

    def test_default_domain_starts_at_year_one(self):
        domain = Domain.default(now=datetime.datetime(2026, 10, 19, tzinfo=UTC))

        assert domain.min == EARLIEST_MS
        assert domain.max == from_civil(2026, 10, 19)
        assert domain.contains(datetime.datetime(1066, 10, 14, tzinfo=UTC))
        assert not domain.contains(from_civil(0, 12, 31))

    def test_invalid_domain(self):
        with pytest.raises(InvalidDomain):
            Domain(from_civil(2021), from_civil(2020))
        with pytest.raises(InvalidDomain):
            Domain(from_civil(2021), float('nan'))


class TestViewportOptimizer:

    def test_filters_to_window_in_input_order(self, january_events):
        optimizer = ViewportOptimizer()

        visible = optimizer.get_visible_events(list(reversed(january_events)),
                                               from_civil(2021, 1, 6), from_civil(2021, 1, 16))

        assert [e.title for e in visible] == ["E3", "E2", "E1"]
        stats = optimizer.get_culling_stats()
        assert stats['total_events'] == 7
        assert stats['visible_events'] == 3

    def test_buffer_widens_window(self, january_events):
        visible = get_visible_events(january_events, from_civil(2021, 1, 6), from_civil(2021, 1, 16),
                                     buffer_ratio=0.5)

        assert [e.title for e in visible] == ["E0", "E1", "E2", "E3", "E4"]

    def test_empty_result(self, january_events):
        assert get_visible_events(january_events, from_civil(1900), from_civil(1901)) == []
