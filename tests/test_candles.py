import pytest

from chartsync.core.candles import normalize_candles, parse_candle
from chartsync.core.errors import DiagnosticKind, MalformedRecord
from chartsync.core.timeframes import TimeWindow

from conftest import DAY, day, make_record


class TestParseCandle:

    def test_parses_alternate_timestamp_field_and_strings(self):
        candle = parse_candle(
            {"datetime": "2024-01-01T00:00:00Z", "open": "1", "high": "3", "low": "0.5", "close": "2"}
        )
        assert candle.timestamp_ms == day(1)
        assert candle.prices == (1.0, 3.0, 0.5, 2.0)
        assert candle.volume is None

    @pytest.mark.parametrize(
        "record",
        [
            {"timestamp": None, "open": 1, "high": 1, "low": 1, "close": 1},
            {"timestamp": "garbage", "open": 1, "high": 1, "low": 1, "close": 1},
            {"timestamp": 0, "open": 1, "high": 1, "low": 1},
            {"timestamp": 0, "open": 1, "high": "x", "low": 1, "close": 1},
            {"timestamp": 0, "open": 1, "high": 1, "low": float("nan"), "close": 1},
            [0, 1, 1, 1, 1],
        ],
    )
    def test_malformed_record_raises(self, record):
        with pytest.raises(MalformedRecord):
            parse_candle(record)

    def test_bad_volume_is_not_fatal(self):
        candle = parse_candle(make_record(day(1), volume="n/a"))
        assert candle.volume is None


class TestNormalizeCandles:

    def test_sorted_ascending(self):
        records = [make_record(day(3)), make_record(day(1)), make_record(day(2))]
        candles = normalize_candles(records)
        assert [c.timestamp_ms for c in candles] == [day(1), day(2), day(3)]

    def test_duplicate_timestamps_last_wins(self):
        records = [
            make_record(day(1), close=10.0),
            make_record(day(2), close=20.0),
            make_record(day(1), close=99.0),
        ]
        candles = normalize_candles(records)
        assert len(candles) == 2
        assert candles[0].close == 99.0

    def test_malformed_records_dropped_and_counted(self, collector):
        records = [
            make_record(day(1)),
            dict(make_record(day(2)), close=None),
            {"timestamp": "bad", "open": 1, "high": 1, "low": 1, "close": 1},
            make_record(day(3)),
        ]
        candles = normalize_candles(records, on_diagnostic=collector)
        assert [c.timestamp_ms for c in candles] == [day(1), day(3)]
        malformed = collector.of_kind(DiagnosticKind.MALFORMED_RECORD)
        assert len(malformed) == 1
        assert malformed[0].count == 2

    def test_bounding_keeps_latest(self):
        records = [make_record(day(1) + i * 60_000, close=float(i + 1)) for i in range(1500)]
        candles = normalize_candles(records, max_points=1000)
        assert len(candles) == 1000
        assert candles[0].close == 501.0
        assert candles[-1].close == 1500.0

    def test_bounding_applies_after_sort(self):
        records = [make_record(day(1) + i * 60_000, close=float(i + 1)) for i in range(1500)]
        candles = normalize_candles(list(reversed(records)), max_points=1000)
        assert candles[-1].close == 1500.0
        assert all(a.timestamp_ms < b.timestamp_ms for a, b in zip(candles, candles[1:]))

    def test_window(self):
        records = [make_record(day(n)) for n in range(1, 6)]
        candles = normalize_candles(records, window=TimeWindow(start_ms=day(2), end_ms=day(4)))
        assert [c.timestamp_ms for c in candles] == [day(2), day(3), day(4)]

    def test_empty_emits_diagnostic(self, collector):
        assert normalize_candles([], on_diagnostic=collector) == []
        assert len(collector.of_kind(DiagnosticKind.EMPTY_SERIES)) == 1

    def test_all_invalid_is_empty(self, collector):
        candles = normalize_candles([{"close": 1}] * 3, on_diagnostic=collector)
        assert candles == []
        assert collector.of_kind(DiagnosticKind.MALFORMED_RECORD)[0].count == 3
        assert collector.of_kind(DiagnosticKind.EMPTY_SERIES)

    def test_input_not_mutated(self, daily_records):
        snapshot = [dict(r) for r in daily_records]
        normalize_candles(daily_records)
        assert daily_records == snapshot

    def test_hourly_spacing(self):
        records = [make_record(day(1) + h * 3_600_000) for h in range(48)]
        candles = normalize_candles(records)
        assert candles[-1].timestamp_ms - candles[0].timestamp_ms == 2 * DAY - 3_600_000
