import pytest

from chartsync.core.signals import parse_trades
from chartsync.core.timeframes import (
    TimeWindow,
    Timeframe,
    intersect,
    timeframe_window,
    trade_window,
)

from conftest import DAY, day


class TestTimeframe:

    @pytest.mark.parametrize("raw, expected", [("1d", Timeframe.D1), ("6M", Timeframe.M6), ("all", Timeframe.ALL), (None, Timeframe.ALL)])
    def test_parse(self, raw, expected):
        assert Timeframe.parse(raw) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            Timeframe.parse("2W")

    def test_window(self):
        assert timeframe_window("1Y", day(400)) == TimeWindow(day(400) - 365 * DAY, day(400))
        assert timeframe_window("ALL", day(400)) is None


class TestTradeWindow:

    def test_buffer_around_entries_and_exits(self, trade_records):
        window = trade_window(parse_trades(trade_records), buffer_days=30)
        assert window.start_ms == day(1) - 30 * DAY
        assert window.end_ms == day(3) + 30 * DAY

    def test_no_trades(self):
        assert trade_window([]) is None


class TestIntersect:

    def test_open_sides(self):
        a = TimeWindow(start_ms=10)
        b = TimeWindow(end_ms=20)
        assert intersect(a, b) == TimeWindow(10, 20)

    def test_none(self):
        w = TimeWindow(1, 2)
        assert intersect(None, w) is w
        assert intersect(w, None) is w
        assert intersect(None, None) is None

    def test_contains_inclusive(self):
        w = TimeWindow(10, 20)
        assert w.contains(10) and w.contains(20)
        assert not w.contains(21)
