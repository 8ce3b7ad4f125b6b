import pytest

from chartsync.core.errors import DiagnosticCollector
from chartsync.core.timestamps import MS_PER_DAY
from chartsync.core.types import IndicatorDefinition, Placement, RawPoint

DAY = MS_PER_DAY
HOUR = 3_600_000
BASE_MS = 1_704_067_200_000  # 2024-01-01T00:00:00Z


def day(n: int) -> int:
    """UTC midnight of day n (day 1 = 2024-01-01)."""
    return BASE_MS + (n - 1) * DAY


def make_record(ts, close=100.0, **extra):
    record = {
        "timestamp": ts,
        "open": close - 1.0,
        "high": close + 2.0,
        "low": close - 2.0,
        "close": close,
        "volume": 1000.0,
    }
    record.update(extra)
    return record


def make_indicator(name, points, placement=Placement.MAIN):
    return IndicatorDefinition(
        name=name,
        placement=placement,
        color="#ffffff",
        stroke_width=2.0,
        raw_points=tuple(RawPoint(ts, v) for ts, v in points),
    )


@pytest.fixture
def daily_records():
    """Three daily candles: days 1, 2, 3 (closes 10, 15, 20)."""
    return [
        make_record(day(1), close=10.0),
        make_record(day(2), close=15.0),
        make_record(day(3), close=20.0),
    ]


@pytest.fixture
def collector():
    return DiagnosticCollector()


@pytest.fixture
def trade_records():
    return [
        {
            "id": "t1",
            "entry_timestamp": day(1),
            "entry_price": 10.0,
            "exit_timestamp": day(2),
            "exit_price": 15.0,
            "trade_type": "buy",
            "position_mode": "long",
            "pnl": 5.0,
        },
        {
            "id": "t2",
            "entryTimestamp": "2024-01-02T12:00:00Z",
            "entryPrice": "16.5",
            "tradeType": "SELL",
            "metadata": {"positionMode": "short"},
        },
        {
            "id": "t3",
            "entry_timestamp": day(2),
            "entry_price": 15.0,
            "exit_timestamp": day(3),
            "exit_price": 20.0,
            "trade_type": "buy",
            "position_mode": "all",
        },
        {
            "id": "t4",
            "entry_timestamp": day(3),
            "entry_price": 20.0,
            "trade_type": "sell",
        },
    ]
