import pytest

from chartsync.core.errors import DiagnosticKind
from chartsync.core.pipeline import build_chart_model
from chartsync.core.types import ChartConfig, Placement, PanelKind, SeriesRole

from conftest import HOUR, day, make_indicator, make_record


@pytest.fixture
def indicators():
    return [
        make_indicator("SMA 2", [(day(2), 12.5), (day(3) + 2 * HOUR, 17.5)]),
        make_indicator("RSI 14", [(day(1), 40.0), (day(2), 55.0), (day(3), 70.0)], Placement.SUB),
        make_indicator("STALE", [(day(9), 1.0)]),
    ]


class TestBuildChartModel:

    def test_full_model(self, daily_records, indicators, trade_records):
        model = build_chart_model(daily_records, indicators, trade_records, "long")

        assert [p.kind for p in model.panels] == [PanelKind.PRIMARY, PanelKind.SECONDARY]
        primary = model.primary
        assert primary.series[0].role is SeriesRole.CANDLESTICK
        assert [s.name for s in primary.series] == ["Price", "SMA 2"]
        assert [p.timestamp_ms for p in primary.series[1].data] == [day(2), day(3)]
        assert len(primary.markers) == 2
        assert model.secondaries[0].title == "RSI 14"
        assert [t.id for t in model.trades] == ["t1"]

        unalignable = [d for d in model.diagnostics if d.kind is DiagnosticKind.UNALIGNABLE_INDICATOR]
        assert [d.subject for d in unalignable] == ["STALE"]
        assert [r.name for r in model.alignment] == ["SMA 2", "RSI 14", "STALE"]

    def test_idempotent(self, daily_records, indicators, trade_records):
        first = build_chart_model(daily_records, indicators, trade_records, "all")
        second = build_chart_model(daily_records, indicators, trade_records, "all")
        assert first == second
        assert first.panels == second.panels

    def test_bounding(self):
        records = [make_record(day(1) + i * HOUR, close=float(i + 1)) for i in range(1200)]
        model = build_chart_model(records)
        candles = model.primary.series[0].data
        assert len(candles) == 1000
        assert candles[-1].close == 1200.0

    def test_no_candles(self, indicators, trade_records):
        model = build_chart_model([], indicators, trade_records)
        assert model.panels == ()
        assert model.is_empty
        assert any(d.kind is DiagnosticKind.EMPTY_SERIES for d in model.diagnostics)

    def test_hook_receives_diagnostics(self, daily_records, indicators, collector):
        model = build_chart_model(daily_records, indicators, on_diagnostic=collector)
        assert tuple(collector.items) == model.diagnostics

    def test_timeframe_window(self):
        records = [make_record(day(n), close=float(n)) for n in range(1, 31)]
        model = build_chart_model(records, timeframe="1W", now_ms=day(30))
        candles = model.primary.series[0].data
        assert [c.timestamp_ms for c in candles] == [day(n) for n in range(23, 31)]

    def test_timeframe_requires_now(self, daily_records):
        with pytest.raises(ValueError):
            build_chart_model(daily_records, timeframe="1D")
        assert build_chart_model(daily_records, timeframe="ALL").primary is not None

    def test_focus_on_trades(self):
        records = [make_record(day(n)) for n in range(1, 101)]
        trades = [{"id": 1, "entry_timestamp": day(50), "entry_price": 1.0, "trade_type": "buy"}]
        config = ChartConfig(focus_on_trades=True, trade_window_buffer_days=5)
        model = build_chart_model(records, trades=trades, config=config)
        candles = model.primary.series[0].data
        assert candles[0].timestamp_ms == day(45)
        assert candles[-1].timestamp_ms == day(55)

    def test_unknown_position_mode(self, daily_records):
        with pytest.raises(ValueError):
            build_chart_model(daily_records, position_mode="hedged")

    def test_small_tolerance_config(self, daily_records):
        ind = make_indicator("SMA", [(day(2) + 2 * HOUR, 1.0)])
        config = ChartConfig(fallback_tolerance_ms=HOUR)
        model = build_chart_model(daily_records, [ind], config=config)
        assert len(model.primary.series) == 1


def test_string_placement_builds_secondary_panel(daily_records):
    rsi = make_indicator("RSI", [(day(1), 40.0), (day(3), 70.0)], placement="sub")
    model = build_chart_model(daily_records, [rsi])
    assert [p.kind for p in model.panels] == [PanelKind.PRIMARY, PanelKind.SECONDARY]
    assert [p.title for p in model.secondaries] == ["RSI"]
