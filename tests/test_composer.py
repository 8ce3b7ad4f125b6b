import pytest

from chartsync.core.candles import normalize_candles
from chartsync.core.composer import (
    build_primary_panel,
    build_secondary_panels,
    compose_panels,
    validate_primary_panel,
)
from chartsync.core.errors import InvariantViolation
from chartsync.core.partition import PartitionedSeries
from chartsync.core.signals import derive
from chartsync.core.types import (
    AlignedIndicatorSeries,
    AlignedPoint,
    ChartConfig,
    Panel,
    PanelKind,
    PanelSeries,
    Placement,
    SeriesRole,
    ValueAxis,
)

from conftest import day


def _series(name, values, placement=Placement.MAIN):
    return AlignedIndicatorSeries(
        name=name,
        placement=placement,
        color="#fff",
        stroke_width=1.0,
        points=tuple(AlignedPoint(day(i + 1), v) for i, v in enumerate(values)),
    )


@pytest.fixture
def candles(daily_records):
    return normalize_candles(daily_records)


class TestPrimaryPanel:

    def test_candlestick_first_then_overlays(self, candles):
        panel = build_primary_panel(candles, [_series("SMA", [1.0, 2.0]), _series("EMPTY", [])])
        assert panel.kind is PanelKind.PRIMARY
        assert [s.name for s in panel.series] == ["Price", "SMA"]
        assert panel.series[0].role is SeriesRole.CANDLESTICK
        assert panel.series[0].data == tuple(candles)

    def test_axis_over_ohlc(self, candles):
        # lows 8..18, highs 12..22
        panel = build_primary_panel(candles)
        assert panel.value_axis.min == pytest.approx(8.0 - 1.4)
        assert panel.value_axis.max == pytest.approx(22.0 + 1.4)

    def test_markers_sorted_by_timestamp(self, candles, trade_records):
        signals = derive(trade_records, "short").signals
        panel = build_primary_panel(candles, signals=tuple(reversed(signals)))
        stamps = [m.timestamp_ms for m in panel.markers]
        assert stamps == sorted(stamps)
        assert len(panel.markers) == len(signals)

    def test_no_candles(self):
        assert build_primary_panel([]) is None

    def test_custom_name(self, candles):
        panel = build_primary_panel(candles, config=ChartConfig(candlestick_name="BTC"))
        assert panel.title == "BTC"


class TestValidatePrimaryPanel:

    def _panel(self, *series):
        return Panel(kind=PanelKind.PRIMARY, series=series, value_axis=ValueAxis(0, 1))

    def test_indicator_first_rejected(self, candles):
        ind = PanelSeries("SMA", SeriesRole.INDICATOR, (AlignedPoint(day(1), 1.0),))
        price = PanelSeries("Price", SeriesRole.CANDLESTICK, tuple(candles))
        with pytest.raises(InvariantViolation):
            validate_primary_panel(self._panel(ind, price))

    def test_empty_rejected(self):
        with pytest.raises(InvariantViolation):
            validate_primary_panel(self._panel())

    def test_empty_candles_rejected(self):
        with pytest.raises(InvariantViolation):
            validate_primary_panel(self._panel(PanelSeries("Price", SeriesRole.CANDLESTICK, ())))

    def test_name_mismatch_rejected(self, candles):
        panel = self._panel(PanelSeries("Close", SeriesRole.CANDLESTICK, tuple(candles)))
        with pytest.raises(InvariantViolation):
            validate_primary_panel(panel, candlestick_name="Price")

    def test_secondary_rejected(self, candles):
        panel = Panel(
            kind=PanelKind.SECONDARY,
            series=(PanelSeries("Price", SeriesRole.CANDLESTICK, tuple(candles)),),
            value_axis=ValueAxis(0, 1),
        )
        with pytest.raises(InvariantViolation):
            validate_primary_panel(panel)

    def test_valid_panel_returned(self, candles):
        panel = build_primary_panel(candles)
        assert validate_primary_panel(panel, candlestick_name="Price") is panel


class TestSecondaryPanels:

    def test_one_panel_per_series_own_scale(self):
        rsi = _series("RSI", [30.0, 70.0], Placement.SUB)
        macd = _series("MACD", [-1.0, 1.0], Placement.SUB)
        panels = build_secondary_panels([rsi, macd, _series("NONE", [], Placement.SUB)])

        assert [p.title for p in panels] == ["RSI", "MACD"]
        assert all(p.kind is PanelKind.SECONDARY for p in panels)
        assert panels[0].value_axis.min == pytest.approx(26.0)
        assert panels[0].value_axis.max == pytest.approx(74.0)
        assert panels[1].value_axis.min == 0.0
        assert panels[1].value_axis.max == pytest.approx(1.2)
        assert panels[0].markers == ()

    def test_unfloored_axis_opt_in(self):
        macd = _series("MACD", [-1.0, 1.0], Placement.SUB)
        (panel,) = build_secondary_panels([macd], config=ChartConfig(axis_floor=None))
        assert panel.value_axis.min == pytest.approx(-1.2)


class TestComposePanels:

    def test_layout(self, candles):
        parts = PartitionedSeries(
            main=(_series("SMA", [1.0]),),
            sub=(_series("RSI", [50.0], Placement.SUB),),
        )
        panels = compose_panels(candles, parts)
        assert [p.kind for p in panels] == [PanelKind.PRIMARY, PanelKind.SECONDARY]

    def test_no_candles_no_panels(self):
        parts = PartitionedSeries(main=(), sub=(_series("RSI", [50.0], Placement.SUB),))
        assert compose_panels([], parts) == ()


class TestStringEnumFields:

    def test_string_kinds_pass_validation(self, candles):
        panel = Panel(
            kind="primary",
            series=(PanelSeries("Price", "CANDLESTICK", tuple(candles)),),
            value_axis=ValueAxis(0, 1),
        )
        assert panel.kind is PanelKind.PRIMARY
        assert panel.series[0].role is SeriesRole.CANDLESTICK
        assert validate_primary_panel(panel) is panel

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            Panel(kind="overlay", series=(), value_axis=ValueAxis(0, 1))

    def test_non_candle_data_rejected(self):
        price = PanelSeries("Price", SeriesRole.CANDLESTICK, (AlignedPoint(day(1), 1.0),))
        panel = Panel(kind=PanelKind.PRIMARY, series=(price,), value_axis=ValueAxis(0, 1))
        with pytest.raises(InvariantViolation):
            validate_primary_panel(panel)
