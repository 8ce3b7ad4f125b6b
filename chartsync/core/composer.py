"""
ChartComposer: candles + partitioned indicators + signals -> panel descriptors.

Layout:
- PRIMARY panel: candlestick series first, then `main` overlays, plus all
  trade markers. Axis scaled over every OHLC value.
- one SECONDARY panel per `sub` indicator, scaled over its own values only.

A panel whose first series has no data is not emitted. A primary panel that
does not start with the candlestick series is rejected (InvariantViolation):
a renderer would otherwise draw indicator values as prices.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from chartsync.core.errors import InvariantViolation
from chartsync.core.partition import PartitionedSeries
from chartsync.core.scaling import candle_values, compute_value_axis
from chartsync.core.types import (
    AlignedIndicatorSeries,
    Candle,
    ChartConfig,
    Panel,
    PanelKind,
    PanelSeries,
    SeriesRole,
    Signal,
)

logger = logging.getLogger(__name__)


def _indicator_series(series: AlignedIndicatorSeries) -> PanelSeries:
    return PanelSeries(
        name=series.name,
        role=SeriesRole.INDICATOR,
        data=series.points,
        color=series.color,
        stroke_width=series.stroke_width,
    )


def validate_primary_panel(panel: Panel, *, candlestick_name: Optional[str] = None) -> Panel:
    """Lanza InvariantViolation si el panel principal no empieza por las velas."""
    if panel.kind is not PanelKind.PRIMARY:
        raise InvariantViolation(f"expected a primary panel, got {panel.kind.value}")
    if not panel.series:
        raise InvariantViolation("primary panel has no series")
    first = panel.series[0]
    if first.role is not SeriesRole.CANDLESTICK:
        raise InvariantViolation(
            f"primary panel must start with the candlestick series, got {first.role.value} {first.name!r}"
        )
    if candlestick_name is not None and first.name != candlestick_name:
        raise InvariantViolation(
            f"primary panel first series must be {candlestick_name!r}, got {first.name!r}"
        )
    if not first.data:
        raise InvariantViolation("primary panel candlestick series is empty")
    if not all(isinstance(c, Candle) for c in first.data):
        raise InvariantViolation(f"candlestick series {first.name!r} holds non-candle data")
    for s in panel.series[1:]:
        if s.role is SeriesRole.CANDLESTICK:
            raise InvariantViolation(f"unexpected second candlestick series {s.name!r}")
    return panel


def build_primary_panel(
    candles: Sequence[Candle],
    main_series: Sequence[AlignedIndicatorSeries] = (),
    signals: Sequence[Signal] = (),
    *,
    config: ChartConfig = ChartConfig(),
) -> Optional[Panel]:
    if not candles:
        return None

    series: List[PanelSeries] = [
        PanelSeries(
            name=config.candlestick_name,
            role=SeriesRole.CANDLESTICK,
            data=tuple(candles),
            color=config.default_color,
            stroke_width=config.default_stroke_width,
        )
    ]
    series.extend(_indicator_series(s) for s in main_series if s.points)

    axis = compute_value_axis(
        candle_values(candles),
        padding=config.axis_padding,
        floor=config.axis_floor,
        empty=config.empty_axis,
    )
    markers = tuple(sorted(signals, key=lambda s: s.timestamp_ms))

    panel = Panel(
        kind=PanelKind.PRIMARY,
        series=tuple(series),
        value_axis=axis,
        markers=markers,
    )
    return validate_primary_panel(panel, candlestick_name=config.candlestick_name)


def build_secondary_panels(
    sub_series: Sequence[AlignedIndicatorSeries],
    *,
    config: ChartConfig = ChartConfig(),
) -> List[Panel]:
    panels: List[Panel] = []
    for s in sub_series:
        if not s.points:
            continue
        axis = compute_value_axis(
            s.values,
            padding=config.axis_padding,
            floor=config.axis_floor,
            empty=config.empty_axis,
        )
        panels.append(
            Panel(kind=PanelKind.SECONDARY, series=(_indicator_series(s),), value_axis=axis)
        )
    return panels


def compose_panels(
    candles: Sequence[Candle],
    partitioned: PartitionedSeries,
    signals: Sequence[Signal] = (),
    *,
    config: ChartConfig = ChartConfig(),
) -> Tuple[Panel, ...]:
    primary = build_primary_panel(candles, partitioned.main, signals, config=config)
    if primary is None:
        # EmptySeries: sin panel principal (el host muestra "no data")
        logger.info("No candles: chart model has no primary panel")
        return ()
    secondaries = build_secondary_panels(partitioned.sub, config=config)
    return (primary, *secondaries)
