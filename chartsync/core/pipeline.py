"""
Pipeline: OHLCV records + indicator definitions + trades -> ChartModel.

    records ──► normalize_candles ──► align_indicators ──► partition_series ─┐
    trades  ──► derive ───────────────────────────────────────────────────────┼─► compose_panels
                                                                             ┘
Pure: no clock, no I/O, no shared state. Equal inputs give equal models.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Union

from chartsync.core.alignment import align_indicators
from chartsync.core.candles import normalize_candles
from chartsync.core.composer import compose_panels
from chartsync.core.errors import DiagnosticCollector, DiagnosticHook
from chartsync.core.matching import MatcherFactory
from chartsync.core.partition import partition_series
from chartsync.core.signals import derive
from chartsync.core.timeframes import intersect, timeframe_window, trade_window
from chartsync.core.types import ChartConfig, ChartModel, IndicatorDefinition, PositionMode

logger = logging.getLogger(__name__)


def build_chart_model(
    records: Iterable[Mapping[str, Any]],
    indicators: Iterable[IndicatorDefinition] = (),
    trades: Iterable[Any] = (),
    position_mode: Union[str, PositionMode] = PositionMode.ALL,
    *,
    timeframe: Any = None,
    now_ms: Optional[int] = None,
    config: ChartConfig = ChartConfig(),
    matcher_factory: Optional[MatcherFactory] = None,
    on_diagnostic: Optional[DiagnosticHook] = None,
) -> ChartModel:
    """
    Construye el modelo de gráfico completo.

    Args:
        records: velas OHLCV (mappings); duplicados y registros inválidos se limpian
        indicators: definiciones con sus puntos crudos
        trades: registros de trades (dicts o TradeRecord ya parseados)
        position_mode: 'all' | 'long' | 'short'
        timeframe: '1D' | '1W' | '6M' | '1Y' | 'ALL' (requiere now_ms salvo 'ALL')
        now_ms: instante de referencia para el timeframe (epoch ms)
        config: ChartConfig
        matcher_factory: estrategia de matching de timestamps (BisectMatcher por defecto)
        on_diagnostic: hook opcional; los diagnósticos quedan además en el modelo

    Raises:
        InvariantViolation: panel principal inconsistente.
        ValueError: position_mode / timeframe desconocidos, o timeframe sin now_ms.
    """
    collector = DiagnosticCollector(forward=on_diagnostic)
    mode = PositionMode.parse(position_mode)

    signal_set = derive(
        trades,
        mode,
        legacy_inference=config.legacy_inference,
        on_diagnostic=collector,
    )

    window = None
    if timeframe is not None:
        if now_ms is None and timeframe_window(timeframe, 0) is not None:
            raise ValueError(f"timeframe {timeframe!r} requiere now_ms")
        window = timeframe_window(timeframe, now_ms or 0)
    if config.focus_on_trades:
        window = intersect(window, trade_window(signal_set.trades, config.trade_window_buffer_days))

    candles = normalize_candles(
        records,
        max_points=config.max_points,
        window=window,
        on_diagnostic=collector,
    )

    alignment = align_indicators(
        candles,
        indicators,
        config=config,
        matcher_factory=matcher_factory,
        on_diagnostic=collector,
    )
    partitioned = partition_series(alignment.series)
    panels = compose_panels(candles, partitioned, signal_set.signals, config=config)

    logger.info(
        "Chart model: %d candle(s), %d panel(s), %d signal(s), %d diagnostic(s)",
        len(candles),
        len(panels),
        len(signal_set.signals),
        len(collector.items),
    )

    return ChartModel(
        panels=panels,
        trades=signal_set.trades,
        signals=signal_set.signals,
        alignment=alignment.reports,
        diagnostics=tuple(collector.items),
    )
