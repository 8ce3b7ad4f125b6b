"""
CHARTSYNC package - Backtest chart reconciliation core.

Turns raw backtest outputs into a render-ready chart model:
- core.candles: OHLCV cleanup (parse, dedupe, sort, bound)
- core.alignment / core.matching: indicator points snapped onto candle timestamps
- core.partition: overlay vs. sub-panel indicators
- core.signals: position-mode trade filtering and entry/exit markers
- core.scaling: padded value axes
- core.composer: panel layout (candlestick series always first)
- core.pipeline: build_chart_model, wiring everything together
- indicators_metadata: default styles for known indicator tools

Rendering lives outside the package (visual/payload.py, visual/rich.py).
"""

__version__ = "1.0.0"
__author__ = "CHARTSYNC Quant Team"

from chartsync.core.errors import ChartError, InvariantViolation, MalformedRecord
from chartsync.core.pipeline import build_chart_model
from chartsync.core.types import ChartConfig, ChartModel, IndicatorDefinition, Placement, PositionMode
from chartsync.indicators_metadata import IndicatorRegistry, IndicatorStyle

__all__ = [
    "build_chart_model",
    "ChartConfig",
    "ChartModel",
    "IndicatorDefinition",
    "Placement",
    "PositionMode",
    "ChartError",
    "MalformedRecord",
    "InvariantViolation",
    "IndicatorRegistry",
    "IndicatorStyle",
]
