"""
================================================================================
CHARTSYNC - Indicator Style Registry
================================================================================

Default display properties for known indicator tools:
- placement ('main' overlay on price, or 'sub' own panel)
- colour and line width

Used by the indicator extractor only when neither the tool assignment nor the
backend indicator metadata provide a value. Unknown tools fall back to the
chart config defaults.
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from chartsync.core.types import Placement


@dataclass(frozen=True)
class IndicatorStyle:
    name: str  # e.g. "sma", "rsi"
    display_name: str
    placement: Placement
    color: str
    line_width: float = 2.0


class IndicatorRegistry:
    """
    Centralized registry of indicator styles.

    Lookups are case-insensitive and tolerate parameterised tool names:
    "SMA", "sma_20" and "SMA20" all resolve to the "sma" entry.
    """

    _registry: Dict[str, IndicatorStyle] = {}

    @classmethod
    def register(cls, style: IndicatorStyle) -> None:
        cls._registry[style.name.lower()] = style

    @classmethod
    def register_batch(cls, batch: List[IndicatorStyle]) -> None:
        for style in batch:
            cls.register(style)

    @classmethod
    def get(cls, name: str) -> Optional[IndicatorStyle]:
        return cls._registry.get(str(name).lower())

    @classmethod
    def get_all(cls) -> Dict[str, IndicatorStyle]:
        return cls._registry.copy()

    @classmethod
    def lookup(cls, tool_name: str) -> Optional[IndicatorStyle]:
        """Exact name first, then the longest registered name prefixing the tool name."""
        key = str(tool_name).strip().lower()
        if not key:
            return None
        style = cls._registry.get(key)
        if style is not None:
            return style
        candidates = [n for n in cls._registry if key.startswith(n)]
        if not candidates:
            return None
        return cls._registry[max(candidates, key=len)]


# =============================================================================
# MOVING AVERAGES & BANDS (OVERLAYS)
# =============================================================================

_OVERLAY_STYLES = [
    IndicatorStyle("sma", "SMA", Placement.MAIN, "#94a3b8"),
    IndicatorStyle("ema", "EMA", Placement.MAIN, "#fbbf24"),
    IndicatorStyle("wma", "WMA", Placement.MAIN, "#60a5fa"),
    IndicatorStyle("hma", "HMA", Placement.MAIN, "#ec4899"),
    IndicatorStyle("vwma", "VWMA", Placement.MAIN, "#22d3ee"),
    IndicatorStyle("vwap", "VWAP", Placement.MAIN, "#38bdf8"),
    IndicatorStyle("kama", "KAMA", Placement.MAIN, "#22d3ee"),
    IndicatorStyle("supertrend", "SuperTrend", Placement.MAIN, "#10b981"),
    IndicatorStyle("bollinger", "Bollinger Bands", Placement.MAIN, "#94a3b8", 1.0),
    IndicatorStyle("donchian", "Donchian", Placement.MAIN, "#22c55e", 1.0),
]

# =============================================================================
# OSCILLATORS (SUB-PANELS)
# =============================================================================

_OSCILLATOR_STYLES = [
    IndicatorStyle("rsi", "RSI", Placement.SUB, "#60a5fa"),
    IndicatorStyle("macd", "MACD", Placement.SUB, "#60a5fa"),
    IndicatorStyle("stoch", "Stochastic", Placement.SUB, "#f472b6"),
    IndicatorStyle("mfi", "MFI", Placement.SUB, "#34d399"),
    IndicatorStyle("adx", "ADX", Placement.SUB, "#a78bfa"),
    IndicatorStyle("cci", "CCI", Placement.SUB, "#ec4899"),
    IndicatorStyle("roc", "ROC", Placement.SUB, "#fb923c"),
    IndicatorStyle("atr", "ATR", Placement.SUB, "#fb923c"),
    IndicatorStyle("zscore", "Z-Score", Placement.SUB, "#fbbf24"),
    IndicatorStyle("returns", "Returns", Placement.SUB, "#06b6d4"),
    IndicatorStyle("rollingstd", "Rolling STD", Placement.SUB, "#a855f7"),
]

IndicatorRegistry.register_batch(_OVERLAY_STYLES)
IndicatorRegistry.register_batch(_OSCILLATOR_STYLES)
