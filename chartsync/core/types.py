from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class Placement(str, Enum):
    MAIN = "main"
    SUB = "sub"


class PositionMode(str, Enum):
    ALL = "all"
    LONG = "long"
    SHORT = "short"

    @classmethod
    def parse(cls, value: Union[str, "PositionMode"]) -> "PositionMode":
        """Acepta 'all' / 'LONG' / PositionMode.SHORT. Lanza ValueError si no existe."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Position mode desconocido: {value!r}") from None


class TradeType(str, Enum):
    BUY = "buy"
    SELL = "sell"


class PositionType(str, Enum):
    LONG = "long"
    SHORT = "short"


class SignalKind(str, Enum):
    ENTRY = "entry"
    EXIT = "exit"


class SeriesRole(str, Enum):
    CANDLESTICK = "candlestick"
    INDICATOR = "indicator"


class PanelKind(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


def _coerce(enum_cls, value):
    """Enum member o su valor en texto ('sub', 'BUY') -> enum_cls. Lanza ValueError."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, Enum):
        value = value.value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"{enum_cls.__name__} desconocido: {value!r}") from None


def _coerce_field(obj, name: str, enum_cls) -> None:
    object.__setattr__(obj, name, _coerce(enum_cls, getattr(obj, name)))


# =============================================================================
# PRICE & INDICATOR SERIES
# =============================================================================

@dataclass(frozen=True)
class Candle:
    timestamp_ms: int
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None

    @property
    def prices(self) -> Tuple[float, float, float, float]:
        return (self.open, self.high, self.low, self.close)


@dataclass(frozen=True)
class RawPoint:
    """Punto de indicador sin parsear (timestamp y valor tal como llegan)."""
    timestamp: Any
    value: Any


@dataclass(frozen=True)
class IndicatorDefinition:
    name: str
    placement: Placement
    color: str
    stroke_width: float
    raw_points: Tuple[Any, ...] = ()

    def __post_init__(self):
        _coerce_field(self, "placement", Placement)


@dataclass(frozen=True)
class AlignedPoint:
    timestamp_ms: int
    value: float


@dataclass(frozen=True)
class AlignedIndicatorSeries:
    name: str
    placement: Placement
    color: str
    stroke_width: float
    points: Tuple[AlignedPoint, ...]

    def __post_init__(self):
        _coerce_field(self, "placement", Placement)

    @property
    def values(self) -> Tuple[float, ...]:
        return tuple(p.value for p in self.points)


# =============================================================================
# TRADES & SIGNALS
# =============================================================================
# Trade records come in two shapes: tagged with the position mode of the
# backtest run that produced them, or legacy records without the tag.

@dataclass(frozen=True)
class TradeRecord:
    id: Any
    entry_timestamp_ms: int
    entry_price: float
    trade_type: TradeType
    exit_timestamp_ms: Optional[int] = None
    exit_price: Optional[float] = None
    pnl: Optional[float] = None
    pnl_percentage: Optional[float] = None

    def __post_init__(self):
        _coerce_field(self, "trade_type", TradeType)

    @property
    def has_exit(self) -> bool:
        return self.exit_timestamp_ms is not None and self.exit_price is not None

    @property
    def position_type(self) -> PositionType:
        return PositionType.LONG if self.trade_type is TradeType.BUY else PositionType.SHORT


@dataclass(frozen=True)
class TaggedTrade(TradeRecord):
    position_mode: PositionMode = PositionMode.ALL

    def __post_init__(self):
        super().__post_init__()
        _coerce_field(self, "position_mode", PositionMode)


@dataclass(frozen=True)
class LegacyTrade(TradeRecord):
    pass


Trade = Union[TaggedTrade, LegacyTrade]


@dataclass(frozen=True)
class Signal:
    timestamp_ms: int
    price: float
    kind: SignalKind
    position_type: PositionType
    trade_id: Any = None

    def __post_init__(self):
        _coerce_field(self, "kind", SignalKind)
        _coerce_field(self, "position_type", PositionType)


# =============================================================================
# PANELS
# =============================================================================

@dataclass(frozen=True)
class ValueAxis:
    min: float
    max: float


@dataclass(frozen=True)
class PanelSeries:
    name: str
    role: SeriesRole
    data: Tuple[Any, ...]
    color: Optional[str] = None
    stroke_width: Optional[float] = None

    def __post_init__(self):
        _coerce_field(self, "role", SeriesRole)


@dataclass(frozen=True)
class Panel:
    kind: PanelKind
    series: Tuple[PanelSeries, ...]
    value_axis: ValueAxis
    markers: Tuple[Signal, ...] = ()

    def __post_init__(self):
        _coerce_field(self, "kind", PanelKind)

    @property
    def title(self) -> str:
        return ", ".join(s.name for s in self.series)


@dataclass(frozen=True)
class ChartConfig:
    max_points: int = 1000
    fallback_tolerance_ms: int = 86_400_000  # un día natural
    axis_padding: float = 0.1
    axis_floor: Optional[float] = 0.0
    empty_axis: Tuple[float, float] = (0.0, 100.0)
    legacy_inference: bool = True
    focus_on_trades: bool = False
    trade_window_buffer_days: int = 30
    default_color: str = "#3B82F6"
    default_stroke_width: float = 2.0
    candlestick_name: str = "Price"

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "ChartConfig":
        """Construye la config desde el dict CONFIG de general/configuracion.py."""
        base = cls()
        return cls(
            max_points=int(cfg.get("MAX_POINTS", base.max_points)),
            fallback_tolerance_ms=int(cfg.get("FALLBACK_TOLERANCE_MS", base.fallback_tolerance_ms)),
            axis_padding=float(cfg.get("AXIS_PADDING", base.axis_padding)),
            axis_floor=cfg.get("AXIS_FLOOR", base.axis_floor),
            empty_axis=tuple(cfg.get("EMPTY_AXIS", base.empty_axis)),
            legacy_inference=bool(cfg.get("LEGACY_INFERENCE", base.legacy_inference)),
            focus_on_trades=bool(cfg.get("FOCUS_ON_TRADES", base.focus_on_trades)),
            trade_window_buffer_days=int(cfg.get("TRADE_WINDOW_BUFFER_DAYS", base.trade_window_buffer_days)),
            default_color=str(cfg.get("DEFAULT_COLOR", base.default_color)),
            default_stroke_width=float(cfg.get("DEFAULT_STROKE_WIDTH", base.default_stroke_width)),
            candlestick_name=str(cfg.get("CANDLESTICK_NAME", base.candlestick_name)),
        )


@dataclass(frozen=True)
class ChartModel:
    panels: Tuple[Panel, ...]
    trades: Tuple[TradeRecord, ...] = ()
    signals: Tuple[Signal, ...] = ()
    alignment: Tuple[Any, ...] = ()
    diagnostics: Tuple[Any, ...] = ()

    @property
    def primary(self) -> Optional[Panel]:
        for panel in self.panels:
            if panel.kind is PanelKind.PRIMARY:
                return panel
        return None

    @property
    def secondaries(self) -> Tuple[Panel, ...]:
        return tuple(p for p in self.panels if p.kind is PanelKind.SECONDARY)

    @property
    def is_empty(self) -> bool:
        return self.primary is None
