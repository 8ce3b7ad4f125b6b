from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Union

from chartsync.core.timestamps import MS_PER_DAY


@dataclass(frozen=True)
class TimeWindow:
    """Ventana temporal cerrada [start_ms, end_ms]. None = sin límite por ese lado."""
    start_ms: Optional[int] = None
    end_ms: Optional[int] = None

    def contains(self, timestamp_ms: int) -> bool:
        if self.start_ms is not None and timestamp_ms < self.start_ms:
            return False
        if self.end_ms is not None and timestamp_ms > self.end_ms:
            return False
        return True


class Timeframe(str, Enum):
    """Selector de rango del gráfico (1D / 1W / 6M / 1Y / All)."""
    D1 = "1D"
    W1 = "1W"
    M6 = "6M"
    Y1 = "1Y"
    ALL = "ALL"

    @property
    def days(self) -> Optional[int]:
        return _TIMEFRAME_DAYS[self]

    @classmethod
    def parse(cls, value: Union[str, "Timeframe", None]) -> "Timeframe":
        """Normaliza '1d', '1W', 'all', None -> Timeframe. Lanza ValueError si no existe."""
        if value is None:
            return cls.ALL
        if isinstance(value, cls):
            return value
        s = str(value).strip().upper()
        for tf in cls:
            if tf.value == s:
                return tf
        raise ValueError(f"Timeframe desconocido: {value!r}")


_TIMEFRAME_DAYS = {
    Timeframe.D1: 1,
    Timeframe.W1: 7,
    Timeframe.M6: 180,
    Timeframe.Y1: 365,
    Timeframe.ALL: None,
}


def timeframe_window(timeframe: Any, now_ms: int) -> Optional[TimeWindow]:
    """Ventana [now - días, now] para el timeframe; None para 'ALL'.

    `now_ms` es un input explícito: el núcleo no consulta el reloj.
    """
    tf = Timeframe.parse(timeframe)
    if tf.days is None:
        return None
    return TimeWindow(start_ms=now_ms - tf.days * MS_PER_DAY, end_ms=now_ms)


def trade_window(trades: Iterable[Any], buffer_days: int = 30) -> Optional[TimeWindow]:
    """Rango de fechas de los trades (entradas y salidas) +/- buffer_days.

    Devuelve None si no hay timestamps (el gráfico muestra todo el histórico).
    """
    stamps = []
    for trade in trades:
        stamps.append(trade.entry_timestamp_ms)
        if trade.exit_timestamp_ms is not None:
            stamps.append(trade.exit_timestamp_ms)
    if not stamps:
        return None
    buffer_ms = int(buffer_days) * MS_PER_DAY
    return TimeWindow(start_ms=min(stamps) - buffer_ms, end_ms=max(stamps) + buffer_ms)


def intersect(a: Optional[TimeWindow], b: Optional[TimeWindow]) -> Optional[TimeWindow]:
    if a is None:
        return b
    if b is None:
        return a
    starts = [s for s in (a.start_ms, b.start_ms) if s is not None]
    ends = [e for e in (a.end_ms, b.end_ms) if e is not None]
    return TimeWindow(
        start_ms=max(starts) if starts else None,
        end_ms=min(ends) if ends else None,
    )
