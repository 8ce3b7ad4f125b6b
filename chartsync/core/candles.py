"""
CandleNormalizer: raw OHLCV records -> validated, sorted, bounded candles.

Pipeline per call:
1. parse every record (a record with any unparseable field is dropped whole)
2. collapse duplicate timestamps, LAST occurrence in input order wins
3. sort ascending by timestamp
4. optional time window
5. keep the most recent `max_points` candles (tail)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from chartsync.core.errors import (
    Diagnostic,
    DiagnosticHook,
    DiagnosticKind,
    MalformedRecord,
    emit,
)
from chartsync.core.timeframes import TimeWindow
from chartsync.core.timestamps import to_epoch_ms, to_finite_float
from chartsync.core.types import Candle

logger = logging.getLogger(__name__)

MAX_POINTS = 1000

# Mismo orden de búsqueda que el loader de datos
TIMESTAMP_FIELDS = ("timestamp", "datetime", "date", "time")
PRICE_FIELDS = ("open", "high", "low", "close")


def record_timestamp(record: Mapping[str, Any]) -> Any:
    """Devuelve el valor crudo del campo temporal del registro (o None)."""
    for key in TIMESTAMP_FIELDS:
        if key in record and record[key] is not None:
            return record[key]
    return None


def parse_candle(record: Mapping[str, Any]) -> Candle:
    """Parse one OHLCV record. Raises MalformedRecord if any of the five core fields fails."""
    if not isinstance(record, Mapping):
        raise MalformedRecord(f"record is not a mapping: {type(record).__name__}")

    ts = to_epoch_ms(record_timestamp(record))
    if ts is None:
        raise MalformedRecord(f"invalid timestamp: {record_timestamp(record)!r}")

    prices: Dict[str, float] = {}
    for key in PRICE_FIELDS:
        value = to_finite_float(record.get(key))
        if value is None:
            raise MalformedRecord(f"invalid {key}: {record.get(key)!r}")
        prices[key] = value

    return Candle(
        timestamp_ms=ts,
        volume=to_finite_float(record.get("volume")),
        **prices,
    )


def normalize_candles(
    records: Iterable[Mapping[str, Any]],
    *,
    max_points: int = MAX_POINTS,
    window: Optional[TimeWindow] = None,
    on_diagnostic: Optional[DiagnosticHook] = None,
    subject: str = "candles",
) -> List[Candle]:
    by_timestamp: Dict[int, Candle] = {}
    dropped = 0

    for record in records:
        try:
            candle = parse_candle(record)
        except MalformedRecord as exc:
            dropped += 1
            logger.debug("Dropping OHLCV record: %s", exc)
            continue
        # Duplicados: gana el último en orden de entrada
        by_timestamp[candle.timestamp_ms] = candle

    if dropped:
        emit(
            Diagnostic(
                kind=DiagnosticKind.MALFORMED_RECORD,
                subject=subject,
                message=f"{dropped} OHLCV record(s) dropped",
                count=dropped,
            ),
            on_diagnostic,
            logger,
            level=logging.DEBUG,
        )

    candles = sorted(by_timestamp.values(), key=lambda c: c.timestamp_ms)

    if window is not None:
        candles = [c for c in candles if window.contains(c.timestamp_ms)]

    if max_points > 0 and len(candles) > max_points:
        candles = candles[-max_points:]

    if not candles:
        emit(
            Diagnostic(
                kind=DiagnosticKind.EMPTY_SERIES,
                subject=subject,
                message="no valid candles after normalization",
            ),
            on_diagnostic,
            logger,
        )

    return candles


def candle_timestamps(candles: Iterable[Candle]) -> List[int]:
    return [c.timestamp_ms for c in candles]
