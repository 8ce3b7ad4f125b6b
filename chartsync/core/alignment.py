"""
IndicatorAligner: maps pre-computed indicator series onto the candle timeline.

The candle timestamps are the single authoritative timestamp array: every
aligned point carries one of them. Points that cannot be mapped are dropped,
never shifted outside the candle set.

Collision policy (several raw points landing on the same candle timestamp):
- an exact match beats a fallback match
- between fallback matches the smaller distance wins
- equal priority: the later point (ascending raw timestamp, then input order)
  overwrites the earlier one
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from chartsync.core.candles import candle_timestamps
from chartsync.core.errors import (
    Diagnostic,
    DiagnosticHook,
    DiagnosticKind,
    MalformedRecord,
    emit,
)
from chartsync.core.matching import DEFAULT_MATCHER, MatcherFactory, TimestampMatcher
from chartsync.core.timestamps import to_epoch_ms, to_finite_float
from chartsync.core.types import (
    AlignedIndicatorSeries,
    AlignedPoint,
    Candle,
    ChartConfig,
    IndicatorDefinition,
    RawPoint,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlignmentReport:
    name: str
    total: int
    parsed: int
    exact: int
    fallback: int
    unmatched: int
    collisions: int
    aligned: int

    @property
    def excluded(self) -> bool:
        return self.aligned == 0


@dataclass(frozen=True)
class AlignmentResult:
    series: Tuple[AlignedIndicatorSeries, ...]
    reports: Tuple[AlignmentReport, ...]


def _unpack_point(point: Any) -> Tuple[Any, Any]:
    if isinstance(point, RawPoint):
        return point.timestamp, point.value
    if isinstance(point, Mapping):
        return point.get("timestamp"), point.get("value")
    if isinstance(point, (tuple, list)) and len(point) == 2:
        return point[0], point[1]
    raise MalformedRecord(f"unsupported indicator point: {point!r}")


def parse_point(point: Any) -> Tuple[int, float]:
    """(epoch_ms, value) o MalformedRecord."""
    raw_ts, raw_value = _unpack_point(point)
    ts = to_epoch_ms(raw_ts)
    if ts is None:
        raise MalformedRecord(f"invalid indicator timestamp: {raw_ts!r}")
    value = to_finite_float(raw_value)
    if value is None:
        raise MalformedRecord(f"invalid indicator value: {raw_value!r}")
    return ts, value


def parse_points(raw_points: Iterable[Any], max_points: int) -> List[Tuple[int, float]]:
    """Parsea, descarta inválidos, ordena (estable) y conserva la cola de max_points."""
    parsed: List[Tuple[int, float]] = []
    for point in raw_points:
        try:
            parsed.append(parse_point(point))
        except MalformedRecord as exc:
            logger.debug("Dropping indicator point: %s", exc)
    parsed.sort(key=lambda p: p[0])
    if max_points > 0 and len(parsed) > max_points:
        parsed = parsed[-max_points:]
    return parsed


def align_indicator(
    definition: IndicatorDefinition,
    matcher: TimestampMatcher,
    *,
    max_points: int = 1000,
) -> Tuple[Optional[AlignedIndicatorSeries], AlignmentReport]:
    raw = tuple(definition.raw_points)
    parsed = parse_points(raw, max_points)

    # slot: candle_ts -> ((is_fallback, distance), value)
    slots: Dict[int, Tuple[Tuple[int, int], float]] = {}
    exact = fallback = unmatched = collisions = 0

    for ts, value in parsed:
        match = matcher.match(ts)
        if match is None:
            unmatched += 1
            continue
        if match.exact:
            exact += 1
        else:
            fallback += 1

        priority = (0 if match.exact else 1, match.distance_ms)
        current = slots.get(match.timestamp_ms)
        if current is not None:
            collisions += 1
            if priority > current[0]:
                continue
        slots[match.timestamp_ms] = (priority, value)

    points = tuple(
        AlignedPoint(timestamp_ms=ts, value=slots[ts][1]) for ts in sorted(slots)
    )
    report = AlignmentReport(
        name=definition.name,
        total=len(raw),
        parsed=len(parsed),
        exact=exact,
        fallback=fallback,
        unmatched=unmatched,
        collisions=collisions,
        aligned=len(points),
    )
    if not points:
        return None, report

    series = AlignedIndicatorSeries(
        name=definition.name,
        placement=definition.placement,
        color=definition.color,
        stroke_width=definition.stroke_width,
        points=points,
    )
    return series, report


def align_indicators(
    candles: Sequence[Candle],
    definitions: Iterable[IndicatorDefinition],
    *,
    config: ChartConfig = ChartConfig(),
    matcher_factory: Optional[MatcherFactory] = None,
    on_diagnostic: Optional[DiagnosticHook] = None,
) -> AlignmentResult:
    definitions = list(definitions)
    if not candles:
        # Sin velas no hay línea temporal: todo indicador queda fuera
        return AlignmentResult(series=(), reports=())

    factory = matcher_factory or DEFAULT_MATCHER
    matcher = factory(candle_timestamps(candles), config.fallback_tolerance_ms)

    aligned: List[AlignedIndicatorSeries] = []
    reports: List[AlignmentReport] = []

    for definition in definitions:
        series, report = align_indicator(definition, matcher, max_points=config.max_points)
        reports.append(report)

        if report.fallback:
            logger.debug(
                "Indicator %s: %d point(s) re-timestamped by fallback match",
                definition.name,
                report.fallback,
            )

        if series is None:
            emit(
                Diagnostic(
                    kind=DiagnosticKind.UNALIGNABLE_INDICATOR,
                    subject=definition.name,
                    message=(
                        f"0 of {report.total} point(s) aligned "
                        f"({report.total - report.parsed} unparsed or truncated, {report.unmatched} outside tolerance)"
                    ),
                    count=report.total,
                ),
                on_diagnostic,
                logger,
            )
            continue
        aligned.append(series)

    return AlignmentResult(series=tuple(aligned), reports=tuple(reports))
