"""
IndicatorExtractor: indicator columns embedded in OHLCV records -> IndicatorDefinitions.

The backend ships computed indicator values as extra record fields keyed
"<ToolName>_<param1>_<param2>...". A strategy lists the tools it needs
(ToolAssignment), with default parameters and a mapping from strategy
parameters to tool parameters, so the column key has to be rebuilt from the
parameters actually used by the backtest.

Key candidates, in order:
1. Tool_p1_p2      (parameter insertion order)
2. Toolp1p2        (same, without underscores)
3. Tool_pa_pb      (parameters sorted by name)
4. Toolpapb
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from chartsync.core.candles import record_timestamp
from chartsync.core.errors import Diagnostic, DiagnosticHook, DiagnosticKind, emit
from chartsync.core.timestamps import to_finite_float
from chartsync.core.types import ChartConfig, IndicatorDefinition, Placement, RawPoint
from chartsync.indicators_metadata import IndicatorRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolAssignment:
    tool_name: str
    display_name: Optional[str] = None
    color: Optional[str] = None
    line_width: Optional[float] = None
    subchart: Optional[bool] = None
    parameters: Mapping[str, Any] = field(default_factory=dict)
    parameter_mapping: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, m: Mapping[str, Any]) -> "ToolAssignment":
        """Acepta claves snake_case / camelCase y el bloque `style` del backend."""
        style = m.get("style") if isinstance(m.get("style"), Mapping) else {}
        tool_name = m.get("tool_name") or m.get("toolName") or m.get("name")
        if not tool_name:
            raise ValueError(f"Tool assignment sin tool_name: {dict(m)!r}")
        line_width = m.get("line_width", m.get("lineWidth", style.get("line_width", style.get("lineWidth"))))
        subchart = m.get("subchart")
        return cls(
            tool_name=str(tool_name),
            display_name=m.get("display_name") or m.get("displayName"),
            color=m.get("color") or style.get("color"),
            line_width=to_finite_float(line_width),
            subchart=None if subchart is None else bool(subchart),
            parameters=dict(m.get("parameters") or {}),
            parameter_mapping=dict(m.get("parameter_mapping") or m.get("parameterMapping") or {}),
        )


def resolve_parameters(
    assignment: ToolAssignment,
    strategy_params: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Parámetros del tool con los valores realmente usados por el backtest."""
    resolved = dict(assignment.parameters)
    if strategy_params:
        for tool_param, strategy_param in assignment.parameter_mapping.items():
            if strategy_param in strategy_params and strategy_params[strategy_param] is not None:
                resolved[tool_param] = strategy_params[strategy_param]
    return resolved


def format_param(value: Any) -> str:
    """Formatea un parámetro como lo hace el productor de las columnas (20, 2.5, true)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def candidate_keys(tool_name: str, params: Mapping[str, Any]) -> List[str]:
    if not params:
        keys = [tool_name]
    else:
        in_order = f"{tool_name}_" + "_".join(format_param(v) for v in params.values())
        by_name = f"{tool_name}_" + "_".join(format_param(params[k]) for k in sorted(params))
        keys = [in_order, in_order.replace("_", ""), by_name, by_name.replace("_", "")]

    seen = set()
    unique = []
    for k in keys:
        if k not in seen:
            seen.add(k)
            unique.append(k)
    return unique


def resolve_indicator_key(
    records: Sequence[Mapping[str, Any]],
    tool_name: str,
    params: Mapping[str, Any],
) -> Optional[str]:
    """Primera clave candidata presente en algún registro (no sólo el primero: warmup = nulls)."""
    available = set()
    for row in records:
        available.update(row.keys())
    for key in candidate_keys(tool_name, params):
        if key in available:
            return key
    return None


def _resolve_placement(
    assignment: ToolAssignment,
    meta: Mapping[str, Any],
) -> Placement:
    meta_subchart = meta.get("subchart")
    if assignment.subchart or meta_subchart:
        return Placement.SUB
    if assignment.subchart is None and meta_subchart is None:
        style = IndicatorRegistry.lookup(assignment.tool_name)
        if style is not None:
            return style.placement
    return Placement.MAIN


def build_definition(
    records: Sequence[Mapping[str, Any]],
    assignment: ToolAssignment,
    key: str,
    *,
    meta: Optional[Mapping[str, Any]] = None,
    config: ChartConfig = ChartConfig(),
) -> IndicatorDefinition:
    meta = meta or {}
    style = IndicatorRegistry.lookup(assignment.tool_name)

    color = assignment.color or meta.get("color") or (style.color if style else None) or config.default_color
    width = (
        assignment.line_width
        or to_finite_float(meta.get("line_width"))
        or (style.line_width if style else None)
        or config.default_stroke_width
    )
    name = meta.get("display_name") or assignment.display_name or assignment.tool_name

    # Se conservan los nulls: el aligner descarta los puntos no numéricos
    points = tuple(RawPoint(timestamp=record_timestamp(row), value=row.get(key)) for row in records)

    return IndicatorDefinition(
        name=str(name),
        placement=_resolve_placement(assignment, meta),
        color=str(color),
        stroke_width=float(width),
        raw_points=points,
    )


def extract_indicator_definitions(
    records: Sequence[Mapping[str, Any]],
    assignments: Iterable[Any],
    *,
    strategy_params: Optional[Mapping[str, Any]] = None,
    metadata: Optional[Mapping[str, Mapping[str, Any]]] = None,
    config: ChartConfig = ChartConfig(),
    on_diagnostic: Optional[DiagnosticHook] = None,
) -> List[IndicatorDefinition]:
    records = list(records)
    metadata = metadata or {}
    definitions: List[IndicatorDefinition] = []

    for raw in assignments:
        assignment = raw if isinstance(raw, ToolAssignment) else ToolAssignment.from_mapping(raw)
        params = resolve_parameters(assignment, strategy_params)
        key = resolve_indicator_key(records, assignment.tool_name, params)

        if key is None:
            emit(
                Diagnostic(
                    kind=DiagnosticKind.MISSING_INDICATOR_KEY,
                    subject=assignment.tool_name,
                    message=f"no column found, tried {candidate_keys(assignment.tool_name, params)}",
                ),
                on_diagnostic,
                logger,
            )
            continue

        if not any(to_finite_float(row.get(key)) is not None for row in records):
            emit(
                Diagnostic(
                    kind=DiagnosticKind.MISSING_INDICATOR_KEY,
                    subject=assignment.tool_name,
                    message=f"column {key!r} has no numeric values",
                ),
                on_diagnostic,
                logger,
            )
            continue

        definition = build_definition(
            records, assignment, key, meta=metadata.get(key), config=config
        )
        logger.debug("Indicator %s (%s) extracted from column %s", definition.name, definition.placement.value, key)
        definitions.append(definition)

    return definitions
