"""
================================================================================
CHARTSYNC - Renderer payload
================================================================================
ChartModel -> plain dict / JSON bytes for the chart renderer.

    {
      "panels": [
        {"kind": "primary", "title": "Price",
         "yaxis": {"min": ..., "max": ...},
         "series": [
            {"name": "Price", "type": "candlestick", "data": [[t, [o, h, l, c]], ...]},
            {"name": "SMA 20", "type": "line", "color": ..., "stroke_width": ...,
             "data": [[t, v], ...]},
         ],
         "markers": [{"timestamp": t, "price": p, "kind": "entry",
                      "position_type": "long", "trade_id": ...}, ...]},
        ...
      ],
      "diagnostics": [{"kind": ..., "subject": ..., "message": ..., "count": ...}]
    }

Timestamps stay in epoch milliseconds. orjson does the serialization.
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List

import orjson

from chartsync.core.types import ChartModel, Panel, PanelSeries, SeriesRole, Signal


def _dumps(obj: Any) -> bytes:
    return orjson.dumps(obj, option=orjson.OPT_SERIALIZE_NUMPY)


def _series_payload(series: PanelSeries) -> Dict[str, Any]:
    if series.role is SeriesRole.CANDLESTICK:
        data: List[Any] = [[c.timestamp_ms, list(c.prices)] for c in series.data]
        kind = "candlestick"
    else:
        data = [[p.timestamp_ms, p.value] for p in series.data]
        kind = "line"

    out: Dict[str, Any] = {"name": series.name, "type": kind, "data": data}
    if series.color is not None:
        out["color"] = series.color
    if series.stroke_width is not None:
        out["stroke_width"] = series.stroke_width
    return out


def _marker_payload(signal: Signal) -> Dict[str, Any]:
    return {
        "timestamp": signal.timestamp_ms,
        "price": signal.price,
        "kind": signal.kind.value,
        "position_type": signal.position_type.value,
        "trade_id": signal.trade_id,
    }


def panel_payload(panel: Panel) -> Dict[str, Any]:
    return {
        "kind": panel.kind.value,
        "title": panel.title,
        "yaxis": {"min": panel.value_axis.min, "max": panel.value_axis.max},
        "series": [_series_payload(s) for s in panel.series],
        "markers": [_marker_payload(m) for m in panel.markers],
    }


def chart_payload(model: ChartModel) -> Dict[str, Any]:
    return {
        "panels": [panel_payload(p) for p in model.panels],
        "diagnostics": [
            {"kind": d.kind.value, "subject": d.subject, "message": d.message, "count": d.count}
            for d in model.diagnostics
        ],
    }


def dumps_chart(model: ChartModel) -> bytes:
    """JSON (bytes) listo para escribir a disco o enviar al renderer."""
    return _dumps(chart_payload(model))
