"""
CHARTSYNC - Entry Point.

Backtest outputs (OHLCV + indicator columns, trades, tool assignments)
-> ChartModel -> console summary + JSON payload for the renderer.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from general.configuracion import (
    ACTIVO,
    ARCHIVO_DATA,
    ARCHIVO_INDICATOR_METADATA,
    ARCHIVO_SALIDA,
    ARCHIVO_TOOLS,
    ARCHIVO_TRADES,
    CONFIG,
    POSITION_MODE,
    STRATEGY_PARAMS,
    TIMEFRAME,
)
from chartsync.core.data import load_data, load_json, records_from_frame
from chartsync.core.extraction import extract_indicator_definitions
from chartsync.core.errors import DiagnosticCollector
from chartsync.core.logging_config import setup_logging
from chartsync.core.pipeline import build_chart_model
from chartsync.core.types import ChartConfig
from visual.payload import dumps_chart
from visual.rich import mostrar_resumen_grafico

logger = logging.getLogger("chartsync.ejecutar")


def _load_optional_json(path):
    if not path or not Path(path).exists():
        logger.warning("No existe %s: se continúa sin él", path)
        return None
    return load_json(path)


def main() -> None:
    setup_logging(logging.INFO)
    config = ChartConfig.from_dict(CONFIG)

    # 1. DATOS
    df = load_data(ARCHIVO_DATA)
    records = records_from_frame(df)

    trades = _load_optional_json(ARCHIVO_TRADES) or []
    if isinstance(trades, dict):
        trades = trades.get("trades") or []
    assignments = _load_optional_json(ARCHIVO_TOOLS) or []
    metadata = _load_optional_json(ARCHIVO_INDICATOR_METADATA)

    # 2. INDICADORES EMBEBIDOS
    collector = DiagnosticCollector()
    indicators = extract_indicator_definitions(
        records,
        assignments,
        strategy_params=STRATEGY_PARAMS,
        metadata=metadata,
        config=config,
        on_diagnostic=collector,
    )

    # 3. MODELO
    now_ms = int(time.time() * 1000)
    model = build_chart_model(
        records,
        indicators,
        trades,
        POSITION_MODE,
        timeframe=TIMEFRAME,
        now_ms=now_ms,
        config=config,
        on_diagnostic=collector,
    )

    # 4. SALIDA
    mostrar_resumen_grafico(model, titulo=f"{ACTIVO} · {POSITION_MODE}")
    out = Path(ARCHIVO_SALIDA)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(dumps_chart(model))
    logger.info("Payload escrito en %s (%d diagnóstico(s))", out, len(collector.items))


if __name__ == "__main__":
    main()
