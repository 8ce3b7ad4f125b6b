from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import orjson
import pandas as pd
import polars as pl

from chartsync.core.candles import TIMESTAMP_FIELDS

logger = logging.getLogger(__name__)

Frame = Union[pl.DataFrame, pd.DataFrame]


def load_json(path: Union[str, Path]) -> Any:
    """Lee un fichero JSON (trades, tool assignments, metadata de indicadores)."""
    return orjson.loads(Path(path).read_bytes())


def load_data(path: Union[str, Path]) -> pl.DataFrame:
    """
    Carga datos OHLCV (+ columnas de indicadores) normalizando la columna temporal
    a 'timestamp' en UTC con precisión de microsegundos.
    """
    p = Path(path)
    ext = p.suffix.lower()

    if ext in {".parquet", ".pq"}:
        q = pl.scan_parquet(p)
    elif ext in {".feather", ".fthr", ".arrow", ".ipc"}:
        q = pl.scan_ipc(p)
    elif ext == ".csv":
        q = pl.scan_csv(p, try_parse_dates=True)
    elif ext == ".json":
        payload = load_json(p)
        if isinstance(payload, dict):
            payload = payload.get("data") or payload.get("candles") or []
        q = pl.DataFrame(payload).lazy()
    else:
        raise ValueError(f"Formato {ext} no soportado. Usa Parquet, Feather, CSV o JSON.")

    df = _normalize_pl(q).collect()
    logger.info("Loaded %d row(s) from %s", df.height, p.name)
    return df


def _normalize_pl(q: pl.LazyFrame) -> pl.LazyFrame:
    """Renombra la columna temporal a 'timestamp' y la lleva a Datetime('us', 'UTC')."""
    schema = q.collect_schema()

    col_time = next((c for c in TIMESTAMP_FIELDS if c in schema), None)
    if col_time is None:
        raise ValueError(f"Falta columna temporal. Detectadas: {list(schema.keys())}")
    if col_time != "timestamp":
        q = q.rename({col_time: "timestamp"})

    dtype = schema[col_time]
    col = pl.col("timestamp")

    if dtype.is_integer() or dtype.is_float():
        # Epoch en milisegundos
        ts_expr = pl.from_epoch(col.cast(pl.Int64), time_unit="ms").dt.replace_time_zone("UTC")
    elif dtype == pl.String:
        ts_expr = col.str.to_datetime(time_unit="us", time_zone="UTC")
    elif dtype == pl.Date:
        ts_expr = col.cast(pl.Datetime("us")).dt.replace_time_zone("UTC")
    else:
        ts_expr = col.dt.cast_time_unit("us")
        tz = getattr(dtype, "time_zone", None)
        if tz is None:
            ts_expr = ts_expr.dt.replace_time_zone("UTC")
        elif tz != "UTC":
            ts_expr = ts_expr.dt.convert_time_zone("UTC")

    return q.with_columns(ts_expr.alias("timestamp")).sort("timestamp")


def records_from_frame(frame: Frame) -> List[Dict[str, Any]]:
    """DataFrame (polars o pandas) -> lista de dicts con 'timestamp' en epoch ms."""
    if isinstance(frame, pd.DataFrame):
        return frame.to_dict(orient="records")

    if "timestamp" in frame.columns and frame.schema["timestamp"] == pl.Datetime:
        frame = frame.with_columns(pl.col("timestamp").dt.epoch("ms"))
    return frame.to_dicts()
