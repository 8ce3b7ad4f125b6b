"""
CENTRALIZED TIMESTAMP / NUMBER PARSING

Every timestamp that enters the core (candles, indicator points, trades) goes
through `to_epoch_ms`. Every numeric field goes through `to_finite_float`.
Both return None instead of raising, so callers decide whether a failure drops
the whole record or just one optional field.

Timestamp encodings accepted:
- int / float / numpy numbers: epoch milliseconds
- numeric strings ("1704067200000", "1.7e12"): epoch milliseconds
- ISO-8601 strings, datetime, date, pd.Timestamp, np.datetime64
Naive datetimes are interpreted as UTC.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Optional

import numpy as np
import pandas as pd

MS_PER_DAY = 86_400_000

_NUMERIC_RE = re.compile(r"[+-]?\d+(\.\d+)?([eE][+-]?\d+)?")


def to_epoch_ms(value: Any) -> Optional[int]:
    """Convierte cualquier timestamp soportado a epoch ms (int) o None."""
    if value is None or isinstance(value, (bool, np.bool_)):
        return None

    if isinstance(value, (int, np.integer)):
        return int(value)

    if isinstance(value, (float, np.floating)):
        if not math.isfinite(value):
            return None
        return int(value)

    if isinstance(value, np.datetime64):
        if np.isnat(value):
            return None
        return int(value.astype("datetime64[ms]").astype(np.int64))

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if _NUMERIC_RE.fullmatch(text):
            return int(float(text))
        return _timestamp_to_ms(text)

    if isinstance(value, (datetime, date)):
        return _timestamp_to_ms(value)

    return None


def _timestamp_to_ms(value: Any) -> Optional[int]:
    try:
        ts = pd.Timestamp(value)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    else:
        ts = ts.tz_convert("UTC")
    return int(ts.value // 1_000_000)


def to_finite_float(value: Any) -> Optional[float]:
    """Número finito o None. Strings se parsean estrictos ('12.5', ' 3 ')."""
    if value is None or isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def ms_to_iso(timestamp_ms: int) -> str:
    """Epoch ms -> ISO-8601 UTC (para logs y payloads legibles)."""
    return pd.Timestamp(timestamp_ms, unit="ms", tz="UTC").isoformat()
