"""
RangeScaler: padded value-axis bounds for one or more numeric series.

    range = data_max - data_min
    min   = data_min - range * padding   (floored, see below)
    max   = data_max + range * padding

- empty input (or only NaN/inf) -> `empty` default, (0, 100)
- zero range -> no padding, min == max == data_min
- min is floored at `floor` (0 by default); floor=None leaves it unclipped.
  max never drops below the floored min (all-negative constant series)
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

import numpy as np

from chartsync.core.types import Candle, ValueAxis

AXIS_PADDING = 0.1
EMPTY_AXIS = (0.0, 100.0)


def compute_value_axis(
    *series: Iterable[float],
    padding: float = AXIS_PADDING,
    floor: Optional[float] = 0.0,
    empty: Tuple[float, float] = EMPTY_AXIS,
) -> ValueAxis:
    chunks = [np.asarray(list(s), dtype=np.float64) for s in series]
    values = np.concatenate(chunks) if chunks else np.empty(0, dtype=np.float64)
    values = values[np.isfinite(values)]

    if values.size == 0:
        return ValueAxis(min=float(empty[0]), max=float(empty[1]))

    data_min = float(values.min())
    data_max = float(values.max())
    value_range = data_max - data_min

    lo = data_min - value_range * padding
    hi = data_max + value_range * padding
    if floor is not None:
        lo = max(floor, lo)
        hi = max(hi, lo)

    return ValueAxis(min=lo, max=hi)


def candle_values(candles: Iterable[Candle]) -> np.ndarray:
    """Todos los precios OHLC aplanados (para el eje del panel principal)."""
    flat = [price for c in candles for price in c.prices]
    return np.asarray(flat, dtype=np.float64)
