from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from chartsync.core.types import AlignedIndicatorSeries, Placement


@dataclass(frozen=True)
class PartitionedSeries:
    main: Tuple[AlignedIndicatorSeries, ...]  # overlays sobre el precio
    sub: Tuple[AlignedIndicatorSeries, ...]  # un panel secundario por indicador


def partition_series(series: Iterable[AlignedIndicatorSeries]) -> PartitionedSeries:
    """Separa overlays (main) y sub-paneles (sub) conservando el orden de entrada."""
    main = []
    sub = []
    for s in series:
        if s.placement is Placement.SUB:
            sub.append(s)
        else:
            main.append(s)
    return PartitionedSeries(main=tuple(main), sub=tuple(sub))
