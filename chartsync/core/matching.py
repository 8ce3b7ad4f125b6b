"""
TIMESTAMP MATCHING STRATEGIES

Maps an indicator timestamp onto the authoritative candle timestamp array.

Contract (shared by every matcher):
1. Exact match: timestamp present in the candle set -> that timestamp.
2. Fallback: closest candle timestamp with |diff| <= tolerance_ms.
   Tie on |diff| -> the EARLIER candle timestamp wins.
3. Otherwise None.

ScanMatcher is the reference implementation (hash lookup + linear scan).
BisectMatcher gives the same answers with np.searchsorted and is the default.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

import numpy as np


@dataclass(frozen=True)
class Match:
    timestamp_ms: int
    exact: bool
    distance_ms: int


class TimestampMatcher(Protocol):
    def match(self, timestamp_ms: int) -> Optional[Match]: ...


MatcherFactory = Callable[[Sequence[int], int], TimestampMatcher]


class ScanMatcher:
    """O(1) exact lookup, O(m) fallback scan over candle timestamps."""

    def __init__(self, candle_timestamps: Sequence[int], tolerance_ms: int):
        self.ts_q = sorted(int(t) for t in candle_timestamps)
        self.ts_set = set(self.ts_q)
        self.tolerance_ms = int(tolerance_ms)

    def match(self, timestamp_ms: int) -> Optional[Match]:
        if timestamp_ms in self.ts_set:
            return Match(timestamp_ms, True, 0)

        best: Optional[int] = None
        best_diff = None
        for ts in self.ts_q:  # ascendente: empates -> gana el anterior
            diff = abs(ts - timestamp_ms)
            if diff > self.tolerance_ms:
                continue
            if best_diff is None or diff < best_diff:
                best, best_diff = ts, diff

        if best is None:
            return None
        return Match(best, False, best_diff)


class BisectMatcher:
    """O(1) exact lookup, O(log m) fallback via binary search."""

    def __init__(self, candle_timestamps: Sequence[int], tolerance_ms: int):
        self.ts_q = np.unique(np.asarray(list(candle_timestamps), dtype=np.int64))
        self.ts_set = set(int(t) for t in self.ts_q)
        self.tolerance_ms = int(tolerance_ms)

    def match(self, timestamp_ms: int) -> Optional[Match]:
        if timestamp_ms in self.ts_set:
            return Match(timestamp_ms, True, 0)
        n = len(self.ts_q)
        if n == 0:
            return None

        idx = int(np.searchsorted(self.ts_q, timestamp_ms, side="left"))
        candidates = []
        if idx > 0:
            left = int(self.ts_q[idx - 1])
            candidates.append((timestamp_ms - left, left))
        if idx < n:
            right = int(self.ts_q[idx])
            candidates.append((right - timestamp_ms, right))

        # min por (distancia, timestamp): en empate gana el timestamp anterior
        diff, ts = min(candidates)
        if diff > self.tolerance_ms:
            return None
        return Match(ts, False, diff)


DEFAULT_MATCHER: MatcherFactory = BisectMatcher
