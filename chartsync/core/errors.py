"""
Errores y diagnósticos del núcleo de gráficos.

- MalformedRecord: un registro (vela, punto de indicador, trade) no parsea.
  Se recupera localmente: el registro se descarta y el proceso continúa.
- InvariantViolation: composición estructuralmente inválida. Se propaga.

Las condiciones no fatales (series vacías, indicadores sin alinear, claves
de indicador no encontradas) se reportan como Diagnostic a través de un
hook opcional, además del logging.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class ChartError(Exception):
    """Base de todos los errores de chartsync."""


class MalformedRecord(ChartError):
    """A single candle / indicator point / trade failed parsing."""


class InvariantViolation(ChartError):
    """A composed panel would misrepresent its data (e.g. primary panel not led by candles)."""


class DiagnosticKind(str, Enum):
    MALFORMED_RECORD = "malformed_record"
    EMPTY_SERIES = "empty_series"
    UNALIGNABLE_INDICATOR = "unalignable_indicator"
    MISSING_INDICATOR_KEY = "missing_indicator_key"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    subject: str
    message: str
    count: int = 0


DiagnosticHook = Callable[[Diagnostic], None]


def emit(
    diagnostic: Diagnostic,
    hook: Optional[DiagnosticHook],
    logger: logging.Logger,
    level: int = logging.WARNING,
) -> Diagnostic:
    """Loguea el diagnóstico y lo entrega al hook (si existe)."""
    logger.log(level, "[%s] %s: %s", diagnostic.kind.value, diagnostic.subject, diagnostic.message)
    if hook is not None:
        hook(diagnostic)
    return diagnostic


class DiagnosticCollector:
    """Hook that keeps every diagnostic it receives, optionally forwarding them."""

    def __init__(self, forward: Optional[DiagnosticHook] = None):
        self.items: list = []
        self._forward = forward

    def __call__(self, diagnostic: Diagnostic) -> None:
        self.items.append(diagnostic)
        if self._forward is not None:
            self._forward(diagnostic)

    def of_kind(self, kind: DiagnosticKind) -> list:
        return [d for d in self.items if d.kind is kind]
