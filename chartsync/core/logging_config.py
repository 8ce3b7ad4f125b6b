"""
Logging Configuration for CHARTSYNC

Configuración centralizada de logging con niveles apropiados.
"""

from __future__ import annotations

import logging
import sys
from typing import Iterable, Optional

# Módulos que emiten un registro por punto/trade descartado en DEBUG
_NOISY_MODULES = (
    "chartsync.core.candles",
    "chartsync.core.alignment",
    "chartsync.core.signals",
)


def setup_logging(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    verbose_modules: Iterable[str] = (),
) -> None:
    """
    Configura el sistema de logging de CHARTSYNC.

    Args:
        level: Nivel de logging (logging.DEBUG, INFO, WARNING, ERROR)
        format_string: Formato personalizado (None usa el default)
        verbose_modules: Módulos ruidosos que deben seguir el nivel global
            (por defecto se limitan a INFO aunque level sea DEBUG)
    """
    if format_string is None:
        format_string = "[%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=format_string,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,  # Sobrescribe configuraciones previas
    )

    verbose = set(verbose_modules)
    for name in _NOISY_MODULES:
        if name not in verbose:
            logging.getLogger(name).setLevel(max(level, logging.INFO))


def get_logger(name: str) -> logging.Logger:
    """
    Obtiene un logger configurado para un módulo.

    Usage:
        logger = get_logger(__name__)
        logger.info("Mensaje")
    """
    return logging.getLogger(name)
