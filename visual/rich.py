"""
CHARTSYNC Terminal Interface
============================
Console summary of a ChartModel with the Rich library: panels, axes,
trade markers and pipeline diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from rich import box
from rich.align import Align
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from chartsync.core.errors import DiagnosticKind
from chartsync.core.timestamps import ms_to_iso
from chartsync.core.types import ChartModel, PanelKind, PositionType, SignalKind


# ============================================================================
# THEME SYSTEM
# ============================================================================

@dataclass(frozen=True)
class Theme:
    """Dark-mode palette shared by every table in this module."""
    ACCENT: str = "slate_blue1"
    SUCCESS: str = "spring_green3"
    DANGER: str = "bright_red"
    WARNING: str = "dark_orange"

    TEXT_PRIMARY: str = "grey85"
    TEXT_SECONDARY: str = "grey62"
    TEXT_MUTED: str = "grey46"
    TEXT_DIM: str = "grey30"

    BORDER_LIGHT: str = "grey42"
    BORDER_DARK: str = "grey27"

    LONG: str = "spring_green3"
    SHORT: str = "bright_red"

    BOX_PANEL: box.Box = box.ROUNDED
    BOX_TABLE: box.Box = box.SIMPLE_HEAD


THEME = Theme()

_DIAGNOSTIC_COLORS = {
    DiagnosticKind.MALFORMED_RECORD: THEME.TEXT_MUTED,
    DiagnosticKind.EMPTY_SERIES: THEME.DANGER,
    DiagnosticKind.UNALIGNABLE_INDICATOR: THEME.WARNING,
    DiagnosticKind.MISSING_INDICATOR_KEY: THEME.WARNING,
}


# ============================================================================
# FORMATTING UTILITIES
# ============================================================================

def fmt_number(val: float, decimals: int = 2) -> str:
    try:
        return f"{float(val):,.{decimals}f}"
    except (ValueError, TypeError):
        return "-"


def fmt_range(start_ms: Optional[int], end_ms: Optional[int]) -> str:
    if start_ms is None or end_ms is None:
        return "-"
    return f"{ms_to_iso(start_ms)[:16]} → {ms_to_iso(end_ms)[:16]}"


# ============================================================================
# TABLE BUILDERS
# ============================================================================

def _build_panels_table(model: ChartModel) -> Table:
    table = Table(
        box=THEME.BOX_TABLE,
        show_header=True,
        header_style=f"bold {THEME.TEXT_SECONDARY}",
        border_style=THEME.BORDER_DARK,
        padding=(0, 2),
        title=f"[bold {THEME.ACCENT}]═══ PANELS ═══[/]",
        title_justify="center",
    )
    table.add_column("#", justify="center", style=THEME.TEXT_MUTED, width=4)
    table.add_column("KIND", style=THEME.TEXT_SECONDARY)
    table.add_column("SERIES", style=THEME.TEXT_PRIMARY)
    table.add_column("POINTS", justify="right")
    table.add_column("RANGE", style=THEME.TEXT_MUTED)
    table.add_column("Y AXIS", justify="right")

    for i, panel in enumerate(model.panels):
        first = panel.series[0]
        timestamps = [getattr(p, "timestamp_ms", None) for p in first.data]
        kind_style = THEME.ACCENT if panel.kind is PanelKind.PRIMARY else THEME.TEXT_SECONDARY
        table.add_row(
            str(i),
            f"[{kind_style}]{panel.kind.value.upper()}[/]",
            "\n".join(s.name for s in panel.series),
            "\n".join(str(len(s.data)) for s in panel.series),
            fmt_range(timestamps[0], timestamps[-1]) if timestamps else "-",
            f"{fmt_number(panel.value_axis.min)} … {fmt_number(panel.value_axis.max)}",
        )
    return table


def _build_signals_grid(model: ChartModel) -> Table:
    entries = [s for s in model.signals if s.kind is SignalKind.ENTRY]
    exits = [s for s in model.signals if s.kind is SignalKind.EXIT]
    longs = sum(1 for s in entries if s.position_type is PositionType.LONG)
    shorts = len(entries) - longs

    grid = Table.grid(padding=(0, 2))
    grid.add_column("label", style=THEME.TEXT_SECONDARY, width=14, justify="right")
    grid.add_column("value", justify="left")
    grid.add_row("Trades", f"[bold {THEME.TEXT_PRIMARY}]{len(model.trades)}[/]")
    grid.add_row("Entries", f"[{THEME.TEXT_PRIMARY}]{len(entries)}[/]")
    grid.add_row("Exits", f"[{THEME.TEXT_PRIMARY}]{len(exits)}[/]")
    grid.add_row("Long / Short", f"[{THEME.LONG}]{longs}[/]  /  [{THEME.SHORT}]{shorts}[/]")
    return grid


def _build_diagnostics_table(model: ChartModel) -> Table:
    table = Table(
        box=THEME.BOX_TABLE,
        show_header=True,
        header_style=f"bold {THEME.TEXT_SECONDARY}",
        border_style=THEME.BORDER_DARK,
        padding=(0, 2),
        title=f"[bold {THEME.WARNING}]═══ DIAGNOSTICS ═══[/]",
        title_justify="center",
    )
    table.add_column("KIND")
    table.add_column("SUBJECT", style=THEME.TEXT_PRIMARY)
    table.add_column("MESSAGE", style=THEME.TEXT_SECONDARY)

    for d in model.diagnostics:
        color = _DIAGNOSTIC_COLORS.get(d.kind, THEME.TEXT_SECONDARY)
        table.add_row(f"[{color}]{d.kind.value}[/]", d.subject, d.message)
    return table


# ============================================================================
# MAIN DISPLAY (mostrar_resumen_grafico)
# ============================================================================

def mostrar_resumen_grafico(
    model: ChartModel,
    console: Optional[Console] = None,
    titulo: str = "",
) -> None:
    """
    Imprime el resumen del ChartModel.

    Sin velas no hay panel principal: se muestra un aviso "no data" en su lugar.
    """
    console = console or Console()

    title_text = Text()
    title_text.append("═══ ", style=THEME.BORDER_LIGHT)
    title_text.append(titulo.upper() or "CHART", style=f"bold {THEME.TEXT_PRIMARY}")
    title_text.append(" ═══", style=THEME.BORDER_LIGHT)

    body: List = []
    if model.is_empty:
        body.append(Align.center(Text.from_markup(f"[bold {THEME.DANGER}]NO DATA[/]")))
    else:
        body.append(_build_panels_table(model))
    body.append(Align.center(_build_signals_grid(model)))

    console.print()
    console.print(
        Panel(
            Group(*body),
            title=title_text,
            title_align="center",
            box=THEME.BOX_PANEL,
            border_style=THEME.BORDER_LIGHT,
            padding=(1, 2),
        )
    )
    if model.diagnostics:
        console.print(_build_diagnostics_table(model))
    console.print()
