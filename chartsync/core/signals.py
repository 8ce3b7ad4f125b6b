"""
SignalDeriver: trade records -> position-mode filtered trades -> entry/exit markers.

Trade records arrive in two schema generations:
- TaggedTrade: carries the position mode of the backtest run that produced it
  (`position_mode` at top level or under `metadata`). Filtered by equality.
- LegacyTrade: no tag. Included for ALL; for LONG/SHORT the side is inferred
  from `trade_type` (buy -> long, sell -> short) while `legacy_inference` is on.

Signals are plotted by absolute timestamp/price; they do not need to coincide
with a candle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from chartsync.core.errors import (
    Diagnostic,
    DiagnosticHook,
    DiagnosticKind,
    MalformedRecord,
    emit,
)
from chartsync.core.timestamps import to_epoch_ms, to_finite_float
from chartsync.core.types import (
    LegacyTrade,
    PositionMode,
    Signal,
    SignalKind,
    TaggedTrade,
    Trade,
    TradeRecord,
    TradeType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignalSet:
    trades: Tuple[TradeRecord, ...]
    signals: Tuple[Signal, ...]

    @property
    def entries(self) -> Tuple[Signal, ...]:
        return tuple(s for s in self.signals if s.kind is SignalKind.ENTRY)

    @property
    def exits(self) -> Tuple[Signal, ...]:
        return tuple(s for s in self.signals if s.kind is SignalKind.EXIT)


# =============================================================================
# PARSING (snake_case / camelCase / metadata.position_mode)
# =============================================================================

def _first(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _position_tag(record: Mapping[str, Any]) -> Optional[str]:
    tag = _first(record, "position_mode", "positionMode")
    if tag is None:
        metadata = record.get("metadata")
        if isinstance(metadata, Mapping):
            tag = _first(metadata, "position_mode", "positionMode")
    if tag is None:
        return None
    tag = str(tag).strip().lower()
    return tag or None


def parse_trade(record: Union[Mapping[str, Any], TradeRecord]) -> Trade:
    """Registro de trade -> TaggedTrade | LegacyTrade. Lanza MalformedRecord."""
    if isinstance(record, TradeRecord):
        return record
    if not isinstance(record, Mapping):
        raise MalformedRecord(f"trade is not a mapping: {type(record).__name__}")

    raw_type = _first(record, "trade_type", "tradeType")
    if isinstance(raw_type, TradeType):
        raw_type = raw_type.value
    try:
        trade_type = TradeType(str(raw_type).strip().lower())
    except ValueError:
        raise MalformedRecord(f"unknown trade_type: {raw_type!r}") from None

    entry_ts = to_epoch_ms(_first(record, "entry_timestamp", "entryTimestamp"))
    entry_price = to_finite_float(_first(record, "entry_price", "entryPrice"))
    if entry_ts is None or entry_price is None:
        raise MalformedRecord(f"trade {record.get('id')!r} has no valid entry leg")

    exit_ts = to_epoch_ms(_first(record, "exit_timestamp", "exitTimestamp"))
    exit_price = to_finite_float(_first(record, "exit_price", "exitPrice"))
    if exit_ts is None or exit_price is None:
        # Salida incompleta = posición abierta
        exit_ts = exit_price = None

    fields = dict(
        id=record.get("id"),
        entry_timestamp_ms=entry_ts,
        entry_price=entry_price,
        trade_type=trade_type,
        exit_timestamp_ms=exit_ts,
        exit_price=exit_price,
        pnl=to_finite_float(record.get("pnl")),
        pnl_percentage=to_finite_float(_first(record, "pnl_percentage", "pnlPercentage")),
    )

    tag = _position_tag(record)
    if tag is None:
        return LegacyTrade(**fields)
    try:
        mode = PositionMode(tag)
    except ValueError:
        raise MalformedRecord(f"unknown position_mode: {tag!r}") from None
    return TaggedTrade(position_mode=mode, **fields)


def parse_trades(
    records: Iterable[Any],
    *,
    on_diagnostic: Optional[DiagnosticHook] = None,
) -> List[Trade]:
    trades: List[Trade] = []
    dropped = 0
    for record in records:
        try:
            trades.append(parse_trade(record))
        except MalformedRecord as exc:
            dropped += 1
            logger.debug("Dropping trade record: %s", exc)
    if dropped:
        emit(
            Diagnostic(
                kind=DiagnosticKind.MALFORMED_RECORD,
                subject="trades",
                message=f"{dropped} trade record(s) dropped",
                count=dropped,
            ),
            on_diagnostic,
            logger,
            level=logging.DEBUG,
        )
    return trades


# =============================================================================
# FILTERING
# =============================================================================

_INFERRED_MODE = {
    TradeType.BUY: PositionMode.LONG,
    TradeType.SELL: PositionMode.SHORT,
}


def trade_matches_mode(
    trade: TradeRecord,
    mode: PositionMode,
    *,
    legacy_inference: bool = True,
) -> bool:
    if isinstance(trade, TaggedTrade):
        return trade.position_mode is mode
    if mode is PositionMode.ALL:
        return True
    if not legacy_inference:
        return False
    return _INFERRED_MODE[trade.trade_type] is mode


def filter_trades(
    trades: Iterable[TradeRecord],
    mode: Union[str, PositionMode],
    *,
    legacy_inference: bool = True,
) -> List[TradeRecord]:
    mode = PositionMode.parse(mode)
    return [t for t in trades if trade_matches_mode(t, mode, legacy_inference=legacy_inference)]


# =============================================================================
# SIGNALS
# =============================================================================

def trade_signals(trade: TradeRecord) -> List[Signal]:
    """1 señal (entrada) o 2 (entrada + salida) por trade."""
    position = trade.position_type
    out = [
        Signal(
            timestamp_ms=trade.entry_timestamp_ms,
            price=trade.entry_price,
            kind=SignalKind.ENTRY,
            position_type=position,
            trade_id=trade.id,
        )
    ]
    if trade.has_exit:
        out.append(
            Signal(
                timestamp_ms=trade.exit_timestamp_ms,
                price=trade.exit_price,
                kind=SignalKind.EXIT,
                position_type=position,
                trade_id=trade.id,
            )
        )
    return out


def derive_signals(trades: Sequence[TradeRecord]) -> List[Signal]:
    signals: List[Signal] = []
    for trade in trades:
        signals.extend(trade_signals(trade))
    return signals


def derive(
    trades: Iterable[Any],
    mode: Union[str, PositionMode] = PositionMode.ALL,
    *,
    legacy_inference: bool = True,
    on_diagnostic: Optional[DiagnosticHook] = None,
) -> SignalSet:
    """Trades crudos (o ya parseados) + modo -> SignalSet(trades filtrados, señales)."""
    mode = PositionMode.parse(mode)
    parsed = parse_trades(trades, on_diagnostic=on_diagnostic)
    retained = filter_trades(parsed, mode, legacy_inference=legacy_inference)
    signals = derive_signals(retained)
    logger.debug(
        "Generated %d signal(s) from %d of %d trade(s) (mode: %s)",
        len(signals),
        len(retained),
        len(parsed),
        mode.value,
    )
    return SignalSet(trades=tuple(retained), signals=tuple(signals))