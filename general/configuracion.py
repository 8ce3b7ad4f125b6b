# general/configuracion.py
"""
CHARTSYNC Configuration - Backtest Chart Reconciliation

Inputs produced by a backtest run:
  - OHLCV candles (with the computed indicator columns)
  - trade list (JSON)
  - strategy tool assignments (JSON)
  - strategy parameters used by the run
"""

# ============================================================================
# ASSET SELECTION
# ============================================================================
# Options: 'BTC', 'GOLD', 'SP500', 'NASDAQ'
ACTIVO = "GOLD"

# ============================================================================
# DATA PATHS
# ============================================================================
_DATA_MAP = {
    "BTC": "data/ohlcv/BTC_ohlcv_5m.parquet",
    "GOLD": "data/ohlcv/GOLD_ohlcv_5m.parquet",
    "SP500": "data/ohlcv/SP500_ohlcv_5m.parquet",
    "SP": "data/ohlcv/SP500_ohlcv_5m.parquet",  # Alias
    "NASDAQ": "data/ohlcv/NASDAQ_ohlcv_5m.parquet",
    "NDX": "data/ohlcv/NASDAQ_ohlcv_5m.parquet",  # Alias
}
ARCHIVO_DATA = _DATA_MAP.get(ACTIVO.upper(), _DATA_MAP["GOLD"])

ARCHIVO_TRADES = f"data/trades/{ACTIVO.upper()}_trades.json"
ARCHIVO_TOOLS = "data/tools/assignments.json"
ARCHIVO_INDICATOR_METADATA = None  # JSON {columna: {display_name, color, subchart}} o None

ARCHIVO_SALIDA = f"resultados/chart_{ACTIVO.upper()}.json"

# ============================================================================
# STRATEGY PARAMETERS (valores usados por el backtest)
# ============================================================================
STRATEGY_PARAMS = {
    "fast_period": 20,
    "slow_period": 50,
    "rsi_period": 14,
}

# ============================================================================
# VIEW SETTINGS
# ============================================================================
# 'all' | 'long' | 'short'
POSITION_MODE = "all"
# '1D' | '1W' | '6M' | '1Y' | 'ALL'
TIMEFRAME = "ALL"
# Recorta el gráfico al rango de fechas de los trades (+/- buffer)
FOCUS_ON_TRADES = False

# ============================================================================
# UNIFIED CONFIG DICT (leído por ChartConfig.from_dict)
# ============================================================================
CONFIG = {
    "ACTIVO": ACTIVO,
    "MAX_POINTS": 1000,
    "FALLBACK_TOLERANCE_MS": 24 * 60 * 60 * 1000,
    "AXIS_PADDING": 0.1,
    "AXIS_FLOOR": 0.0,
    "EMPTY_AXIS": (0.0, 100.0),
    "LEGACY_INFERENCE": True,
    "FOCUS_ON_TRADES": FOCUS_ON_TRADES,
    "TRADE_WINDOW_BUFFER_DAYS": 30,
    "DEFAULT_COLOR": "#3B82F6",
    "DEFAULT_STROKE_WIDTH": 2.0,
    "CANDLESTICK_NAME": "Price",
}
