"""
Historical trade data for order flow analysis.

Provides:
1. Trade fetching from Binance aggTrades (tick-level, with aggressor side)
2. Trade storage in Parquet/CSV for repeatable analysis
"""

from orderflow.historical.binance import BinanceTradeFetcher, parse_agg_trade
from orderflow.historical.trade_storage import TradeStorage, generate_trade_filename

__all__ = [
    "BinanceTradeFetcher",
    "parse_agg_trade",
    "TradeStorage",
    "generate_trade_filename",
]
