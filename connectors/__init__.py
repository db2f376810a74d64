"""Connectors package"""
from connectors.http import JsonHttpClient
from connectors.coingecko import CoinGeckoClient, parse_top_symbols
from connectors.binance import BinanceKlineClient, VolumeSample, to_pair_symbol

__all__ = [
    "JsonHttpClient",
    "CoinGeckoClient",
    "parse_top_symbols",
    "BinanceKlineClient",
    "VolumeSample",
    "to_pair_symbol",
]
