"""
Binance 连接器模块

提供现货 1h K 线成交量查询。
"""
from connectors.binance.klines import BinanceKlineClient, VolumeSample, build_volume_sample, parse_volume
from connectors.binance.symbols import to_pair_symbol

__all__ = [
    "BinanceKlineClient",
    "VolumeSample",
    "build_volume_sample",
    "parse_volume",
    "to_pair_symbol",
]
