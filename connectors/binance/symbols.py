"""
Binance 交易对符号

把排名接口返回的币种符号转换为 Binance 现货交易对。
"""

DEFAULT_QUOTE_ASSET = "USDT"


def to_pair_symbol(base: str, quote: str = DEFAULT_QUOTE_ASSET) -> str:
    """
    币种符号 -> 交易对

    >>> to_pair_symbol("btc")
    'BTCUSDT'
    """
    return f"{base.strip().upper()}{quote.upper()}"
