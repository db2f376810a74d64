"""
CoinGecko 市值排名

获取市值前 100 的币种，转换为 Binance 交易对符号。
"""
import logging
from typing import Any, List, Optional

from connectors.binance.symbols import DEFAULT_QUOTE_ASSET, to_pair_symbol
from connectors.http import JsonHttpClient
from core.exceptions import NetworkError, DecodeError

logger = logging.getLogger(__name__)

# /coins/markets 固定查询参数
MARKETS_PARAMS = {
    "vs_currency": "usd",
    "order": "market_cap_desc",
    "per_page": 100,
    "page": 1,
    "sparkline": "false",
}


def parse_top_symbols(payload: Any, quote_asset: str = DEFAULT_QUOTE_ASSET) -> List[str]:
    """
    解析 /coins/markets 响应

    保持上游排名顺序；缺少 symbol 的记录跳过。

    Raises:
        DecodeError: 响应不是数组，或数组元素不是对象
    """
    if not isinstance(payload, list):
        raise DecodeError(f"市值排名响应应为数组，实际为 {type(payload).__name__}")

    symbols = []
    for coin in payload:
        if not isinstance(coin, dict):
            raise DecodeError(f"市值排名记录格式错误: {coin!r}")

        base = coin.get("symbol")
        if not isinstance(base, str) or not base.strip():
            logger.debug(f"跳过无 symbol 的记录: {coin.get('id')}")
            continue

        symbols.append(to_pair_symbol(base, quote_asset))

    return symbols


class CoinGeckoClient(JsonHttpClient):
    """
    CoinGecko 行情客户端

    使用示例:
    ```python
    client = CoinGeckoClient()
    symbols = await client.fetch_top_symbols()   # ["BTCUSDT", "ETHUSDT", ...]
    ```
    """

    DEFAULT_BASE_URL = "https://api.coingecko.com/api/v3"

    def __init__(
        self,
        base_url: Optional[str] = None,
        quote_asset: str = DEFAULT_QUOTE_ASSET,
        timeout: float = 30.0,
        proxy: Optional[str] = None,
    ):
        super().__init__(base_url or self.DEFAULT_BASE_URL, timeout=timeout, proxy=proxy)
        self.quote_asset = quote_asset

    async def fetch_top_symbols(self) -> List[str]:
        """
        获取市值前 100 的交易对

        Raises:
            NetworkError: 网络失败或非 200 响应
            DecodeError: 响应格式错误
        """
        status, body = await self._get("/coins/markets", params=MARKETS_PARAMS)

        if status != 200:
            raise NetworkError(f"获取市值排名失败: HTTP {status}", status=status)

        symbols = parse_top_symbols(self._decode(body), self.quote_asset)
        logger.debug(f"市值排名: {len(symbols)} 个交易对")
        return symbols
