"""
Binance 小时成交量

拉取最近两根 1h K 线，计算 当前小时成交量 / 上一小时成交量。
"""
import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

from connectors.http import JsonHttpClient
from core.exceptions import NetworkError, DecodeError, InsufficientDataError

logger = logging.getLogger(__name__)

# K 线数组中成交量字段的下标
VOLUME_INDEX = 5


@dataclass(frozen=True)
class VolumeSample:
    """相邻两个小时的成交量及比值"""
    prev_volume: float
    curr_volume: float
    ratio: float


def parse_volume(value: Any) -> float:
    """
    解析成交量字段 (Binance 以字符串返回)

    无法解析或非有限值 (NaN / inf) 时返回 0.0，上一小时为 0 的样本会被当作无信号跳过。
    """
    try:
        volume = float(value)
    except (TypeError, ValueError):
        logger.debug(f"成交量解析失败，按 0 处理: {value!r}")
        return 0.0

    if not math.isfinite(volume):
        logger.debug(f"成交量非有限值，按 0 处理: {value!r}")
        return 0.0
    return volume


def build_volume_sample(symbol: str, klines: Any) -> Optional[VolumeSample]:
    """
    由 K 线数组构建成交量样本

    Returns:
        VolumeSample，上一小时成交量为 0 时返回 None

    Raises:
        DecodeError: K 线结构错误
        InsufficientDataError: K 线不足 2 根
    """
    if not isinstance(klines, list):
        raise DecodeError(f"{symbol}: K 线响应应为数组，实际为 {type(klines).__name__}")

    if len(klines) < 2:
        raise InsufficientDataError(symbol, len(klines))

    for row in klines[:2]:
        if not isinstance(row, list) or len(row) <= VOLUME_INDEX:
            raise DecodeError(f"{symbol}: K 线记录格式错误: {row!r}")

    prev_volume = parse_volume(klines[0][VOLUME_INDEX])
    curr_volume = parse_volume(klines[1][VOLUME_INDEX])

    if prev_volume == 0:
        return None

    return VolumeSample(
        prev_volume=prev_volume,
        curr_volume=curr_volume,
        ratio=curr_volume / prev_volume,
    )


class BinanceKlineClient(JsonHttpClient):
    """
    Binance 现货 K 线客户端 (公开接口，无需签名)

    使用示例:
    ```python
    client = BinanceKlineClient()
    sample = await client.fetch_volume_signal("ETHUSDT")
    if sample and sample.ratio > 5:
        ...
    ```
    """

    MAINNET_URL = "https://api.binance.com"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        proxy: Optional[str] = None,
    ):
        super().__init__(base_url or self.MAINNET_URL, timeout=timeout, proxy=proxy)

    async def fetch_volume_signal(self, symbol: str) -> Optional[VolumeSample]:
        """
        获取交易对的小时成交量比值

        Returns:
            VolumeSample；交易对不存在 (HTTP 400) 或上一小时成交量为 0 时返回 None

        Raises:
            NetworkError: 网络失败或其他非 200 响应
            DecodeError: 响应格式错误
            InsufficientDataError: K 线不足 2 根
        """
        status, body = await self._get(
            "/api/v3/klines",
            params={"symbol": symbol, "interval": "1h", "limit": 2},
        )

        # 排名中的币种不一定在 Binance 有 USDT 交易对
        if status == 400:
            return None

        if status != 200:
            raise NetworkError(f"{symbol}: 获取 K 线失败: HTTP {status}", status=status)

        return build_volume_sample(symbol, self._decode(body))
