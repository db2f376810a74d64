#!/usr/bin/env python3
"""
控制台成交量监控

不依赖 Telegram，单会话运行，警报直接打印到终端。

使用:
    python scripts/run_console_monitor.py

配置 .env (可选):
    BINANCE_BASE_URL=https://api.binance.com
    HTTP_PROXY=http://127.0.0.1:7890
"""
import asyncio
import logging
import signal
import sys
import os

# 添加项目根目录到路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import settings
from connectors import BinanceKlineClient, CoinGeckoClient
from monitoring.console_sink import ConsoleSink
from monitoring.volume_monitor import MonitorSession, VolumeMonitor

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)s | %(message)s'
)
logger = logging.getLogger(__name__)

CONSOLE_SESSION_ID = 0


async def main():
    proxy = settings.HTTP_PROXY or None
    market = CoinGeckoClient(
        base_url=settings.COINGECKO_BASE_URL,
        quote_asset=settings.QUOTE_ASSET,
        timeout=settings.REQUEST_TIMEOUT_SECONDS,
        proxy=proxy,
    )
    klines = BinanceKlineClient(
        base_url=settings.BINANCE_BASE_URL,
        timeout=settings.REQUEST_TIMEOUT_SECONDS,
        proxy=proxy,
    )
    monitor = VolumeMonitor(market=market, klines=klines, sink=ConsoleSink())
    session = MonitorSession(CONSOLE_SESSION_ID)

    # Ctrl+C / SIGTERM 设置停止标志，循环在下一个检查点退出
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, session.stop)
        except NotImplementedError:
            # Windows 不支持
            pass

    logger.info("🚀 Binance 成交量监控启动 (控制台模式)")
    try:
        await monitor.run(session)
    finally:
        await market.close()
        await klines.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n👋 监控已停止")
