"""
成交量异动监控循环

每个会话一个 asyncio 任务:
    市值排名 → 逐个交易对查询 1h 成交量 → 比值 > 5 时推送警报

停止是协作式的：设置 MonitorSession 的停止事件后，循环在下一个检查点退出
(每个周期开始、每个交易对之前、以及所有等待期间)，进行中的 HTTP 请求不会被打断。
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, List, Optional, Protocol

from connectors.binance.klines import VolumeSample
from core.exceptions import NetworkError, DecodeError, VolumeMonitorError
from monitoring.alerts import ALERT_RATIO_THRESHOLD, TIME_FORMAT, AlertEvent, evaluate_sample

logger = logging.getLogger(__name__)

CYCLE_INTERVAL_SECONDS = 300.0  # 完整扫描后的等待 (5 分钟)
ERROR_BACKOFF_SECONDS = 300.0   # 市值排名获取失败后的等待 (5 分钟)
SYMBOL_DELAY_SECONDS = 0.1      # 交易对之间的请求间隔

STARTED_MESSAGE = (
    "Volume monitoring started! "
    f"You will receive alerts when volume increases more than {ALERT_RATIO_THRESHOLD:g}x."
)
STOPPED_MESSAGE = "Volume monitoring stopped!"


class AlertSink(Protocol):
    async def send(self, destination: Any, message: str) -> bool: ...


class MarketSnapshotSource(Protocol):
    async def fetch_top_symbols(self) -> List[str]: ...


class VolumeSignalSource(Protocol):
    async def fetch_volume_signal(self, symbol: str) -> Optional[VolumeSample]: ...


class MonitorSession:
    """
    单个会话的运行句柄

    每次启动监控都新建一个句柄，旧循环持有的句柄停止后不会被再次启用。
    """

    def __init__(self, session_id: int):
        self.session_id = session_id
        self.started_at = datetime.now()
        self._stopped = asyncio.Event()

        # 统计
        self.cycles_completed = 0
        self.alerts_sent = 0
        self.last_check_at: Optional[datetime] = None

    @property
    def running(self) -> bool:
        return not self._stopped.is_set()

    def stop(self) -> None:
        self._stopped.set()

    async def sleep(self, seconds: float) -> bool:
        """
        等待指定时间，收到停止信号时提前返回

        Returns:
            True 表示正常等待结束，False 表示会话已停止
        """
        if not self.running:
            return False
        try:
            await asyncio.wait_for(self._stopped.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return True
        return False


class VolumeMonitor:
    """
    成交量异动监控器

    使用示例:
    ```python
    monitor = VolumeMonitor(
        market=CoinGeckoClient(),
        klines=BinanceKlineClient(),
        sink=ConsoleSink(),
    )
    session = MonitorSession(session_id=0)
    await monitor.run(session)
    ```
    """

    def __init__(
        self,
        market: MarketSnapshotSource,
        klines: VolumeSignalSource,
        sink: AlertSink,
        threshold: float = ALERT_RATIO_THRESHOLD,
        cycle_interval: float = CYCLE_INTERVAL_SECONDS,
        error_backoff: float = ERROR_BACKOFF_SECONDS,
        symbol_delay: float = SYMBOL_DELAY_SECONDS,
    ):
        self.market = market
        self.klines = klines
        self.sink = sink
        self.threshold = threshold
        self.cycle_interval = cycle_interval
        self.error_backoff = error_backoff
        self.symbol_delay = symbol_delay

    async def check_symbol(self, symbol: str) -> Optional[AlertEvent]:
        """查询单个交易对，超过阈值时返回警报；任何错误只跳过该交易对"""
        try:
            sample = await self.klines.fetch_volume_signal(symbol)
        except VolumeMonitorError as e:
            logger.warning(f"获取 {symbol} 成交量失败: {e}")
            return None
        except Exception as e:
            logger.error(f"检查 {symbol} 时发生未知错误: {e}")
            return None

        return evaluate_sample(symbol, sample, self.threshold)

    async def run(self, session: MonitorSession, announce: bool = True) -> None:
        """运行监控循环，直到会话停止"""
        session_id = session.session_id
        logger.info(f"🔄 会话 {session_id} 监控循环启动")

        if announce:
            await self.sink.send(session_id, STARTED_MESSAGE)

        while session.running:
            try:
                symbols = await self.market.fetch_top_symbols()
            except (NetworkError, DecodeError) as e:
                logger.error(f"获取市值排名失败 (会话 {session_id}): {e}")
                if not await session.sleep(self.error_backoff):
                    break
                continue
            except Exception as e:
                logger.error(f"获取市值排名时发生未知错误 (会话 {session_id}): {e!r}")
                if not await session.sleep(self.error_backoff):
                    break
                continue

            if not await self._scan(session, symbols):
                break

            session.cycles_completed += 1
            session.last_check_at = datetime.now()
            logger.info(
                f"Check completed for chat {session_id} at "
                f"{session.last_check_at.strftime(TIME_FORMAT)}"
            )

            if not await session.sleep(self.cycle_interval):
                break

        logger.info(f"🛑 会话 {session_id} 监控循环已停止")

    async def _scan(self, session: MonitorSession, symbols: List[str]) -> bool:
        """按排名顺序逐个检查，返回 False 表示中途停止"""
        for symbol in symbols:
            if not session.running:
                return False

            alert = await self.check_symbol(symbol)
            if alert:
                logger.warning(f"成交量警报 (会话 {session.session_id}): {alert}")
                await self.sink.send(session.session_id, alert.format())
                session.alerts_sent += 1

            if not await session.sleep(self.symbol_delay):
                return False

        return True
