"""
Telegram 命令处理

长轮询 getUpdates，按 chat 分发 /start /monitor /stop /status 命令。
"""
import asyncio
import logging
from typing import Any, Dict, Optional

from core.exceptions import NetworkError
from monitoring.manager import MonitorManager
from monitoring.telegram_notifier import TelegramNotifier

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "Welcome to Binance Volume Monitor Bot!\n\n"
    "Available commands:\n"
    "/monitor - Start volume monitoring\n"
    "/stop - Stop volume monitoring\n"
    "/status - Check monitoring status"
)
ALREADY_RUNNING_MESSAGE = "Monitoring is already running!"
NOT_RUNNING_MESSAGE = "Monitoring is not running!"


def parse_command(text: Optional[str]) -> Optional[str]:
    """
    提取命令名

    "/monitor@VolumeBot arg" -> "monitor"，非命令返回 None
    """
    if not text or not text.startswith("/"):
        return None
    head = text[1:].split(maxsplit=1)[0] if text[1:].strip() else ""
    name = head.split("@", 1)[0].lower()
    return name or None


class TelegramCommandBot:
    """
    Telegram 命令机器人

    命令处理只负责启停，监控循环在独立任务中运行。
    """

    def __init__(
        self,
        notifier: TelegramNotifier,
        manager: MonitorManager,
        poll_timeout: int = 60,
        retry_delay: float = 5.0,
    ):
        self.notifier = notifier
        self.manager = manager
        self.poll_timeout = poll_timeout
        self.retry_delay = retry_delay

        self._offset = 0
        self._running = False

    async def handle_command(self, chat_id: int, command: str) -> None:
        """执行单条命令"""
        if command == "start":
            await self.notifier.send(chat_id, WELCOME_MESSAGE)

        elif command == "monitor":
            if not await self.manager.start(chat_id):
                await self.notifier.send(chat_id, ALREADY_RUNNING_MESSAGE)

        elif command == "stop":
            if not await self.manager.stop(chat_id):
                await self.notifier.send(chat_id, NOT_RUNNING_MESSAGE)

        elif command == "status":
            status = "running" if self.manager.is_running(chat_id) else "stopped"
            await self.notifier.send(chat_id, f"Monitoring is currently {status}")

        else:
            logger.debug(f"忽略未知命令 /{command} (chat {chat_id})")

    async def handle_update(self, update: Dict[str, Any]) -> None:
        """处理一条 getUpdates 记录"""
        message = update.get("message")
        if not message:
            return

        command = parse_command(message.get("text"))
        if command is None:
            return

        chat_id = message.get("chat", {}).get("id")
        if chat_id is None:
            return

        logger.info(f"收到命令 /{command} (chat {chat_id})")
        await self.handle_command(int(chat_id), command)

    async def poll_once(self) -> int:
        """拉取并处理一批更新，返回处理数量"""
        updates = await self.notifier.get_updates(offset=self._offset, timeout=self.poll_timeout)
        for update in updates:
            self._offset = max(self._offset, update.get("update_id", 0) + 1)
            try:
                await self.handle_update(update)
            except Exception as e:
                logger.error(f"处理更新失败 {update.get('update_id')}: {e}")
        return len(updates)

    async def run(self) -> None:
        """命令轮询主循环"""
        self._running = True
        logger.info("📨 Telegram 命令轮询启动")

        while self._running:
            try:
                await self.poll_once()
            except NetworkError as e:
                logger.warning(f"获取 Telegram 更新失败: {e}")
                await asyncio.sleep(self.retry_delay)
            except Exception as e:
                logger.error(f"Telegram 命令轮询异常: {e!r}")
                await asyncio.sleep(self.retry_delay)

        logger.info("Telegram 命令轮询已停止")

    def stop(self) -> None:
        self._running = False
