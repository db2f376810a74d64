"""
控制台输出

无聊天平台时的警报出口，直接打印到标准输出。
"""
import logging
from typing import Any

logger = logging.getLogger(__name__)


class ConsoleSink:
    """控制台警报出口，destination 仅用于日志"""

    async def send(self, destination: Any, message: str) -> bool:
        print(message)
        print("-" * 40)
        logger.debug(f"控制台输出 [{destination}]: {message.splitlines()[0] if message else ''}")
        return True
