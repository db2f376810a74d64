"""
Telegram Bot API 客户端

发送警报到指定 chat，并提供命令轮询所需的 getMe / getUpdates。
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import aiohttp

from core.exceptions import NetworkError, TelegramAuthError

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """
    Telegram 通知器

    使用示例:
    ```python
    notifier = TelegramNotifier(bot_token="YOUR_BOT_TOKEN")
    me = await notifier.get_me()
    await notifier.send(chat_id, "⚠️ Volume Alert for ETHUSDT ...")
    ```

    获取 Bot Token:
    1. 在 Telegram 搜索 @BotFather
    2. 发送 /newbot 创建机器人
    3. 保存获得的 token
    """

    def __init__(
        self,
        bot_token: str,
        proxy: Optional[str] = None,
    ):
        self.bot_token = bot_token
        self.proxy = proxy or None

        self._base_url = f"https://api.telegram.org/bot{bot_token}"
        self._session: Optional[aiohttp.ClientSession] = None

        # 限流
        self._last_send_time: Optional[datetime] = None
        self._min_interval = 1.0  # 最小发送间隔(秒)
        self._send_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        """获取或创建 HTTP 会话"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def _call(self, method: str, payload: Optional[Dict[str, Any]] = None, timeout: float = 10) -> Dict[str, Any]:
        """调用 Bot API 方法，返回原始响应 JSON"""
        session = await self._get_session()
        url = f"{self._base_url}/{method}"
        try:
            async with session.post(
                url,
                json=payload or {},
                timeout=aiohttp.ClientTimeout(total=timeout),
                proxy=self.proxy,
            ) as resp:
                result = await resp.json(content_type=None)
        except asyncio.TimeoutError:
            raise NetworkError(f"Telegram {method} 超时")
        except (aiohttp.ClientError, ValueError) as e:
            raise NetworkError(f"Telegram {method} 错误: {e}")

        if not isinstance(result, dict):
            raise NetworkError(f"Telegram {method} 响应格式错误: {result!r}")
        return result

    async def get_me(self) -> Dict[str, Any]:
        """
        验证 token，返回机器人信息

        Raises:
            TelegramAuthError: token 无效或无法连接 Telegram
        """
        try:
            result = await self._call("getMe")
        except NetworkError as e:
            raise TelegramAuthError(str(e))

        if not result.get("ok"):
            raise TelegramAuthError(f"Telegram 认证失败: {result.get('description', result)}")

        me = result["result"]
        logger.info(f"Authorized on account {me.get('username')}")
        return me

    async def get_updates(self, offset: int = 0, timeout: int = 60) -> List[Dict[str, Any]]:
        """
        长轮询获取更新

        Raises:
            NetworkError: 请求失败或 API 返回错误
        """
        payload = {"offset": offset, "timeout": timeout, "allowed_updates": ["message"]}
        # HTTP 超时需要比服务端长轮询时间更长
        result = await self._call("getUpdates", payload, timeout=timeout + 10)

        if not result.get("ok"):
            raise NetworkError(f"getUpdates 失败: {result.get('description', result)}")
        updates = result.get("result", [])
        if not isinstance(updates, list):
            raise NetworkError(f"getUpdates 响应格式错误: {updates!r}")
        return updates

    async def send(self, chat_id: Any, message: str) -> bool:
        """
        发送消息

        Args:
            chat_id: 目标会话
            message: 消息内容

        Returns:
            是否发送成功
        """
        if not self.bot_token:
            logger.warning("Telegram 配置不完整，跳过发送")
            return False

        async with self._send_lock:
            # 限流检查
            now = datetime.now()
            if self._last_send_time:
                elapsed = (now - self._last_send_time).total_seconds()
                if elapsed < self._min_interval:
                    await asyncio.sleep(self._min_interval - elapsed)

            data = {"chat_id": chat_id, "text": message}

            try:
                result = await self._call("sendMessage", data)
            except NetworkError as e:
                logger.error(f"Telegram 发送错误: {e}")
                return False

            if result.get("ok"):
                self._last_send_time = datetime.now()
                logger.debug(f"Telegram 发送成功 [{chat_id}]: {message[:50]}...")
                return True

            logger.error(f"Telegram 发送失败 [{chat_id}]: {result}")
            return False

    async def close(self):
        """关闭会话"""
        if self._session and not self._session.closed:
            await self._session.close()
