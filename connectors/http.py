"""
只读 JSON HTTP 客户端基类

封装 aiohttp 会话管理、超时与代理，把传输层异常统一转换为
NetworkError / DecodeError，供行情连接器复用。
"""
import asyncio
import json
import logging
from typing import Any, Dict, Optional, Tuple, Union

import aiohttp

from core.exceptions import NetworkError, DecodeError

logger = logging.getLogger(__name__)


class JsonHttpClient:
    """
    JSON HTTP 客户端基类

    子类设置 base_url，通过 _get() 发送 GET 请求。
    不做重试，由调用方决定失败后的处理。
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        proxy: Optional[str] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.proxy = proxy or None

        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """获取或创建 HTTP 会话"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def _get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Tuple[int, Optional[bytes]]:
        """
        发送 GET 请求

        Returns:
            (HTTP 状态码, 原始响应体)

        Raises:
            NetworkError: 连接失败或超时
        """
        url = f"{self.base_url}{endpoint}"
        session = await self._get_session()

        try:
            async with session.get(url, params=params, proxy=self.proxy) as resp:
                body = await resp.read()
                return resp.status, body
        except asyncio.TimeoutError:
            raise NetworkError(f"请求超时 ({self.timeout:.0f}s): {url}")
        except aiohttp.ClientError as e:
            raise NetworkError(f"网络错误: {e}")

    @staticmethod
    def _decode(body: Optional[Union[bytes, str]]) -> Any:
        """解析 JSON 响应体 (UTF-8)"""
        if not body:
            raise DecodeError("响应体为空")
        try:
            if isinstance(body, bytes):
                body = body.decode("utf-8")
            return json.loads(body)
        except ValueError as e:  # 含 UnicodeDecodeError
            raise DecodeError(f"JSON 解析失败: {e}")

    async def close(self):
        """关闭会话"""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
