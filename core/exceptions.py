"""
成交量监控异常类

分层异常设计：行情拉取错误只影响当前周期或当前交易对，
持久化错误只记录日志，启动期错误才会终止进程。
"""
from typing import Optional


class VolumeMonitorError(Exception):
    """成交量监控基础异常类"""
    pass


# ==================== 上游 API 异常 ====================

class NetworkError(VolumeMonitorError):
    """上游 API 网络错误

    触发条件: 连接失败、请求超时、非预期 HTTP 状态码
    恢复策略: 快照拉取失败时退避后重试，单个交易对失败时跳过
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class DecodeError(VolumeMonitorError):
    """响应体格式错误

    触发条件: 非 JSON、JSON 结构与预期不符
    """
    pass


class InsufficientDataError(VolumeMonitorError):
    """K 线数据不足，无法计算成交量比值"""

    def __init__(self, symbol: str, count: int):
        super().__init__(f"{symbol}: 需要 2 根 K 线，实际 {count} 根")
        self.symbol = symbol
        self.count = count


# ==================== 本地异常 ====================

class PersistenceError(VolumeMonitorError):
    """状态文件读写失败

    恢复策略: 仅记录日志，监控继续在内存中运行
    """

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class ConfigurationError(VolumeMonitorError):
    """必需配置缺失 (启动期致命错误)"""
    pass


class TelegramAuthError(VolumeMonitorError):
    """Telegram Bot 认证失败 (启动期致命错误)"""
    pass
