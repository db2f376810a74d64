"""
监控模块

提供成交量异动监控、会话管理和警报推送。
"""
from monitoring.alerts import ALERT_RATIO_THRESHOLD, AlertEvent, evaluate_sample
from monitoring.console_sink import ConsoleSink
from monitoring.manager import MonitorManager
from monitoring.session_store import SessionStateStore
from monitoring.telegram_bot import TelegramCommandBot, parse_command
from monitoring.telegram_notifier import TelegramNotifier
from monitoring.volume_monitor import MonitorSession, VolumeMonitor

__all__ = [
    "ALERT_RATIO_THRESHOLD",
    "AlertEvent",
    "evaluate_sample",
    "ConsoleSink",
    "MonitorManager",
    "SessionStateStore",
    "TelegramCommandBot",
    "parse_command",
    "TelegramNotifier",
    "MonitorSession",
    "VolumeMonitor",
]
