"""Core module - 异常定义"""
from core.exceptions import (
    VolumeMonitorError,
    NetworkError,
    DecodeError,
    InsufficientDataError,
    PersistenceError,
    ConfigurationError,
    TelegramAuthError,
)

__all__ = [
    "VolumeMonitorError",
    "NetworkError",
    "DecodeError",
    "InsufficientDataError",
    "PersistenceError",
    "ConfigurationError",
    "TelegramAuthError",
]
