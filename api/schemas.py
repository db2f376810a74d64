"""
API 数据模型定义 (Pydantic Schemas)
"""
from enum import Enum
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel


class SessionStatus(str, Enum):
    """监控会话状态"""
    STOPPED = "stopped"
    RUNNING = "running"


class SessionStatusResponse(BaseModel):
    """GET /sessions/{session_id} 响应"""
    session_id: int
    status: SessionStatus
    started_at: Optional[datetime] = None
    cycles_completed: int = 0
    alerts_sent: int = 0
    last_check_at: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "session_id": 123456789,
                "status": "running",
                "started_at": "2024-01-15T10:00:00",
                "cycles_completed": 4,
                "alerts_sent": 1,
                "last_check_at": "2024-01-15T10:21:30"
            }
        }


class SessionListResponse(BaseModel):
    """GET /sessions 响应"""
    sessions: List[SessionStatusResponse] = []
    running: int = 0


class CommandResponse(BaseModel):
    """POST /sessions/{session_id}/monitor|stop 响应"""
    success: bool
    message: str
    session_id: int
    status: SessionStatus


class HealthResponse(BaseModel):
    """GET /health 响应"""
    status: str = "healthy"
    version: str = "1.0.0"
    running_sessions: int = 0
    timestamp: datetime
