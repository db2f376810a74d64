"""
FastAPI 路由定义 - 监控会话的 HTTP 控制接口

与 Telegram 命令共用同一个 MonitorManager，session_id 即 chat_id。
"""
from datetime import datetime
from fastapi import APIRouter, HTTPException, Request

from api.schemas import (
    SessionStatus, SessionStatusResponse, SessionListResponse,
    CommandResponse, HealthResponse,
)
from monitoring.manager import MonitorManager
from monitoring.volume_monitor import STARTED_MESSAGE, STOPPED_MESSAGE


router = APIRouter(prefix="/api/v1", tags=["Monitoring"])


def get_manager(request: Request) -> MonitorManager:
    """从应用状态获取会话管理器"""
    manager = getattr(request.app.state, "manager", None)
    if manager is None:
        raise HTTPException(status_code=503, detail="监控服务未就绪")
    return manager


def _status_of(manager: MonitorManager, session_id: int) -> SessionStatusResponse:
    running = manager.is_running(session_id)
    info = manager.session_info(session_id)

    response = SessionStatusResponse(
        session_id=session_id,
        status=SessionStatus.RUNNING if running else SessionStatus.STOPPED,
    )
    if info is not None:
        response.started_at = info.started_at
        response.cycles_completed = info.cycles_completed
        response.alerts_sent = info.alerts_sent
        response.last_check_at = info.last_check_at
    return response


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """健康检查"""
    manager = get_manager(request)
    return HealthResponse(
        status="healthy",
        running_sessions=manager.running_count,
        timestamp=datetime.now()
    )


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions(request: Request):
    """列出所有已知会话"""
    manager = get_manager(request)
    states = manager.snapshot()
    sessions = [_status_of(manager, sid) for sid in sorted(states)]
    return SessionListResponse(
        sessions=sessions,
        running=sum(1 for s in sessions if s.status == SessionStatus.RUNNING)
    )


@router.get("/sessions/{session_id}", response_model=SessionStatusResponse)
async def get_session(session_id: int, request: Request):
    """
    获取会话状态

    返回：
    - 运行状态
    - 已完成扫描周期数
    - 已发送警报数
    """
    return _status_of(get_manager(request), session_id)


@router.post("/sessions/{session_id}/monitor", response_model=CommandResponse)
async def start_monitoring(session_id: int, request: Request):
    """开始监控，已在运行时返回 409"""
    manager = get_manager(request)
    if not await manager.start(session_id):
        raise HTTPException(status_code=409, detail="Monitoring is already running!")

    return CommandResponse(
        success=True,
        message=STARTED_MESSAGE,
        session_id=session_id,
        status=SessionStatus.RUNNING
    )


@router.post("/sessions/{session_id}/stop", response_model=CommandResponse)
async def stop_monitoring(session_id: int, request: Request):
    """停止监控，未运行时返回 409"""
    manager = get_manager(request)
    if not await manager.stop(session_id):
        raise HTTPException(status_code=409, detail="Monitoring is not running!")

    return CommandResponse(
        success=True,
        message=STOPPED_MESSAGE,
        session_id=session_id,
        status=SessionStatus.STOPPED
    )
