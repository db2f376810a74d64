"""
监控会话管理

维护 chat_id -> 是否监控 的映射，负责启停监控任务并持久化状态。
"""
import asyncio
import logging
from threading import Lock
from typing import Dict, List, Optional

from monitoring.session_store import SessionStateStore
from monitoring.volume_monitor import STOPPED_MESSAGE, AlertSink, MonitorSession, VolumeMonitor

logger = logging.getLogger(__name__)


class MonitorManager:
    """
    监控会话管理器

    - 每个会话最多一个运行中的监控任务
    - 每次启停都在锁内更新映射并写入完整快照
    - 命令处理只创建任务，不等待监控工作

    使用示例:
    ```python
    manager = MonitorManager(store, monitor, notifier)
    await manager.resume()            # 恢复上次运行中的会话
    await manager.start(chat_id)
    await manager.stop(chat_id)
    ```
    """

    def __init__(
        self,
        store: SessionStateStore,
        monitor: VolumeMonitor,
        sink: AlertSink,
    ):
        self.store = store
        self.monitor = monitor
        self.sink = sink

        self._states: Dict[int, bool] = {}
        self._sessions: Dict[int, MonitorSession] = {}
        self._tasks: Dict[int, asyncio.Task] = {}
        self._lock = Lock()

    # ==================== 查询 ====================

    def is_running(self, session_id: int) -> bool:
        with self._lock:
            return self._states.get(session_id, False)

    def snapshot(self) -> Dict[int, bool]:
        """全部已知会话的当前状态"""
        with self._lock:
            return dict(self._states)

    def session_info(self, session_id: int) -> Optional[MonitorSession]:
        """最近一次运行的会话句柄 (含统计)"""
        with self._lock:
            return self._sessions.get(session_id)

    @property
    def running_count(self) -> int:
        with self._lock:
            return sum(1 for v in self._states.values() if v)

    # ==================== 启停 ====================

    async def resume(self) -> List[int]:
        """加载持久化状态，恢复所有监控中的会话"""
        states = self.store.load()
        with self._lock:
            self._states.update(states)

        resumed = [sid for sid, enabled in states.items() if enabled]
        for session_id in resumed:
            self._spawn(session_id)

        if resumed:
            logger.info(f"✅ 已恢复 {len(resumed)} 个监控会话: {resumed}")
        return resumed

    async def start(self, session_id: int) -> bool:
        """开始监控，已在运行时返回 False"""
        with self._lock:
            if self._states.get(session_id, False):
                return False
            self._states[session_id] = True
            self.store.save(self._states)

        self._spawn(session_id)
        logger.info(f"会话 {session_id} 开始监控")
        return True

    async def stop(self, session_id: int) -> bool:
        """停止监控，未运行时返回 False (不写入状态)"""
        with self._lock:
            if not self._states.get(session_id, False):
                return False
            self._states[session_id] = False
            self.store.save(self._states)
            session = self._sessions.get(session_id)

        if session:
            session.stop()

        logger.info(f"会话 {session_id} 停止监控")
        await self.sink.send(session_id, STOPPED_MESSAGE)
        return True

    def _spawn(self, session_id: int) -> None:
        session = MonitorSession(session_id)
        task = asyncio.create_task(self.monitor.run(session))
        task.add_done_callback(lambda t: self._on_task_done(session, t))

        with self._lock:
            self._sessions[session_id] = session
            self._tasks[session_id] = task

    def _on_task_done(self, session: MonitorSession, task: asyncio.Task) -> None:
        """
        监控任务结束回调

        任务异常退出时把会话标记为已停止并持久化，之后可以重新 /monitor。
        旧句柄的任务结束不影响同一会话新启动的任务。
        """
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return

        session_id = session.session_id
        logger.error(f"监控任务异常退出 (会话 {session_id}): {exc!r}")
        session.stop()

        with self._lock:
            if self._sessions.get(session_id) is not session:
                return
            self._states[session_id] = False
            self._tasks.pop(session_id, None)
            self.store.save(self._states)

    async def shutdown(self) -> None:
        """进程退出时取消所有任务，持久化状态保持不变以便重启后恢复"""
        with self._lock:
            sessions = list(self._sessions.values())
            tasks = list(self._tasks.values())
            self._tasks.clear()

        for session in sessions:
            session.stop()
        for task in tasks:
            task.cancel()

        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("所有监控任务已关闭")
