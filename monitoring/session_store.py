"""
监控状态持久化

以 JSON 文档保存 chat_id -> 是否监控，进程重启后恢复监控会话。

文件格式:
```json
{"123456789": true, "-1001234567890": false}
```
"""
import json
import logging
import os
from pathlib import Path
from typing import Dict, Mapping

from core.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class SessionStateStore:
    """
    监控状态存储

    - load(): 启动时调用一次，文件不存在视为空
    - save(): 每次启停都写入完整映射 (整体覆盖)
    - 读写失败只记录日志，不影响监控运行

    使用示例:
    ```python
    store = SessionStateStore("monitoring_status.json")
    states = store.load()          # {123: True}
    store.save({123: False})
    ```
    """

    def __init__(self, path: str = "monitoring_status.json"):
        self.path = Path(path)

    def load(self) -> Dict[int, bool]:
        """读取全部会话状态，失败时返回空映射"""
        try:
            raw = self._read()
        except PersistenceError as e:
            logger.error(f"读取监控状态失败: {e}")
            return {}

        states: Dict[int, bool] = {}
        for key, value in raw.items():
            try:
                session_id = int(key)
            except (TypeError, ValueError):
                logger.warning(f"忽略无效的会话 ID: {key!r}")
                continue
            states[session_id] = bool(value)

        logger.info(f"已加载 {len(states)} 个会话状态 ({sum(states.values())} 个监控中)")
        return states

    def save(self, states: Mapping[int, bool]) -> bool:
        """写入完整会话状态，返回是否成功"""
        try:
            self._write({str(k): bool(v) for k, v in states.items()})
            return True
        except PersistenceError as e:
            logger.error(f"保存监控状态失败: {e}")
            return False

    def _read(self) -> dict:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"{self.path}: {e}", path=str(self.path))

        if not isinstance(data, dict):
            raise PersistenceError(f"{self.path}: 顶层应为对象", path=str(self.path))
        return data

    def _write(self, data: dict) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            if self.path.parent != Path("."):
                self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError(f"{self.path}: {e}", path=str(self.path))
