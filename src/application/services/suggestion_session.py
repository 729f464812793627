"""SuggestionSession - 会话内的建议忽略记录

- 忽略记录以 (graph_id, suggestion_id) 为键，只在本会话内有效
- 被忽略的建议不会再对同一张图出现；其他图不受影响
- In-memory only：会话结束即丢弃
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

from src.domain.services.workflow_suggestion_engine import Suggestion


class SuggestionSession:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._dismissed: set[tuple[str, str]] = set()

    def dismiss(self, graph_id: str, suggestion_id: str) -> None:
        with self._lock:
            self._dismissed.add((graph_id, suggestion_id))

    def is_dismissed(self, graph_id: str, suggestion_id: str) -> bool:
        with self._lock:
            return (graph_id, suggestion_id) in self._dismissed

    def dismissed_ids(self, graph_id: str) -> set[str]:
        with self._lock:
            return {sid for gid, sid in self._dismissed if gid == graph_id}

    def filter(self, graph_id: str, suggestions: Iterable[Suggestion]) -> list[Suggestion]:
        dismissed = self.dismissed_ids(graph_id)
        return [s for s in suggestions if s.id not in dismissed]

    def reset(self, graph_id: str | None = None) -> None:
        """清除忽略记录（graph_id 为空时清除全部）"""
        with self._lock:
            if graph_id is None:
                self._dismissed.clear()
            else:
                self._dismissed = {key for key in self._dismissed if key[0] != graph_id}


class SuggestionSessionRegistry:
    """按会话 ID 管理 SuggestionSession（API 层每个编辑器会话一个）"""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, SuggestionSession] = {}

    def get(self, session_id: str) -> SuggestionSession:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = SuggestionSession()
                self._sessions[session_id] = session
            return session

    def close(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)
