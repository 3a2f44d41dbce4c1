"""
Audit trail of changes made through the task API.

One JSON object per line, e.g.

    {"ts":"2024-05-01T10:00:00.123Z","action":"update","resource":"tasks",
     "resource_id":7,"actor":"hexlet@example.com","status":200,"request_id":"..."}

Files rotate at 10MB, five backups kept.
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

_MAX_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 5

ACTIONS = {"POST": "create", "PUT": "update", "PATCH": "update", "DELETE": "delete"}


def action_for(method: str, resource: Optional[str]) -> str:
    if resource == "login":
        return "login"
    return ACTIONS.get(method.upper(), method.lower())


class AuditLog:
    def __init__(self, path: Path, *, max_bytes: int = _MAX_BYTES, backup_count: int = _BACKUP_COUNT):
        self.path = path
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self._handler: Optional[logging.Handler] = None
        self._lock = threading.Lock()

    def _get_handler(self) -> logging.Handler:
        with self._lock:
            if self._handler is None:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                h = logging.handlers.RotatingFileHandler(
                    str(self.path),
                    maxBytes=self.max_bytes,
                    backupCount=self.backup_count,
                    encoding="utf-8",
                )
                h.setFormatter(logging.Formatter("%(message)s"))
                self._handler = h
            return self._handler

    def record(
        self,
        *,
        action: str,
        resource: Optional[str],
        resource_id: Optional[int],
        actor: Optional[str],
        status_code: Optional[int],
        request_id: Optional[str],
    ) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "action": action,
            "resource": resource,
            "resource_id": resource_id,
            "actor": actor,
            "status": status_code,
            "request_id": request_id,
        }
        line = json.dumps(entry, separators=(",", ":"), ensure_ascii=False)
        self._get_handler().handle(
            logging.LogRecord("task_manager.audit", logging.INFO, "", 0, line, (), None)
        )
        return entry

    def close(self) -> None:
        with self._lock:
            if self._handler is not None:
                self._handler.close()
                self._handler = None
