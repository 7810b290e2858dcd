"""
Task progress registry
Single lock-guarded map of task id -> (progress, display name, task handle)
"""
import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel

from .progress import RUNNING, STOPPED
from ..logging_config import get_logger

logger = get_logger(__name__)

P = TypeVar("P", bound=BaseModel)


@dataclass
class _Entry(Generic[P]):
    progress: P
    name: str
    handle: Optional[asyncio.Task] = None


class TaskRegistry(Generic[P]):
    """
    Registry of long-running tasks

    Every read-modify-write happens under one lock, so a progress writer and
    an external stop cannot lose each other's update. Once a task is stopped,
    later writes keep the stopped status and log line.
    """

    def __init__(self):
        self._entries: Dict[str, _Entry[P]] = {}
        self._lock = asyncio.Lock()

    async def get(self, task_id: str) -> Optional[P]:
        async with self._lock:
            entry = self._entries.get(task_id)
            return entry.progress.model_copy() if entry else None

    async def get_name(self, task_id: str) -> Optional[str]:
        async with self._lock:
            entry = self._entries.get(task_id)
            return entry.name if entry else None

    async def upsert(self, task_id: str, progress: P, name: str):
        """Store progress for a task, keeping any attached handle"""
        async with self._lock:
            entry = self._entries.get(task_id)
            if entry is None:
                self._entries[task_id] = _Entry(progress=progress.model_copy(), name=name)
                return

            if entry.progress.status == STOPPED and progress.status != STOPPED:
                progress = progress.model_copy(update={"status": STOPPED, "log": entry.progress.log})
            else:
                progress = progress.model_copy()

            entry.progress = progress
            entry.name = name

    async def attach_handle(self, task_id: str, handle: asyncio.Task):
        async with self._lock:
            entry = self._entries.get(task_id)
            if entry is not None:
                entry.handle = handle

    async def stop(self, task_id: str, message: str = "Task stopped manually") -> bool:
        """
        Mark a task stopped and cancel its handle

        The record stays so the last state remains pollable. Returns False
        for unknown task ids.
        """
        async with self._lock:
            entry = self._entries.get(task_id)
            if entry is None:
                return False

            if entry.handle is not None and not entry.handle.done():
                entry.handle.cancel()
            entry.handle = None
            entry.progress = entry.progress.model_copy(update={"status": STOPPED, "log": message})

        logger.info(f"Task {task_id} stopped", extra={"task_id": task_id})
        return True

    async def is_stopped(self, task_id: str) -> bool:
        async with self._lock:
            entry = self._entries.get(task_id)
            return entry is not None and entry.progress.status == STOPPED

    async def list_running(self) -> List[Dict[str, Any]]:
        """Running tasks as flat dicts for listing endpoints"""
        async with self._lock:
            return [
                {"task_id": task_id, "collection_name": entry.name, **entry.progress.model_dump()}
                for task_id, entry in self._entries.items()
                if entry.progress.status == RUNNING
            ]

    async def clear(self):
        async with self._lock:
            self._entries.clear()
