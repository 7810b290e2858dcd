"""
In-memory progress records polled by the admin surface
"""
from pydantic import BaseModel

RUNNING = "running"
COMPLETED = "completed"
FAILED = "failed"
STOPPED = "stopped"
NOT_FOUND = "not_found"

TERMINAL_STATUSES = (COMPLETED, FAILED, STOPPED)


class TaskProgress(BaseModel):
    """Progress of one batch collection run"""
    status: str = RUNNING
    current_page: int = 0
    total_pages: int = 0
    success: int = 0
    failed: int = 0
    log: str = ""

    @classmethod
    def not_found(cls) -> "TaskProgress":
        return cls(status=NOT_FOUND, log="Task not found")


class BatchDeleteProgress(BaseModel):
    """Progress of one batch source-deletion run"""
    status: str = RUNNING
    source_name: str = ""
    processed: int = 0
    modified: int = 0
    total: int = 0
    log: str = ""

    @classmethod
    def not_found(cls) -> "BatchDeleteProgress":
        return cls(status=NOT_FOUND, log="Task not found")
