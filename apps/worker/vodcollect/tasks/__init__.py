"""
Long-running task tracking
"""
from .progress import TaskProgress, BatchDeleteProgress
from .registry import TaskRegistry

__all__ = [
    "TaskProgress",
    "BatchDeleteProgress",
    "TaskRegistry"
]
