"""
SQLAlchemy models for the VOD collection worker
"""
from .base import Base
from .sources import CollectionSource
from .bindings import Binding
from .videos import Video
from .schedule import ScheduledTaskConfig, TaskExecutionLog

# Export all models
__all__ = [
    "Base",
    "CollectionSource",
    "Binding",
    "Video",
    "ScheduledTaskConfig",
    "TaskExecutionLog"
]
