"""
Database package for the VOD collection worker
"""

from .session import Database
from .sources import SourcesRepository
from .bindings import BindingsRepository
from .videos import VideosRepository
from .schedule import ScheduleRepository

__all__ = [
    "Database",
    "SourcesRepository",
    "BindingsRepository",
    "VideosRepository",
    "ScheduleRepository"
]
