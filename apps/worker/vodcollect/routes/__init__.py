"""
HTTP routers
"""
from . import batch_delete, collect, health, schedule

__all__ = ["batch_delete", "collect", "health", "schedule"]
