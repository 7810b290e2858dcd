"""
Recurring collection scheduling
"""
from .service import SchedulerService

__all__ = ["SchedulerService"]
