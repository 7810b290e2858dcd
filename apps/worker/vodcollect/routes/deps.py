"""
FastAPI dependencies resolving services from app.state
"""
from fastapi import Request

from ..scheduler import SchedulerService
from ..services import Services
from ..tasks.batch_delete import BatchDeleteService
from ..tasks.service import CollectionTaskService


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_collect_tasks(request: Request) -> CollectionTaskService:
    return get_services(request).collect_tasks


def get_scheduler(request: Request) -> SchedulerService:
    return get_services(request).scheduler


def get_batch_delete(request: Request) -> BatchDeleteService:
    return get_services(request).batch_delete
