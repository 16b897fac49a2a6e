"""
Application lifecycle event handlers.

Opens the configured key/value store and makes sure the super admin
bootstrap record exists before the first request.
"""

from typing import Callable

import structlog
from fastapi import FastAPI

from core.config import settings
from repositories.kv_store import get_store
from repositories.registry_repository import RegistryRepository
from repositories.workspace_repository import WorkspaceRepository
from services.audit_service import AuditService
from services.workspace_registry import WorkspaceRegistry

logger = structlog.get_logger(__name__)


def create_start_app_handler(app: FastAPI) -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        logger.info("app_starting", app=settings.APP_NAME, env=settings.APP_ENV)

        store = get_store()
        workspaces = WorkspaceRepository(store)
        registry_repo = RegistryRepository(store)
        registry = WorkspaceRegistry(registry_repo, workspaces, AuditService(workspaces, registry_repo))
        registry.get_super_admin_profile()

        logger.info(
            "app_started",
            storage_backend=settings.STORAGE_BACKEND,
            workspaces=len(registry.list()),
        )

    return start_app


def create_stop_app_handler(app: FastAPI) -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info("app_stopped", app=settings.APP_NAME)

    return stop_app
