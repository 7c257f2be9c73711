"""
Shared dependencies for the archive management API.

This module provides:
- PocketBase client management (only used with STORE_BACKEND=pocketbase)
- Config store, workflow queue and engine construction
- The ArchivePVService dependency used by the routers
"""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache

from archiving.admission import ArchivePVService, PolicyResolver
from archiving.interfaces import ConfigStore, WorkflowEngine
from archiving.stores import InMemoryConfigStore, PocketBaseConfigStore
from archiving.workflow import HttpWorkflowEngine, LoggingWorkflowEngine, WorkflowQueue
from pocketbase import PocketBase

from .settings import get_settings

logger = logging.getLogger(__name__)

# ========================================
# PocketBase Client
# ========================================


@lru_cache
def get_pb_client() -> PocketBase:
    """Shared PocketBase client (authenticated as admin on startup)."""
    return PocketBase(get_settings().pocketbase_url)


async def authenticate_pb() -> None:
    """Authenticate with PocketBase as admin."""
    settings = get_settings()
    try:
        await asyncio.to_thread(
            get_pb_client().collection("_superusers").auth_with_password,
            settings.pocketbase_admin_email,
            settings.pocketbase_admin_password,
        )
        logger.info("Successfully authenticated with PocketBase")
    except Exception as e:
        logger.error(f"Failed to authenticate with PocketBase: {e}")
        raise


# ========================================
# Admission Collaborators
# ========================================


def create_config_store() -> ConfigStore:
    """Build the config store selected by STORE_BACKEND."""
    settings = get_settings()
    if settings.store_backend == "pocketbase":
        return PocketBaseConfigStore(get_pb_client(), default_standard_fields=settings.standard_fields)
    return InMemoryConfigStore(standard_fields=settings.standard_fields)


def create_engine() -> WorkflowEngine:
    """Build the engine notifier; without ENGINE_URL triggers are only logged."""
    settings = get_settings()
    if settings.engine_url:
        return HttpWorkflowEngine(settings.engine_url, timeout_seconds=settings.engine_timeout_seconds)
    logger.warning("ENGINE_URL is not set; archive requests will stay pending")
    return LoggingWorkflowEngine()


@lru_cache
def get_archive_service() -> ArchivePVService:
    """FastAPI dependency returning the process-wide admission service.

    The workflow queue lives in this process, so the service is built once.
    """
    settings = get_settings()
    config_store = create_config_store()
    return ArchivePVService(
        config_store=config_store,
        workflow_queue=WorkflowQueue(config_store),
        engine=create_engine(),
        policy_resolver=PolicyResolver(
            default_monitor_sampling_period=settings.default_monitor_sampling_period,
            minimum_sampling_period=settings.minimum_sampling_period,
        ),
    )


__all__ = [
    "authenticate_pb",
    "create_config_store",
    "create_engine",
    "get_archive_service",
    "get_pb_client",
]
