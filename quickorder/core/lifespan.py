"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (document store, identity, Redis
change notifications, session registry, WebSocket manager, telemetry).
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from quickorder.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


def _build_document_store(settings: Settings):
    """(document store, project id) for the configured backend."""
    if settings.database_backend == "firestore":
        from quickorder.infrastructure.firebase import init_firebase
        from quickorder.infrastructure.firebase.document_store import FirestoreDocumentStore

        client = init_firebase()
        store = FirestoreDocumentStore(
            client, poll_interval=settings.snapshot_poll_interval_seconds
        )
        return store, settings.firebase_project_id or client.project_id

    from quickorder.infrastructure.memory import MemoryDocumentStore

    return MemoryDocumentStore(), settings.firebase_project_id


async def _cancel(task: asyncio.Task | None) -> None:
    if task is None:
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: document store, identity verifier, session registry,
    WebSocket manager, Redis change notifications (firestore backend only),
    telemetry. Shutdown runs in reverse.
    """
    settings = get_settings()

    # ---- Startup ----
    from quickorder.api.v1.dependencies import build_session_services
    from quickorder.api.websocket import ConnectionManager
    from quickorder.application.session import SessionRegistry, run_session_sweeper
    from quickorder.infrastructure.firebase.identity import FirebaseIdentityVerifier

    document_store, project_id = _build_document_store(settings)
    app.state.document_store = document_store
    identity = FirebaseIdentityVerifier(
        project_id, allow_unverified_claims=settings.identity_allow_unverified_claims
    )
    if settings.identity_allow_unverified_claims:
        logger.warning("Unverified identity claims are accepted; do not use in production")
    if not project_id:
        logger.warning("FIREBASE_PROJECT_ID is not set; ID token sign-in is disabled")

    services = build_session_services(document_store, identity, settings)
    ws_manager = ConnectionManager()
    app.state.ws_manager = ws_manager
    registry = SessionRegistry(
        services,
        idle_seconds=settings.session_idle_seconds,
        on_closed=ws_manager.close_session,
    )
    app.state.session_registry = registry
    app.state.session_sweeper_task = asyncio.create_task(
        run_session_sweeper(registry, interval=min(60.0, settings.session_idle_seconds))
    )

    app.state.change_publisher = None
    app.state.change_listener_task = None
    if settings.redis_enabled and settings.database_backend == "firestore":
        from quickorder.infrastructure.messaging import (
            CollectionChangePublisher,
            run_change_listener,
        )

        publisher = CollectionChangePublisher()
        await publisher.connect()
        if publisher.is_available():
            document_store.set_notifier(publisher)
            app.state.change_publisher = publisher
            app.state.change_listener_task = asyncio.create_task(
                run_change_listener(document_store, publisher)
            )

    app.state.tracing = None
    if settings.telemetry_enabled:
        from quickorder.shared.telemetry import StorefrontTracing

        app.state.tracing = StorefrontTracing(settings)
        app.state.tracing.start()

    logger.info("Started with %s document store", settings.database_backend)

    yield

    # ---- Shutdown ----
    await _cancel(app.state.session_sweeper_task)
    await registry.close_all()
    logger.info("Sessions closed")

    await _cancel(app.state.change_listener_task)
    if app.state.change_publisher is not None:
        document_store.set_notifier(None)
        await app.state.change_publisher.disconnect()
        logger.info("Change publisher disconnected")

    await document_store.aclose()
    if settings.database_backend == "firestore":
        from quickorder.infrastructure.firebase import close_firebase

        await close_firebase()

    if app.state.tracing is not None:
        app.state.tracing.stop()
