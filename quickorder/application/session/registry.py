"""In-process registry of live storefront sessions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from quickorder.application.session.context import SessionContext
from quickorder.application.session.controller import SessionController
from quickorder.application.session.navigation import UrlHistory
from quickorder.application.session.synchronizer import StoreDataSynchronizer
from quickorder.domain.enums import Role
from quickorder.domain.exceptions import SessionNotFoundException
from quickorder.shared.utils.datetime import utc_now
from quickorder.shared.utils.generators import generate_cuid

if TYPE_CHECKING:
    from quickorder.application.interfaces.repositories import (
        IOrderRepository,
        IProductRepository,
    )
    from quickorder.application.interfaces.services import IIdentityVerifier
    from quickorder.application.services.order_lifecycle import OrderLifecycleService
    from quickorder.application.services.role_resolver import RoleResolver
    from quickorder.application.use_cases.catalog import ProductService
    from quickorder.application.use_cases.orders import PlaceOrderUseCase
    from quickorder.application.use_cases.stores import StoreService

logger = logging.getLogger(__name__)

SessionClosedHook = Callable[[str, str], Awaitable[None]]


@dataclass(frozen=True)
class SessionServices:
    """Process-wide collaborators shared by every session."""

    product_repo: IProductRepository
    order_repo: IOrderRepository
    store_service: StoreService
    product_service: ProductService
    place_order: PlaceOrderUseCase
    lifecycle: OrderLifecycleService
    role_resolver: RoleResolver
    identity: IIdentityVerifier


class SessionRegistry:
    """Open sessions by id.

    on_closed is awaited with (session_id, reason) after a session is closed
    explicitly or swept for idleness, so attached sockets can be closed too.
    """

    def __init__(
        self,
        services: SessionServices,
        idle_seconds: int = 3600,
        on_closed: SessionClosedHook | None = None,
    ) -> None:
        self.services = services
        self.idle_timeout = timedelta(seconds=idle_seconds)
        self.on_closed = on_closed
        self._sessions: dict[str, SessionController] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    async def create(self, url: str = "/", role_preference: Role | None = None) -> SessionController:
        """Open a session for a tab at url and run its initial load."""
        session_id = generate_cuid()
        ctx = SessionContext(
            session_id=session_id,
            history=UrlHistory(url or "/"),
            role_preference=role_preference,
        )
        s = self.services
        controller = SessionController(
            ctx=ctx,
            sync=StoreDataSynchronizer(s.product_repo, s.order_repo),
            store_service=s.store_service,
            product_service=s.product_service,
            place_order=s.place_order,
            lifecycle=s.lifecycle,
            role_resolver=s.role_resolver,
            identity=s.identity,
            order_repo=s.order_repo,
        )
        async with self._lock:
            self._sessions[session_id] = controller
        await controller.initial_load(url)
        logger.info("Session %s opened at %s", session_id, url)
        return controller

    def get(self, session_id: str) -> SessionController:
        controller = self._sessions.get(session_id)
        if controller is None:
            raise SessionNotFoundException(session_id)
        return controller

    async def close(self, session_id: str) -> None:
        async with self._lock:
            controller = self._sessions.pop(session_id, None)
        if controller is None:
            raise SessionNotFoundException(session_id)
        await controller.aclose()
        await self._closed(session_id, "Session closed")
        logger.info("Session %s closed", session_id)

    async def _closed(self, session_id: str, reason: str) -> None:
        if self.on_closed is None:
            return
        try:
            await self.on_closed(session_id, reason)
        except Exception:
            logger.exception("Close hook failed for session %s", session_id)

    async def sweep(self) -> int:
        """Close sessions idle for longer than the timeout; returns how many."""
        cutoff = utc_now() - self.idle_timeout
        async with self._lock:
            stale = [
                sid for sid, c in self._sessions.items() if c.ctx.last_seen < cutoff
            ]
            controllers = [self._sessions.pop(sid) for sid in stale]
        for sid, controller in zip(stale, controllers):
            await controller.aclose()
            await self._closed(sid, "Session expired")
        if stale:
            logger.info("Closed %d idle sessions", len(stale))
        return len(stale)

    async def close_all(self) -> None:
        async with self._lock:
            controllers = list(self._sessions.values())
            self._sessions.clear()
        for controller in controllers:
            await controller.aclose()


async def run_session_sweeper(registry: SessionRegistry, interval: float = 60.0) -> None:
    """Periodically close idle sessions until cancelled."""
    while True:
        await asyncio.sleep(interval)
        try:
            await registry.sweep()
        except Exception:
            logger.exception("Session sweep failed")
