"""Presentation-layer dependency injection (composition root).

build_session_services() wires repositories and use cases over a document
store once at startup (see core.lifespan). Routes depend only on the
Depends() getters below, which read the wired objects from app.state.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request, Response

from quickorder.api.websocket import ConnectionManager
from quickorder.application.interfaces import IDocumentStore, IIdentityVerifier
from quickorder.application.services import OrderLifecycleService, RoleResolver
from quickorder.application.session import (
    SessionController,
    SessionRegistry,
    SessionServices,
    parse_role_preference,
)
from quickorder.application.use_cases.catalog import ProductService
from quickorder.application.use_cases.orders import PlaceOrderUseCase
from quickorder.application.use_cases.stores import StoreService
from quickorder.core.config import Settings, get_settings
from quickorder.domain.enums import Role
from quickorder.infrastructure.firebase.repositories import (
    FirestoreOrderRepository,
    FirestoreProductRepository,
    FirestoreStoreRepository,
)


def build_session_services(
    db: IDocumentStore, identity: IIdentityVerifier, settings: Settings
) -> SessionServices:
    """Repositories and use cases shared by every session."""
    store_repo = FirestoreStoreRepository(db)
    product_repo = FirestoreProductRepository(db)
    order_repo = FirestoreOrderRepository(db)
    return SessionServices(
        product_repo=product_repo,
        order_repo=order_repo,
        store_service=StoreService(store_repo, product_repo, order_repo),
        product_service=ProductService(product_repo),
        place_order=PlaceOrderUseCase(order_repo),
        lifecycle=OrderLifecycleService(order_repo),
        role_resolver=RoleResolver(
            store_repo,
            root_emails=settings.root_admin_email_list,
            root_phones=settings.root_admin_phone_list,
        ),
        identity=identity,
    )


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.session_registry


def get_ws_manager(request: Request) -> ConnectionManager:
    return request.app.state.ws_manager


def get_store_service(
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> StoreService:
    return registry.services.store_service


def get_session(
    session_id: str,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> SessionController:
    """Session from the path; SessionNotFoundException (404) when unknown or expired."""
    return registry.get(session_id)


def get_role_preference(request: Request) -> Role | None:
    """Role intent stored in the preference cookie (a UX hint only)."""
    return parse_role_preference(request.cookies.get(get_settings().role_preference_cookie))


def store_role_preference(response: Response, session: SessionController) -> None:
    """Mirror the session's role preference into the cookie (cleared when unset)."""
    cookie = get_settings().role_preference_cookie
    preference = session.ctx.role_preference
    if preference is None:
        response.delete_cookie(cookie)
    else:
        response.set_cookie(cookie, preference.value, httponly=True, samesite="lax")


RegistryDep = Annotated[SessionRegistry, Depends(get_registry)]
SessionDep = Annotated[SessionController, Depends(get_session)]
StoreServiceDep = Annotated[StoreService, Depends(get_store_service)]
ManagerDep = Annotated[ConnectionManager, Depends(get_ws_manager)]
