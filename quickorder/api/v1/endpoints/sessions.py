"""Storefront session API: navigation, sign-in and checkout for one browser tab.

Each mutating route returns the full session view, the same payload the
session's WebSocket receives.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response

from quickorder.api.v1.dependencies import (
    ManagerDep,
    RegistryDep,
    SessionDep,
    get_role_preference,
    store_role_preference,
)
from quickorder.api.v1.endpoints.websocket import attach_push
from quickorder.application.session import SessionController
from quickorder.core.limiter import limit_checkout, limit_sign_in
from quickorder.domain.enums import Role
from quickorder.schemas.order import (
    CheckoutRequest,
    OrderResponse,
    PaymentIntentResponse,
    PaymentRequestBody,
    PlacedOrderResponse,
    VisibilityRequest,
    VisibilityResponse,
)
from quickorder.schemas.session import (
    LoginPromptRequest,
    NavigateRequest,
    SessionCreateRequest,
    SessionResponse,
    SignInRequest,
    UrlRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _view(session: SessionController) -> SessionResponse:
    return SessionResponse.model_validate(session.snapshot())


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(
    body: SessionCreateRequest,
    response: Response,
    registry: RegistryDep,
    manager: ManagerDep,
    role_preference: Role | None = Depends(get_role_preference),
) -> SessionResponse:
    """Open a session for a tab at the given URL (initial load)."""
    session = await registry.create(body.url, role_preference)
    attach_push(session, manager)
    store_role_preference(response, session)
    return _view(session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session_view(session: SessionDep) -> SessionResponse:
    session.ctx.touch()
    return _view(session)


@router.delete("/{session_id}", status_code=204)
async def close_session(session_id: str, registry: RegistryDep) -> None:
    """Close the session; its sockets are closed through the registry hook."""
    await registry.close(session_id)


@router.post("/{session_id}/history", response_model=SessionResponse)
async def pop_state(body: UrlRequest, session: SessionDep) -> SessionResponse:
    """Back/forward navigation reported by the client."""
    await session.pop_state(body.url)
    return _view(session)


@router.post("/{session_id}/navigate", response_model=SessionResponse)
async def navigate_to_store(
    body: NavigateRequest, session: SessionDep, response: Response
) -> SessionResponse:
    await session.navigate_to_store(body.store_id)
    store_role_preference(response, session)
    return _view(session)


@router.post("/{session_id}/landing", response_model=SessionResponse)
async def go_to_landing(session: SessionDep) -> SessionResponse:
    await session.go_to_landing()
    return _view(session)


@router.post("/{session_id}/admin", response_model=SessionResponse)
async def open_admin(session: SessionDep) -> SessionResponse:
    """Landing page merchant button."""
    await session.open_admin()
    return _view(session)


@router.post("/{session_id}/login", response_model=SessionResponse)
async def initiate_login(body: LoginPromptRequest, session: SessionDep) -> SessionResponse:
    await session.initiate_login(body.target)
    return _view(session)


@router.post("/{session_id}/login/cancel", response_model=SessionResponse)
async def cancel_login(session: SessionDep) -> SessionResponse:
    await session.cancel_login()
    return _view(session)


@router.post("/{session_id}/sign-in", response_model=SessionResponse)
@limit_sign_in
async def sign_in(
    request: Request,
    body: SignInRequest,
    session: SessionDep,
    response: Response,
) -> SessionResponse:
    await session.sign_in(id_token=body.id_token, claims=body.claims)
    store_role_preference(response, session)
    return _view(session)


@router.post("/{session_id}/sign-out", response_model=SessionResponse)
async def sign_out(session: SessionDep, response: Response) -> SessionResponse:
    await session.sign_out()
    store_role_preference(response, session)
    return _view(session)


@router.post("/{session_id}/orders", response_model=PlacedOrderResponse, status_code=201)
@limit_checkout
async def place_order(
    request: Request,
    body: CheckoutRequest,
    session: SessionDep,
) -> PlacedOrderResponse:
    """Checkout the cart in the session's active store."""
    echo = await session.place_order(body.cart_items(), body.customer.to_domain())
    return PlacedOrderResponse(
        order=OrderResponse.model_validate(echo.order),
        payment_url=echo.payment_url,
    )


@router.post(
    "/{session_id}/orders/current/payment-request",
    response_model=PaymentIntentResponse,
)
async def request_payment(body: PaymentRequestBody, session: SessionDep) -> PaymentIntentResponse:
    intent = await session.request_payment(body.payer_vpa)
    return PaymentIntentResponse.model_validate(intent)


@router.post("/{session_id}/orders/current/visibility", response_model=VisibilityResponse)
async def report_visibility(body: VisibilityRequest, session: SessionDep) -> VisibilityResponse:
    """The tab regained focus after the UPI app was opened."""
    awaiting = await session.report_visibility(body.visible)
    return VisibilityResponse(awaiting_payment_confirmation=awaiting)


@router.post("/{session_id}/orders/current/confirm-payment", response_model=SessionResponse)
async def confirm_payment(session: SessionDep) -> SessionResponse:
    await session.confirm_payment()
    return _view(session)


@router.delete("/{session_id}/orders/current", response_model=SessionResponse)
async def start_new_order(session: SessionDep) -> SessionResponse:
    await session.start_new_order()
    return _view(session)
