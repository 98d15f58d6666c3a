"""Mutable state of one storefront session (one browser tab)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from quickorder.application.dtos.order import PaymentIntent
from quickorder.application.session.navigation import UrlHistory
from quickorder.domain.entities import SessionUser, Store
from quickorder.domain.enums import LoginTarget, PaymentRequestStatus, Role, View
from quickorder.shared.utils.datetime import utc_now


def parse_role_preference(raw: str | None) -> Role | None:
    """Role from a stored preference string; unknown values are ignored."""
    if not raw:
        return None
    try:
        return Role(raw.strip().lower())
    except ValueError:
        return None


@dataclass
class PaymentState:
    """Progress of the UPI collect request for the tracked order."""

    status: PaymentRequestStatus = PaymentRequestStatus.IDLE
    intent: PaymentIntent | None = None
    awaiting_confirmation: bool = False

    def reset(self) -> None:
        self.status = PaymentRequestStatus.IDLE
        self.intent = None
        self.awaiting_confirmation = False


@dataclass
class SessionContext:
    """What the tab shows and who is using it.

    role_preference is a UX hint about the user's intent (shop or manage).
    It decides whether elevation is attempted at sign-in and is never used
    to authorize anything.
    """

    session_id: str
    history: UrlHistory = field(default_factory=UrlHistory)
    view: View = View.LANDING
    store: Store | None = None
    user: SessionUser | None = None
    role_preference: Role | None = None
    login_target: LoginTarget | None = None
    pending_store_id: str | None = None
    payment: PaymentState = field(default_factory=PaymentState)
    last_seen: datetime = field(default_factory=utc_now)

    @property
    def url(self) -> str:
        return self.history.current

    @property
    def effective_preference(self) -> Role:
        return self.role_preference or Role.CUSTOMER

    def requested_role(self) -> Role:
        """Role intent for the next sign-in, taking the open login prompt into account."""
        if self.login_target is LoginTarget.ADMIN:
            return Role.ROOT
        if self.login_target is LoginTarget.CUSTOMER:
            return Role.CUSTOMER
        return self.effective_preference

    def touch(self) -> None:
        self.last_seen = utc_now()

    def clear_store(self) -> None:
        self.store = None
        self.view = View.LANDING
