"""Per-tab storefront sessions: context, navigation, live data and the controller."""

from quickorder.application.session.context import (
    PaymentState,
    SessionContext,
    parse_role_preference,
)
from quickorder.application.session.controller import SessionController, SessionSnapshot
from quickorder.application.session.navigation import (
    SCREEN_TABLE,
    ScreenContext,
    UrlHistory,
    resolve_screen,
    store_id_from_url,
    with_store,
    without_store,
)
from quickorder.application.session.registry import (
    SessionRegistry,
    SessionServices,
    run_session_sweeper,
)
from quickorder.application.session.synchronizer import StoreDataSynchronizer

__all__ = [
    "PaymentState",
    "SCREEN_TABLE",
    "ScreenContext",
    "SessionContext",
    "SessionController",
    "SessionRegistry",
    "SessionServices",
    "SessionSnapshot",
    "StoreDataSynchronizer",
    "UrlHistory",
    "parse_role_preference",
    "resolve_screen",
    "run_session_sweeper",
    "store_id_from_url",
    "with_store",
    "without_store",
]
