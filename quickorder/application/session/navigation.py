"""URL state and screen dispatch for a storefront session.

The ?store=<id> query parameter is the source of truth for which store a
session shows. The (role, view) table decides which screen the client renders.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from quickorder.domain.entities import SessionUser, Store
from quickorder.domain.enums import LoginTarget, Role, Screen, View

STORE_PARAM = "store"


def store_id_from_url(url: str | None) -> str | None:
    """Value of ?store=, or None when absent or blank."""
    if not url:
        return None
    for key, value in parse_qsl(urlsplit(url).query, keep_blank_values=True):
        if key == STORE_PARAM:
            return value.strip() or None
    return None


def _replace_query(url: str, store_id: str | None) -> str:
    parts = urlsplit(url or "/")
    params = [
        (k, v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
        if k != STORE_PARAM
    ]
    if store_id:
        params.append((STORE_PARAM, store_id))
    return urlunsplit(
        (parts.scheme, parts.netloc, parts.path or "/", urlencode(params), "")
    )


def with_store(url: str, store_id: str) -> str:
    return _replace_query(url, store_id)


def without_store(url: str) -> str:
    return _replace_query(url, None)


class UrlHistory:
    """Server-side mirror of the tab's history stack.

    push() is what the session does when it changes store context; pop_to()
    records a back/forward move the client reports.
    """

    def __init__(self, initial_url: str = "/") -> None:
        self._entries: list[str] = [initial_url or "/"]
        self._index = 0

    @property
    def current(self) -> str:
        return self._entries[self._index]

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def push(self, url: str) -> str:
        del self._entries[self._index + 1 :]
        self._entries.append(url)
        self._index = len(self._entries) - 1
        return url

    def pop_to(self, url: str) -> str:
        """Move to url: the nearest matching entry if known, else replace the current one."""
        for offset in (-1, 1):
            i = self._index + offset
            if 0 <= i < len(self._entries) and self._entries[i] == url:
                self._index = i
                return url
        if url in self._entries:
            self._index = self._entries.index(url)
        else:
            self._entries[self._index] = url
        return url


@dataclass(frozen=True)
class ScreenContext:
    view: View
    user: SessionUser | None
    store: Store | None
    has_tracked_order: bool
    login_target: LoginTarget | None


def _landing(ctx: ScreenContext) -> Screen:
    return Screen.LANDING


def _customer(ctx: ScreenContext) -> Screen:
    if ctx.store is None:
        return Screen.LANDING
    if ctx.has_tracked_order:
        return Screen.ORDER_SUMMARY
    return Screen.STOREFRONT


def _admin_login_required(ctx: ScreenContext) -> Screen:
    return Screen.ADMIN_LOGIN


def _root_admin(ctx: ScreenContext) -> Screen:
    return Screen.STORE_ADMIN if ctx.store is not None else Screen.ROOT_CONSOLE


def _seller_admin(ctx: ScreenContext) -> Screen:
    user = ctx.user
    if ctx.store is not None:
        if user is not None and user.can_manage(ctx.store.store_id):
            return Screen.STORE_ADMIN
        return Screen.ACCESS_DENIED
    if user is not None and user.managed_store_ids:
        return Screen.STORE_SELECTOR
    return Screen.NO_STORES


# None stands for "no signed-in user"
SCREEN_TABLE: dict[tuple[Role | None, View], Callable[[ScreenContext], Screen]] = {
    (None, View.LANDING): _landing,
    (Role.CUSTOMER, View.LANDING): _landing,
    (Role.SELLER, View.LANDING): _landing,
    (Role.ROOT, View.LANDING): _landing,
    (None, View.CUSTOMER): _customer,
    (Role.CUSTOMER, View.CUSTOMER): _customer,
    (Role.SELLER, View.CUSTOMER): _customer,
    (Role.ROOT, View.CUSTOMER): _customer,
    (None, View.ADMIN): _admin_login_required,
    (Role.CUSTOMER, View.ADMIN): _admin_login_required,
    (Role.SELLER, View.ADMIN): _seller_admin,
    (Role.ROOT, View.ADMIN): _root_admin,
}


def resolve_screen(ctx: ScreenContext) -> Screen:
    """Screen for the session; an open login prompt covers everything."""
    if ctx.login_target is LoginTarget.ADMIN:
        return Screen.ADMIN_LOGIN
    if ctx.login_target is LoginTarget.CUSTOMER:
        return Screen.LOGIN
    role = ctx.user.role if ctx.user is not None else None
    handler = SCREEN_TABLE.get((role, ctx.view))
    if handler is None:
        return Screen.SELECT_STORE
    return handler(ctx)
