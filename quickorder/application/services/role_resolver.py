"""Effective role resolution from identity claims, root allow-list and store ownership."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from quickorder.domain.entities import SessionUser, national_number
from quickorder.domain.enums import Role
from quickorder.shared.telemetry.tracing import add_span_attributes, traced

if TYPE_CHECKING:
    from quickorder.application.interfaces.repositories import IStoreRepository
    from quickorder.domain.entities import IdentityClaims

logger = logging.getLogger(__name__)


class RoleResolver:
    """Resolves root / seller / customer on every sign-in.

    The caller's role preference only decides whether elevation is attempted;
    the allow-list and the ownership lookup decide whether it is granted.
    """

    def __init__(
        self,
        store_repo: IStoreRepository,
        root_emails: Iterable[str],
        root_phones: Iterable[str],
    ) -> None:
        self._store_repo = store_repo
        self._root_emails = frozenset(e.strip().lower() for e in root_emails if e.strip())
        self._root_phones = frozenset(
            n for n in (national_number(p) for p in root_phones) if n
        )

    def is_root(self, email: str | None, phone: str | None) -> bool:
        """Whether email or phone (compared on its 10-digit national number) is allow-listed."""
        if email and email.strip().lower() in self._root_emails:
            return True
        phone_key = national_number(phone)
        return bool(phone_key and phone_key in self._root_phones)

    async def managed_store_ids(self, email: str | None, phone: str | None) -> tuple[str, ...]:
        """Ids of stores whose ownerEmail/ownerPhone match, sorted."""
        if not email and not phone:
            return ()
        stores = await self._store_repo.find_by_owner(email, phone)
        return tuple(sorted({s.store_id for s in stores}))

    @traced("role_resolver.resolve")
    async def resolve(self, claims: IdentityClaims, preference: Role | None) -> SessionUser:
        """Build the session user for a sign-in event."""
        requested = preference or Role.CUSTOMER
        role = Role.CUSTOMER
        managed: tuple[str, ...] = ()

        if requested.is_elevated:
            if self.is_root(claims.email, claims.phone_number):
                role = Role.ROOT
            else:
                managed = await self.managed_store_ids(claims.email, claims.phone_number)
                if managed:
                    role = Role.SELLER

        add_span_attributes(role=role.value, requested=requested.value)
        logger.info(
            "Resolved user %s as %s (requested %s, %d managed stores)",
            claims.uid,
            role.value,
            requested.value,
            len(managed),
        )
        return SessionUser.from_claims(claims, role, managed)

    async def authorize_store(self, user: SessionUser | None, store_id: str) -> bool:
        """Re-check, against current data, that the user may administer store_id.

        The session's cached role is not trusted on its own: root is re-checked
        against the allow-list and sellers against a fresh ownership lookup.
        """
        if user is None or not user.is_elevated:
            return False
        if self.is_root(user.email, user.phone_number):
            return True
        managed = await self.managed_store_ids(user.email, user.phone_number)
        return store_id in managed

    def authorize_root(self, user: SessionUser | None) -> bool:
        return bool(
            user is not None
            and user.role is Role.ROOT
            and self.is_root(user.email, user.phone_number)
        )
