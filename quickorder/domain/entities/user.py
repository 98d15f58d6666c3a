"""Session user and identity claims.

A SessionUser is transient: it is rebuilt on every sign-in event from the
identity provider's claims plus a role resolved against the root allow-list
and store ownership.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from quickorder.domain.enums import Role

_NON_DIGITS = re.compile(r"\D")
NATIONAL_NUMBER_LENGTH = 10


def normalize_phone_digits(phone: str | None) -> str | None:
    """Strip everything but digits. Returns None for empty input."""
    if not phone:
        return None
    digits = _NON_DIGITS.sub("", phone)
    return digits or None


def national_number(phone: str | None) -> str | None:
    """Last 10 digits of a phone number (drops a +91 style country code)."""
    digits = normalize_phone_digits(phone)
    if not digits:
        return None
    return digits[-NATIONAL_NUMBER_LENGTH:]


@dataclass(frozen=True)
class IdentityClaims:
    """Claims delivered by the identity provider on sign-in."""

    uid: str
    display_name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    photo_url: str | None = None


@dataclass(frozen=True)
class SessionUser:
    id: str
    name: str
    role: Role
    email: str | None = None
    phone_number: str | None = None
    managed_store_ids: tuple[str, ...] = ()
    avatar: str | None = None

    @classmethod
    def from_claims(
        cls,
        claims: IdentityClaims,
        role: Role,
        managed_store_ids: tuple[str, ...] = (),
    ) -> SessionUser:
        return cls(
            id=claims.uid,
            name=claims.display_name or "User",
            role=role,
            email=claims.email or None,
            phone_number=claims.phone_number or None,
            managed_store_ids=managed_store_ids,
            avatar=claims.photo_url or None,
        )

    @property
    def is_elevated(self) -> bool:
        return self.role.is_elevated

    def demoted(self) -> SessionUser:
        """Copy of this user acting as a customer (managed stores are kept)."""
        if self.role is Role.CUSTOMER:
            return self
        return replace(self, role=Role.CUSTOMER)

    def can_manage(self, store_id: str) -> bool:
        """Root manages every store; a seller only the stores matched to them."""
        if self.role is Role.ROOT:
            return True
        return self.role is Role.SELLER and store_id in self.managed_store_ids
