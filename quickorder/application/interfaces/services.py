"""Service interfaces (ports) for external collaborators other than storage."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from quickorder.domain.entities import IdentityClaims


class IIdentityVerifier(Protocol):
    """Turns what the client sends after sign-in into trusted identity claims."""

    async def verify(
        self, id_token: str | None = None, claims: dict[str, Any] | None = None
    ) -> IdentityClaims:
        """Return claims or raise AuthenticationException."""


class IChangeNotifier(Protocol):
    """Cross-process notification that a collection changed (wakes polling subscribers)."""

    async def publish(self, collection: str) -> None:
        """Announce a local write to the given collection."""
