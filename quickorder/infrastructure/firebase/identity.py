"""Firebase Authentication ID token verification (google-auth, no firebase-admin)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from google.auth import exceptions as google_auth_exceptions

from quickorder.domain.entities import IdentityClaims
from quickorder.domain.exceptions import (
    AuthenticationException,
    BackendUnavailableException,
)

logger = logging.getLogger(__name__)


def _verify_token(token: str, audience: str | None) -> dict[str, Any]:
    from google.auth.transport.requests import Request
    from google.oauth2 import id_token

    return id_token.verify_firebase_token(token, Request(), audience=audience)


def claims_from_token_payload(payload: dict[str, Any]) -> IdentityClaims:
    """Map Firebase ID token claims (or the same keys posted raw) to IdentityClaims."""
    uid = payload.get("user_id") or payload.get("sub") or payload.get("uid")
    if not uid:
        raise AuthenticationException("Identity claims missing user id")
    return IdentityClaims(
        uid=str(uid),
        display_name=payload.get("name") or payload.get("display_name") or None,
        email=payload.get("email") or None,
        phone_number=payload.get("phone_number") or None,
        photo_url=payload.get("picture") or payload.get("photo_url") or None,
    )


class FirebaseIdentityVerifier:
    """Implements IIdentityVerifier.

    allow_unverified_claims lets development clients post claims directly
    instead of a signed ID token. Signed tokens are only accepted when a
    project id is known, since it is the required audience.
    """

    def __init__(self, project_id: str | None, allow_unverified_claims: bool = False) -> None:
        self._project_id = project_id
        self._allow_unverified_claims = allow_unverified_claims

    async def verify(
        self, id_token: str | None = None, claims: dict[str, Any] | None = None
    ) -> IdentityClaims:
        if id_token:
            if not self._project_id:
                # google-auth skips the audience check when audience is None.
                logger.error("ID token rejected: no Firebase project id configured")
                raise AuthenticationException("ID token verification is not configured")
            try:
                payload = await asyncio.to_thread(_verify_token, id_token, self._project_id)
            except ValueError as e:
                logger.info("Rejected ID token: %s", e)
                raise AuthenticationException("Invalid or expired ID token") from e
            except google_auth_exceptions.TransportError as e:
                raise BackendUnavailableException("verify_id_token", str(e)) from e
            return claims_from_token_payload(payload)
        if claims is not None:
            if not self._allow_unverified_claims:
                raise AuthenticationException("Unverified claims are not accepted")
            return claims_from_token_payload(claims)
        raise AuthenticationException("An ID token is required")
