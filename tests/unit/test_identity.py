"""Tests for FirebaseIdentityVerifier (token audience, raw claims)."""

from unittest.mock import patch

import pytest

from quickorder.domain.exceptions import AuthenticationException
from quickorder.infrastructure.firebase.identity import FirebaseIdentityVerifier

_PAYLOAD = {"user_id": "u1", "email": "admin@example.com", "name": "Admin"}


async def test_token_without_project_id_is_rejected_before_verification() -> None:
    verifier = FirebaseIdentityVerifier(project_id=None)
    with patch(
        "quickorder.infrastructure.firebase.identity._verify_token", return_value=_PAYLOAD
    ) as verify_token:
        with pytest.raises(AuthenticationException):
            await verifier.verify(id_token="signed-elsewhere")
    verify_token.assert_not_called()


async def test_token_is_verified_against_project_audience() -> None:
    verifier = FirebaseIdentityVerifier(project_id="quickorder-prod")
    with patch(
        "quickorder.infrastructure.firebase.identity._verify_token", return_value=_PAYLOAD
    ) as verify_token:
        claims = await verifier.verify(id_token="t")
    verify_token.assert_called_once_with("t", "quickorder-prod")
    assert claims.uid == "u1"
    assert claims.email == "admin@example.com"


async def test_invalid_token_is_an_authentication_error() -> None:
    verifier = FirebaseIdentityVerifier(project_id="quickorder-prod")
    with patch(
        "quickorder.infrastructure.firebase.identity._verify_token",
        side_effect=ValueError("Token has wrong audience"),
    ):
        with pytest.raises(AuthenticationException):
            await verifier.verify(id_token="t")


async def test_raw_claims_need_development_mode() -> None:
    with pytest.raises(AuthenticationException):
        await FirebaseIdentityVerifier(project_id=None).verify(claims=_PAYLOAD)
    claims = await FirebaseIdentityVerifier(
        project_id=None, allow_unverified_claims=True
    ).verify(claims=_PAYLOAD)
    assert claims.display_name == "Admin"
