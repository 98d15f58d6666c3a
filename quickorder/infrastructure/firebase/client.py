"""Firestore client (REST-based, no firebase-admin).

Initialized at app startup using either FIREBASE_SERVICE_ACCOUNT_KEY (JSON string)
or FIREBASE_SERVICE_ACCOUNT_PATH (file path).
"""

import json
import logging
from pathlib import Path

from quickorder.core.config import get_settings
from quickorder.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    _get_credentials,
)

logger = logging.getLogger(__name__)

_firestore_client: FirestoreRESTClient | None = None


def _load_key_dict():
    """Return service account dict from env key or file path."""
    settings = get_settings()
    key_json = (
        settings.firebase_service_account_key.get_secret_value()
        if settings.firebase_service_account_key
        else None
    )
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    path = settings.firebase_service_account_path
    if path:
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_file():
            logger.warning(
                "FIREBASE_SERVICE_ACCOUNT_PATH set but file not found: %s (resolved: %s)",
                path,
                resolved,
            )
            return None
        with open(resolved, encoding="utf-8") as f:
            return json.load(f)
    return None


def init_firebase() -> FirestoreRESTClient:
    """Create the Firestore client (REST API + google-auth).

    Idempotent. Unlike optional integrations, the storefront cannot run
    without its database once the firestore backend is selected, so missing
    or malformed credentials raise ValueError.
    """
    global _firestore_client
    if _firestore_client is not None:
        return _firestore_client

    key_dict = _load_key_dict()
    if not key_dict:
        raise ValueError("Firestore backend selected but no service account credentials found")

    project_id = get_settings().firebase_project_id or key_dict.get("project_id")
    if not project_id:
        raise ValueError("Firebase service account JSON missing 'project_id'")

    cred = _get_credentials(key_dict)
    _firestore_client = FirestoreRESTClient(project_id, cred)
    logger.info("Firestore client initialized for project %s", project_id)
    return _firestore_client


def get_firestore_client() -> FirestoreRESTClient | None:
    """Return the Firestore client, or None if not initialized."""
    return _firestore_client


async def close_firebase() -> None:
    """Close the Firestore client's HTTP connection pool. Call from app shutdown."""
    global _firestore_client
    if _firestore_client is not None:
        await _firestore_client.aclose()
        _firestore_client = None
        logger.info("Firestore HTTP client closed")
