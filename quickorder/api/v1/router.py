"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from quickorder.api.v1.dependencies.
"""

from fastapi import APIRouter

from quickorder.api.v1.endpoints import admin, health, sessions, stores
from quickorder.api.v1.endpoints import websocket as ws_endpoint

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(stores.router, prefix="/stores", tags=["stores"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(
    admin.router, prefix="/sessions/{session_id}/admin", tags=["admin"]
)
api_router.include_router(ws_endpoint.router, tags=["websocket"])
