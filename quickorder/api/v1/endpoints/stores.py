"""Public store directory: search and lookup for the landing page."""

from fastapi import APIRouter, Query

from quickorder.api.v1.dependencies import StoreServiceDep
from quickorder.schemas.store import PublicStoreResponse

router = APIRouter()


@router.get("", response_model=list[PublicStoreResponse])
async def list_stores(
    store_service: StoreServiceDep,
    q: str | None = Query(default=None, max_length=64, description="Search by store name"),
) -> list[PublicStoreResponse]:
    stores = await store_service.list_stores(q)
    return [PublicStoreResponse.model_validate(s) for s in stores]


@router.get("/{store_id}", response_model=PublicStoreResponse)
async def get_store(store_id: str, store_service: StoreServiceDep) -> PublicStoreResponse:
    store = await store_service.get_store(store_id)
    return PublicStoreResponse.model_validate(store)
