"""Store administration for a signed-in merchant session.

Every route is authorized inside the session controller against the resolved
role and a fresh store-ownership lookup; the role preference cookie plays no part.
"""

from fastapi import APIRouter, Request

from quickorder.api.v1.dependencies import SessionDep
from quickorder.core.limiter import limit_create_store
from quickorder.schemas.order import OrderResponse, OrderTransitionRequest
from quickorder.schemas.product import (
    ProductCreateRequest,
    ProductResponse,
    ProductUpdateRequest,
)
from quickorder.schemas.store import (
    StoreAvailabilityRequest,
    StoreCreateRequest,
    StoreResponse,
    StoreSettingsRequest,
)

router = APIRouter()


@router.post("/products", response_model=ProductResponse, status_code=201)
async def add_product(body: ProductCreateRequest, session: SessionDep) -> ProductResponse:
    product = await session.add_product(body.to_dto())
    return ProductResponse.model_validate(product)


@router.patch("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str, body: ProductUpdateRequest, session: SessionDep
) -> ProductResponse:
    product = await session.update_product(product_id, body.to_dto())
    return ProductResponse.model_validate(product)


@router.delete("/products/{product_id}", status_code=204)
async def delete_product(product_id: str, session: SessionDep) -> None:
    await session.delete_product(product_id)


@router.post("/orders/{firestore_id}/transitions", response_model=OrderResponse)
async def transition_order(
    firestore_id: str, body: OrderTransitionRequest, session: SessionDep
) -> OrderResponse:
    """Apply a merchant action (confirm, ship, deliver, cancel, reopen, mark_paid)."""
    order = await session.transition_order(firestore_id, body.action, body.tracking_number)
    return OrderResponse.model_validate(order)


@router.delete("/orders/{firestore_id}", status_code=204)
async def delete_order(firestore_id: str, session: SessionDep) -> None:
    await session.delete_order(firestore_id)


@router.patch("/store", response_model=StoreResponse)
async def update_store_settings(body: StoreSettingsRequest, session: SessionDep) -> StoreResponse:
    store = await session.update_store_settings(body.to_dto())
    return StoreResponse.model_validate(store)


@router.put("/store/availability", response_model=StoreResponse)
async def set_accepting_orders(
    body: StoreAvailabilityRequest, session: SessionDep
) -> StoreResponse:
    """Pause or resume new orders ("temporarily closed")."""
    store = await session.set_accepting_orders(body.accepting_orders)
    return StoreResponse.model_validate(store)


@router.get("/managed-stores", response_model=list[StoreResponse])
async def managed_stores(session: SessionDep) -> list[StoreResponse]:
    stores = await session.managed_stores()
    return [StoreResponse.model_validate(s) for s in stores]


@router.post("/managed-stores/{store_id}/open", status_code=204)
async def manage_store(store_id: str, session: SessionDep) -> None:
    """Open one store's dashboard from the store selector or root console."""
    await session.manage_store(store_id)


@router.get("/stores", response_model=list[StoreResponse])
async def list_all_stores(session: SessionDep) -> list[StoreResponse]:
    stores = await session.list_all_stores()
    return [StoreResponse.model_validate(s) for s in stores]


@router.post("/stores", response_model=StoreResponse, status_code=201)
@limit_create_store
async def create_store(
    request: Request, body: StoreCreateRequest, session: SessionDep
) -> StoreResponse:
    store = await session.create_store(body.to_dto())
    return StoreResponse.model_validate(store)


@router.delete("/stores/{store_id}", status_code=204)
async def delete_store(store_id: str, session: SessionDep) -> None:
    """Delete a store with all of its products and orders."""
    await session.delete_store(store_id)
