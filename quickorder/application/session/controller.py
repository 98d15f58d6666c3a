"""Session controller: navigation, sign-in routing, checkout and store administration.

One controller per storefront session. Every public operation runs under the
session's lock, mutates the SessionContext, and notifies listeners (the
session's WebSocket) once it is done. Live product/order batches notify
listeners through the synchronizer.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from functools import wraps
from typing import TYPE_CHECKING, Any, TypeVar

from quickorder.application.services.order_lifecycle import allowed_actions, split_by_activity
from quickorder.application.services.upi_service import build_payment_link
from quickorder.application.session.navigation import (
    ScreenContext,
    resolve_screen,
    store_id_from_url,
    with_store,
    without_store,
)
from quickorder.application.use_cases.orders.place_order import ensure_cart_not_empty
from quickorder.domain.entities import LocalOrderEcho, unwrap
from quickorder.domain.enums import (
    LoginTarget,
    OrderAction,
    OrderActor,
    OrderStatus,
    PaymentRequestStatus,
    Role,
    Screen,
    View,
)
from quickorder.domain.exceptions import (
    AuthorizationException,
    BackendUnavailableException,
    LoginRequiredException,
    ResourceNotFoundException,
    StoreClosedException,
    StoreNotFoundException,
    ValidationException,
)

if TYPE_CHECKING:
    from quickorder.application.dtos.order import CartItem, PaymentIntent
    from quickorder.application.dtos.product import ProductDraft, ProductUpdate
    from quickorder.application.dtos.store import StoreCreate, StoreSettingsUpdate
    from quickorder.application.interfaces.repositories import IOrderRepository
    from quickorder.application.interfaces.services import IIdentityVerifier
    from quickorder.application.services.order_lifecycle import OrderLifecycleService
    from quickorder.application.services.role_resolver import RoleResolver
    from quickorder.application.session.context import SessionContext
    from quickorder.application.session.synchronizer import StoreDataSynchronizer
    from quickorder.application.use_cases.catalog import ProductService
    from quickorder.application.use_cases.orders import PlaceOrderUseCase
    from quickorder.application.use_cases.stores import StoreService
    from quickorder.domain.entities import (
        CustomerDetails,
        Order,
        Product,
        SessionUser,
        Store,
    )

logger = logging.getLogger(__name__)

T = TypeVar("T")
SessionListener = Callable[[], Awaitable[None]]


def _operation(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Serialize on the session lock, refresh last_seen, notify listeners afterwards."""

    @wraps(func)
    async def wrapper(self: SessionController, *args: Any, **kwargs: Any) -> T:
        async with self._lock:
            self.ctx.touch()
            try:
                return await func(self, *args, **kwargs)
            finally:
                await self._changed()

    return wrapper


@dataclass(frozen=True)
class SessionSnapshot:
    """Everything a client needs to render the session."""

    session_id: str
    url: str
    view: View
    screen: Screen
    store: Store | None
    user: SessionUser | None
    role_preference: Role | None
    login_target: LoginTarget | None
    pending_store_id: str | None
    products: list[Product]
    orders: list[Order]
    active_orders: list[Order]
    completed_orders: list[Order]
    order_history: list[Order]
    tracked_order: Order | None
    tracked_order_pending: bool
    payment_url: str
    payment_status: PaymentRequestStatus
    payment_intent: PaymentIntent | None
    awaiting_payment_confirmation: bool
    customer_actions: list[OrderAction]


class SessionController:
    def __init__(
        self,
        ctx: SessionContext,
        sync: StoreDataSynchronizer,
        store_service: StoreService,
        product_service: ProductService,
        place_order: PlaceOrderUseCase,
        lifecycle: OrderLifecycleService,
        role_resolver: RoleResolver,
        identity: IIdentityVerifier,
        order_repo: IOrderRepository,
    ) -> None:
        self.ctx = ctx
        self.sync = sync
        self.store_service = store_service
        self.product_service = product_service
        self.place_order_uc = place_order
        self.lifecycle = lifecycle
        self.role_resolver = role_resolver
        self.identity = identity
        self.order_repo = order_repo
        self._lock = asyncio.Lock()
        self._listeners: list[SessionListener] = []
        self.sync.add_listener(self._changed)

    # Listeners

    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def _changed(self) -> None:
        for listener in list(self._listeners):
            try:
                await listener()
            except Exception:
                logger.exception("Session %s listener failed", self.ctx.session_id)

    # Store context

    async def _load_store(self, store_id: str, target_view: View = View.CUSTOMER) -> None:
        """Resolve a store and enter target_view; any failure lands on the landing page.

        A missing or unreachable store is absorbed. A failed subscription is
        re-raised after the store context has been cleared.
        """
        try:
            store = await self.store_service.get_store(store_id)
        except StoreNotFoundException:
            logger.info("Store %s not found, showing landing", store_id)
            await self._clear_store_context(push_url=False)
            return
        except BackendUnavailableException as e:
            logger.warning("Store %s lookup failed: %s", store_id, e)
            await self._clear_store_context(push_url=False)
            return
        self.ctx.store = store
        self.ctx.view = target_view
        try:
            await self.sync.switch_store(store.store_id)
        except Exception:
            await self._clear_store_context(push_url=False)
            raise

    async def _clear_store_context(self, push_url: bool = True) -> None:
        self.ctx.clear_store()
        self.ctx.payment.reset()
        if push_url:
            self.ctx.history.push(without_store(self.ctx.url))
        await self.sync.switch_store(None)

    def _push_store_url(self, store_id: str) -> None:
        self.ctx.history.push(with_store(self.ctx.url, store_id))

    # Navigation

    @_operation
    async def initial_load(self, url: str) -> None:
        """First render: ?store= present enters the storefront, absent shows landing."""
        self.ctx.history.pop_to(url or "/")
        store_id = store_id_from_url(url)
        if store_id:
            await self._load_store(store_id)
        else:
            self.ctx.clear_store()

    @_operation
    async def pop_state(self, url: str) -> None:
        """Back/forward: follow the ?store= parameter of the url the tab moved to."""
        self.ctx.history.pop_to(url or "/")
        store_id = store_id_from_url(url)
        if store_id:
            if self.ctx.store is None or self.ctx.store.store_id != store_id:
                await self._load_store(store_id)
        elif self.ctx.view is not View.LANDING or self.ctx.store is not None:
            self.ctx.clear_store()
            self.ctx.payment.reset()
            await self.sync.switch_store(None)

    @_operation
    async def navigate_to_store(self, store_id: str) -> None:
        """A store was picked from search, trending shops or the root console."""
        user = self.ctx.user
        if user is not None and user.role is Role.ROOT and self.ctx.view is View.ADMIN:
            self._push_store_url(store_id)
            await self._load_store(store_id, View.ADMIN)
            return
        if user is None:
            self.ctx.pending_store_id = store_id
            self.ctx.login_target = LoginTarget.CUSTOMER
            return
        await self._enter_store_as_customer(store_id)

    async def _enter_store_as_customer(self, store_id: str) -> None:
        self._push_store_url(store_id)
        user = self.ctx.user
        if user is not None and user.is_elevated:
            self.ctx.user = user.demoted()
            logger.info("User %s demoted to customer to shop in %s", user.id, store_id)
        if user is not None:
            self.ctx.role_preference = Role.CUSTOMER
        await self._load_store(store_id)

    @_operation
    async def manage_store(self, store_id: str) -> None:
        """Open a store's admin dashboard (root console or a seller's store selector)."""
        user = self.ctx.user
        if user is None or not user.is_elevated:
            self.ctx.login_target = LoginTarget.ADMIN
            raise LoginRequiredException("Please sign in as a merchant to manage stores.")
        if not await self.role_resolver.authorize_store(user, store_id):
            raise AuthorizationException("store", "manage")
        self._push_store_url(store_id)
        await self._load_store(store_id, View.ADMIN)

    @_operation
    async def go_to_landing(self) -> None:
        """Logo click or 'Change Store': drop store context and any pending login."""
        self.ctx.login_target = None
        self.ctx.pending_store_id = None
        await self._clear_store_context()

    @_operation
    async def open_admin(self) -> None:
        """The landing page's merchant button."""
        user = self.ctx.user
        if user is None or not user.is_elevated:
            self.ctx.login_target = LoginTarget.ADMIN
            return
        await self._route_elevated(user)

    async def _route_elevated(self, user: SessionUser) -> None:
        if user.role is Role.ROOT:
            self.ctx.view = View.ADMIN
            return
        managed = user.managed_store_ids
        if len(managed) == 1:
            store_id = managed[0]
            if self.ctx.store is None or self.ctx.store.store_id != store_id:
                self._push_store_url(store_id)
                await self._load_store(store_id, View.ADMIN)
            else:
                self.ctx.view = View.ADMIN
            return
        # Several stores pick from the selector; none shows the empty state
        if self.ctx.store is not None:
            await self._clear_store_context()
        self.ctx.view = View.ADMIN

    # Authentication

    @_operation
    async def initiate_login(self, target: LoginTarget) -> None:
        self.ctx.login_target = target

    @_operation
    async def cancel_login(self) -> None:
        self.ctx.login_target = None
        self.ctx.pending_store_id = None

    @_operation
    async def sign_in(
        self, id_token: str | None = None, claims: dict[str, Any] | None = None
    ) -> SessionUser:
        """Identity sign-in event: resolve the role, then route per the login intent."""
        identity = await self.identity.verify(id_token=id_token, claims=claims)
        target = self.ctx.login_target
        user = await self.role_resolver.resolve(identity, self.ctx.requested_role())
        self.ctx.user = user
        self.ctx.login_target = None

        pending = self.ctx.pending_store_id
        if pending:
            self.ctx.pending_store_id = None
            self.ctx.role_preference = Role.CUSTOMER
            self.ctx.user = user.demoted()
            await self._enter_store_as_customer(pending)
            return self.ctx.user

        if target is LoginTarget.ADMIN:
            self.ctx.role_preference = user.role
            if user.is_elevated:
                await self._route_elevated(user)
            else:
                self.ctx.view = View.CUSTOMER if self.ctx.store is not None else View.LANDING
            return user

        if target is LoginTarget.CUSTOMER:
            self.ctx.role_preference = Role.CUSTOMER
            self.ctx.view = View.CUSTOMER if self.ctx.store is not None else View.LANDING
        return user

    @_operation
    async def sign_out(self) -> None:
        user = self.ctx.user
        self.ctx.user = None
        self.ctx.role_preference = None
        self.ctx.login_target = None
        self.ctx.pending_store_id = None
        await self.sync.clear_tracked()
        await self._clear_store_context()
        if user is not None:
            logger.info("User %s signed out of session %s", user.id, self.ctx.session_id)

    # Checkout and payment

    @_operation
    async def place_order(
        self, items: Sequence[CartItem], customer: CustomerDetails
    ) -> LocalOrderEcho:
        ensure_cart_not_empty(items)
        if self.ctx.store is None:
            raise ValidationException("Please select a store first.", field="store_id")
        store = await self.store_service.get_store(self.ctx.store.store_id)
        self.ctx.store = store
        if not store.accepting_orders:
            raise StoreClosedException(store.store_id)
        if self.ctx.user is None:
            self.ctx.login_target = LoginTarget.CUSTOMER
            raise LoginRequiredException("Please login to place your order.")
        echo = await self.place_order_uc.execute(
            store=store,
            catalog=self.sync.products,
            items=items,
            customer=customer,
            user_id=self.ctx.user.id,
        )
        self.ctx.payment.reset()
        await self.sync.track(echo)
        return echo

    def _require_tracked(self) -> Order:
        order = self.sync.tracked_order
        if order is None:
            raise ResourceNotFoundException("order", "current")
        return order

    @_operation
    async def request_payment(self, payer_vpa: str) -> PaymentIntent:
        """Pick the payer's UPI app from their handle and build the deep link."""
        order = self._require_tracked()
        store = self.ctx.store
        if store is None:
            raise ValidationException("Please select a store first.", field="store_id")
        payer = (payer_vpa or "").strip()
        if "@" not in payer:
            raise ValidationException(
                "Please enter a valid UPI ID (e.g., user@oksbi)", field="payer_vpa"
            )
        intent = build_payment_link(
            payer_vpa=payer,
            amount=order.total_amount,
            order_id=order.order_id,
            vpa=store.vpa,
            merchant_name=store.merchant_name,
        )
        self.ctx.payment.status = PaymentRequestStatus.SENT
        self.ctx.payment.intent = intent
        self.ctx.payment.awaiting_confirmation = False
        logger.info("Payment request for %s via %s", order.order_id, intent.app.value)
        return intent

    @_operation
    async def report_visibility(self, visible: bool = True) -> bool:
        """The tab became visible again; ask 'did you pay?' if a request is outstanding."""
        order = self.sync.tracked_order
        if (
            visible
            and order is not None
            and order.status is OrderStatus.PENDING
            and self.ctx.payment.status is PaymentRequestStatus.SENT
        ):
            self.ctx.payment.awaiting_confirmation = True
        return self.ctx.payment.awaiting_confirmation

    @_operation
    async def confirm_payment(self) -> Order | None:
        """Customer asserts the payment went through (never verified)."""
        order = self._require_tracked()
        if order.firestore_id:
            order = await self.order_repo.get_by_firestore_id(order.firestore_id)
            if order is None:
                raise ResourceNotFoundException("order", "current")
        updated = await self.lifecycle.apply(order, OrderAction.MARK_PAID, OrderActor.CUSTOMER)
        self.ctx.payment.awaiting_confirmation = False
        return updated

    @_operation
    async def start_new_order(self) -> None:
        self.ctx.payment.reset()
        await self.sync.clear_tracked()

    # Store administration

    async def _require_store_admin(self) -> Store:
        user = self.ctx.user
        if user is None or not user.is_elevated:
            raise LoginRequiredException("Please sign in as a merchant.")
        store = self.ctx.store
        if store is None:
            raise ValidationException("Please select or manage a store.", field="store_id")
        if not await self.role_resolver.authorize_store(user, store.store_id):
            raise AuthorizationException("store", "manage")
        return store

    def _require_root(self) -> SessionUser:
        user = self.ctx.user
        if user is None:
            raise LoginRequiredException("Please sign in as an administrator.")
        if not self.role_resolver.authorize_root(user):
            raise AuthorizationException("stores", "administer")
        return user

    @_operation
    async def add_product(self, draft: ProductDraft) -> Product:
        store = await self._require_store_admin()
        return await self.product_service.add_product(store.store_id, draft)

    @_operation
    async def update_product(self, product_id: str, update: ProductUpdate) -> Product:
        store = await self._require_store_admin()
        return await self.product_service.update_product(store.store_id, product_id, update)

    @_operation
    async def delete_product(self, product_id: str) -> None:
        store = await self._require_store_admin()
        await self.product_service.delete_product(store.store_id, product_id)

    async def _order_in_store(self, store: Store, firestore_id: str) -> Order:
        """Current stored copy; the live list may lag a poll behind."""
        order = await self.order_repo.get_by_firestore_id(firestore_id)
        if order is None or order.store_id != store.store_id:
            raise ResourceNotFoundException("order", firestore_id)
        return order

    @_operation
    async def transition_order(
        self,
        firestore_id: str,
        action: OrderAction,
        tracking_number: str | None = None,
    ) -> Order | None:
        store = await self._require_store_admin()
        order = await self._order_in_store(store, firestore_id)
        return await self.lifecycle.apply(order, action, OrderActor.MERCHANT, tracking_number)

    @_operation
    async def delete_order(self, firestore_id: str) -> None:
        store = await self._require_store_admin()
        order = await self._order_in_store(store, firestore_id)
        await self.lifecycle.purge(order)

    @_operation
    async def update_store_settings(self, update: StoreSettingsUpdate) -> Store:
        store = await self._require_store_admin()
        refreshed = await self.store_service.update_settings(store.store_id, update)
        self.ctx.store = refreshed
        return refreshed

    @_operation
    async def set_accepting_orders(self, accepting: bool) -> Store:
        store = await self._require_store_admin()
        refreshed = await self.store_service.set_accepting_orders(store.store_id, accepting)
        self.ctx.store = refreshed
        return refreshed

    @_operation
    async def list_all_stores(self) -> list[Store]:
        self._require_root()
        return await self.store_service.list_stores()

    @_operation
    async def create_store(self, data: StoreCreate) -> Store:
        self._require_root()
        return await self.store_service.create_store(data)

    @_operation
    async def delete_store(self, store_id: str) -> None:
        self._require_root()
        await self.store_service.delete_store(store_id)
        if self.ctx.store is not None and self.ctx.store.store_id == store_id:
            await self._clear_store_context()
            self.ctx.view = View.ADMIN

    @_operation
    async def managed_stores(self) -> list[Store]:
        """Stores the signed-in merchant may open (every store for root)."""
        user = self.ctx.user
        if user is None or not user.is_elevated:
            raise LoginRequiredException("Please sign in as a merchant.")
        if self.role_resolver.authorize_root(user):
            return await self.store_service.list_stores()
        ids = await self.role_resolver.managed_store_ids(user.email, user.phone_number)
        stores: list[Store] = []
        for store_id in ids:
            try:
                stores.append(await self.store_service.get_store(store_id))
            except StoreNotFoundException:
                continue
        return stores

    # Rendering

    def snapshot(self) -> SessionSnapshot:
        ctx = self.ctx
        tracked = self.sync.tracked
        tracked_order = unwrap(tracked)
        orders = list(self.sync.orders)
        active, completed = split_by_activity(orders)
        screen = resolve_screen(
            ScreenContext(
                view=ctx.view,
                user=ctx.user,
                store=ctx.store,
                has_tracked_order=tracked_order is not None,
                login_target=ctx.login_target,
            )
        )
        return SessionSnapshot(
            session_id=ctx.session_id,
            url=ctx.url,
            view=ctx.view,
            screen=screen,
            store=ctx.store,
            user=ctx.user,
            role_preference=ctx.role_preference,
            login_target=ctx.login_target,
            pending_store_id=ctx.pending_store_id,
            products=list(self.sync.products),
            orders=orders,
            active_orders=active,
            completed_orders=completed,
            order_history=self.sync.customer_history(ctx.user.id if ctx.user else None),
            tracked_order=tracked_order,
            tracked_order_pending=isinstance(tracked, LocalOrderEcho),
            payment_url=self.sync.payment_url,
            payment_status=ctx.payment.status,
            payment_intent=ctx.payment.intent,
            awaiting_payment_confirmation=ctx.payment.awaiting_confirmation,
            customer_actions=(
                allowed_actions(tracked_order.status, OrderActor.CUSTOMER)
                if tracked_order is not None
                else []
            ),
        )

    async def aclose(self) -> None:
        self._listeners.clear()
        await self.sync.aclose()
