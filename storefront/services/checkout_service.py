# storefront/services/checkout_service.py
from datetime import datetime, timezone
from typing import Any, Dict, List
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.order import OrderLineModel, OrderModel
from storefront.data.models.user import PaymentMethodModel, UserModel
from storefront.domain.errors import (
    Conflict,
    EmptyCart,
    InsufficientInventory,
    Internal,
    NoPaymentMethods,
    PaymentMethodNotFound,
    ProductUnavailable,
    StorefrontError,
    Unauthenticated,
    UserNotFound,
    ValidationFailed,
)
from storefront.domain.owner import CartOwner
from storefront.domain.schemas import CheckoutIn
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.cart_service import cart_totals
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import generate_order_number, order_to_dict
from storefront.services.unit_of_work import storage_errors
from storefront.utils.settings import CHECKOUT_LOCK_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_NUMBER_ATTEMPTS = 5


def _validation_message(exc: PydanticValidationError) -> str:
    err = exc.errors()[0]
    field = ".".join(str(p) for p in err["loc"])
    return f"{field}: {err['msg']}" if field else err["msg"]


class CheckoutService:
    """
    Cart -> order.

    1. Preconditions, checked in order, nothing is written until all pass:
       identity, payload, non-empty cart, user + payment method, stock.
    2. One transaction: conditional stock decrement per line, order row,
       cart emptied. Any failure rolls the whole thing back.
    3. Confirmation email is enqueued after commit; its failure never
       fails the checkout.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService,
        notification_service: NotificationService | None = None,
    ):
        self.db = db
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)
        self.orders = OrderRepo(db)
        self.lock_service = lock_service
        self.notification_service = notification_service or NotificationService()

    @storage_errors("process checkout")
    def checkout(self, owner: CartOwner | None, payload: Dict[str, Any]) -> Dict[str, Any]:
        if owner is None or owner.is_guest:
            raise Unauthenticated("You must be logged in to complete checkout", requires_auth=True)

        user_id = owner.user_id

        try:
            data = CheckoutIn.model_validate(payload or {})
        except PydanticValidationError as e:
            raise ValidationFailed(_validation_message(e))

        cart = self.carts.get_cart_by_user(user_id)
        if not cart:
            raise EmptyCart("Cart not found")

        items = self.carts.get_cart_items(cart.id)
        if not items:
            raise EmptyCart("Cart is empty")

        user = self.users.get_user(user_id)
        if not user:
            raise UserNotFound("User not found")

        method = self._payment_method(user_id, data.payment_method_id)

        self._verify_inventory(items)

        holder = uuid4().hex
        self._acquire_lock(user_id, holder)

        try:
            order = self._place_order(user, cart, items, method, data)
        finally:
            self._release_lock(user_id, holder)

        logger.info(
            f"Order {order['order_number']} placed by user {user_id}: "
            f"{len(order['items'])} lines, total {order['total_amount']}"
        )

        self._notify(user, order)
        return order

    #preconditions
    def _payment_method(self, user_id: int, payment_method_id: int) -> PaymentMethodModel:
        methods = self.users.get_payment_methods(user_id)

        if not methods:
            raise NoPaymentMethods(
                "No payment methods available. Please add a payment method before checkout."
            )

        for method in methods:
            if method.id == payment_method_id:
                return method

        raise PaymentMethodNotFound("Payment method not found")

    def _verify_inventory(self, items: List[CartItemModel]) -> None:
        #all or nothing: every line is checked before any stock moves
        for item in items:
            product = self.products.get_product(item.product_id, fresh=True)

            if not product:
                raise ProductUnavailable(f'Product "{item.name}" is no longer available')

            if product.quantity < item.quantity:
                raise InsufficientInventory(product.name, item.quantity, product.quantity)

    #transaction
    def _place_order(
        self,
        user: UserModel,
        cart: CartModel,
        items: List[CartItemModel],
        method: PaymentMethodModel,
        data: CheckoutIn,
    ) -> Dict[str, Any]:
        try:
            for item in items:
                # compare-and-decrement, a concurrent checkout may have won the stock
                if not self.products.decrement_stock(item.product_id, item.quantity):
                    product = self.products.get_product(item.product_id, fresh=True)
                    available = product.quantity if product else 0
                    logger.warning(
                        f"Stock for product {item.product_id} changed during checkout of cart "
                        f"{cart.id}: requested {item.quantity}, available {available}"
                    )
                    raise InsufficientInventory(item.name, item.quantity, available)

            _, total_amount = cart_totals(items)

            order = self.orders.add_order(
                OrderModel(
                    order_number=self._next_order_number(),
                    user_id=user.id,
                    status="processing",
                    items=[
                        {
                            "product_id": i.product_id,
                            "name": i.name,
                            "quantity": i.quantity,
                            "price": str(i.price),
                            "picture": i.picture,
                        }
                        for i in items
                    ],
                    lines=[OrderLineModel(product_id=i.product_id, quantity=i.quantity) for i in items],
                    total_amount=total_amount,
                    #never the token
                    payment_method={"type": method.type, "is_default": method.is_default},
                    delivery_address=data.delivery_address.model_dump(),
                    created_at=datetime.now(timezone.utc),
                )
            )

            self.carts.clear_items(cart.id)

            rowcount = self.carts.update_cart_version(
                cart_id=cart.id,
                old_version=cart.version,
                new_data={"version": cart.version + 1, "updated_at": datetime.now(timezone.utc)},
            )
            if rowcount == 0:
                raise Conflict("Cart was modified during checkout")

            self.db.commit()

        except StorefrontError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Checkout of cart {cart.id} failed: {e}")
            raise Internal("Failed to process checkout") from e

        return order_to_dict(order)

    def _next_order_number(self) -> str:
        for _ in range(ORDER_NUMBER_ATTEMPTS):
            number = generate_order_number()
            if not self.orders.order_number_exists(number):
                return number
            logger.warning(f"Order number {number} already taken, regenerating")

        raise Internal("Could not allocate an order number")

    #lock
    def _acquire_lock(self, user_id: int, holder: str) -> None:
        try:
            locked = self.lock_service.acquire_checkout_lock(
                user_id=user_id,
                holder=holder,
                ttl=CHECKOUT_LOCK_TTL_SECONDS,
            )
        except RedisError as e:
            logger.error(f"Checkout lock for user {user_id} unavailable: {e}")
            raise Internal("Checkout is temporarily unavailable") from e

        if not locked:
            raise Conflict("A checkout for this cart is already in progress")

    def _release_lock(self, user_id: int, holder: str) -> None:
        try:
            self.lock_service.release_checkout_lock(user_id, holder)
        except RedisError as e:
            # the lock expires on its own
            logger.warning(f"Failed to release checkout lock for user {user_id}: {e}")

    #notification
    def _notify(self, user: UserModel, order: Dict[str, Any]) -> None:
        try:
            self.notification_service.send_order_confirmation(user.email, order)
        except Exception as e:
            logger.error(f"Order confirmation for {order['order_number']} failed: {e}")
