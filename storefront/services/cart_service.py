from datetime import datetime, timezone, timedelta
from decimal import Decimal
from typing import Dict, Any, List
from uuid import uuid4

from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import (
    Conflict,
    InsufficientStock,
    NotFound,
    ValidationFailed,
)
from storefront.domain.owner import CartOwner
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.unit_of_work import UnitOfWork, storage_errors
from storefront.utils.settings import GUEST_CART_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")


def cart_totals(items: List[CartItemModel]) -> tuple[int, Decimal]:
    total_items = sum(i.quantity for i in items)
    total_amount = sum((i.price * i.quantity for i in items), Decimal("0.00"))
    return total_items, total_amount.quantize(CENT)


def empty_cart(owner: CartOwner | None = None) -> Dict[str, Any]:
    return {
        "cart_id": None,
        "user_id": owner.user_id if owner else None,
        "guest_token": None,
        "items": [],
        "total_items": 0,
        "total_amount": Decimal("0.00"),
        "expires_at": None,
    }


def cart_to_dict(cart: CartModel, items: List[CartItemModel]) -> Dict[str, Any]:
    #totals are always recomputed from the items, never stored
    total_items, total_amount = cart_totals(items)
    return {
        "cart_id": cart.id,
        "user_id": cart.user_id,
        "guest_token": cart.guest_token,
        "items": [
            {
                "id": i.id,
                "product_id": i.product_id,
                "quantity": i.quantity,
                "price": i.price,
                "name": i.name,
                "picture": i.picture,
            }
            for i in items
        ],
        "total_items": total_items,
        "total_amount": total_amount,
        "expires_at": cart.expires_at,
    }


class CartService:
    """
    Use cases for the cart domain.
    commands (add, update, remove, clear, transfer) change state
    query (get) read only
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    #query
    @storage_errors("read cart")
    def get_cart(self, owner: CartOwner | None) -> Dict[str, Any]:
        cart = self.repo.get_cart_for_owner(owner)

        #no cart yet is not an error
        if not cart:
            return empty_cart(owner)

        return self._to_dict(cart)

    #commands
    @storage_errors("add item")
    def add_item(self, owner: CartOwner, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity < 1:
            raise ValidationFailed("Quantity must be at least 1")

        product = self.products.get_product(product_id)
        if not product:
            raise NotFound("Product not found")

        if product.quantity < quantity:
            raise InsufficientStock("Not enough stock available", available=product.quantity)

        with UnitOfWork(self.db):
            cart = self.repo.get_cart_for_owner(owner) or self._create_cart(owner)

            existing_item = self.repo.get_cart_item(cart.id, product_id)

            if existing_item:
                logger.info(
                    f"Product {product_id} already in cart {cart.id}, raising quantity "
                    f"from {existing_item.quantity} to {existing_item.quantity + quantity}"
                )
                # price stays as captured on the first add
                existing_item.quantity += quantity
            else:
                logger.info(f"Adding product {product_id} to cart {cart.id}")
                self.repo.add_cart_item(
                    CartItemModel(
                        cart_id=cart.id,
                        product_id=product.id,
                        quantity=quantity,
                        price=product.price,
                        name=product.name,
                        picture=product.pictures[0] if product.pictures else None,
                    )
                )

            self._bump_version(cart)

        return self._to_dict(cart)

    @storage_errors("update item")
    def update_item_quantity(self, owner: CartOwner, item_id: int, quantity: int) -> Dict[str, Any]:
        if quantity < 1:
            raise ValidationFailed("Quantity must be at least 1")

        cart = self._require_cart(owner)

        item = self.repo.get_item(cart.id, item_id)
        if not item:
            raise NotFound("Item not found in cart")

        #checked against the live catalog, not the snapshot
        product = self.products.get_product(item.product_id)
        if not product:
            raise NotFound("Product no longer exists")

        if product.quantity < quantity:
            raise InsufficientStock("Not enough stock available", available=product.quantity)

        with UnitOfWork(self.db):
            logger.info(f"Cart {cart.id} item {item_id}: quantity {item.quantity} -> {quantity}")
            item.quantity = quantity
            self._bump_version(cart)

        return self._to_dict(cart)

    @storage_errors("remove item")
    def remove_item(self, owner: CartOwner, item_id: int) -> Dict[str, Any]:
        cart = self._require_cart(owner)

        item = self.repo.get_item(cart.id, item_id)
        if not item:
            raise NotFound("Item not found in cart")

        with UnitOfWork(self.db):
            logger.info(f"Removing item {item_id} (product {item.product_id}) from cart {cart.id}")
            self.repo.delete_cart_item(item)
            self._bump_version(cart)

        return self._to_dict(cart)

    @storage_errors("clear cart")
    def clear(self, owner: CartOwner) -> Dict[str, Any]:
        cart = self._require_cart(owner)

        with UnitOfWork(self.db):
            removed = self.repo.clear_items(cart.id)
            self._bump_version(cart)

        logger.info(f"Cart {cart.id} cleared, {removed} lines removed")
        return self._to_dict(cart)

    @storage_errors("transfer guest cart")
    def transfer_guest_to_user(self, guest_token: str | None, user_id: int) -> Dict[str, Any] | None:
        """
        Merges a guest cart into the user's cart after login.

        Returns None (no-op) when there is nothing to transfer; the user
        cart is not created in that case.
        """
        if not guest_token:
            return None

        guest_cart = self.repo.get_cart_by_token(guest_token)
        if not guest_cart:
            logger.info(f"No guest cart for token, nothing to transfer to user {user_id}")
            return None

        guest_items = self.repo.get_cart_items(guest_cart.id)
        if not guest_items:
            logger.info(f"Guest cart {guest_cart.id} is empty, nothing to transfer")
            return None

        with UnitOfWork(self.db):
            user_cart = self.repo.get_cart_by_user(user_id) or self._create_cart(CartOwner.user(user_id))

            for guest_item in guest_items:
                existing_item = self.repo.get_cart_item(user_cart.id, guest_item.product_id)

                if existing_item:
                    existing_item.quantity += guest_item.quantity
                else:
                    #guest snapshot is kept, no catalog lookup
                    self.repo.add_cart_item(
                        CartItemModel(
                            cart_id=user_cart.id,
                            product_id=guest_item.product_id,
                            quantity=guest_item.quantity,
                            price=guest_item.price,
                            name=guest_item.name,
                            picture=guest_item.picture,
                        )
                    )

            #deleting the row invalidates the token
            self.repo.delete_cart(guest_cart)
            self._bump_version(user_cart)

        logger.info(
            f"Guest cart {guest_cart.id} ({len(guest_items)} lines) merged into cart {user_cart.id} "
            f"of user {user_id}"
        )
        return self._to_dict(user_cart)

    @storage_errors("expire guest carts")
    def expire_guest_carts(self, now: datetime | None = None) -> int:
        now = now or datetime.now(timezone.utc)

        with UnitOfWork(self.db):
            carts = self.repo.get_expired_guest_carts(now)
            for cart in carts:
                self.repo.delete_cart(cart)

        logger.info(f"Expired {len(carts)} guest carts")
        return len(carts)

    #helpers
    def _to_dict(self, cart: CartModel) -> Dict[str, Any]:
        return cart_to_dict(cart, self.repo.get_cart_items(cart.id))

    def _require_cart(self, owner: CartOwner | None) -> CartModel:
        cart = self.repo.get_cart_for_owner(owner)
        if not cart:
            raise NotFound("Cart not found")
        return cart

    def _create_cart(self, owner: CartOwner) -> CartModel:
        now = datetime.now(timezone.utc)

        if owner.is_guest:
            # a fresh token, even if the caller sent a stale one
            cart = CartModel(
                guest_token=uuid4().hex,
                version=1,
                expires_at=now + timedelta(seconds=GUEST_CART_TTL_SECONDS),
                created_at=now,
                updated_at=now,
            )
        else:
            cart = CartModel(user_id=owner.user_id, version=1, created_at=now, updated_at=now)

        created = self.repo.create_cart(cart)
        logger.info(f"Created cart {created.id} for {owner}")
        return created

    def _bump_version(self, cart: CartModel) -> None:
        now = datetime.now(timezone.utc)
        new_data = {"version": cart.version + 1, "updated_at": now}

        #every touch extends the life of a guest cart
        if cart.user_id is None:
            new_data["expires_at"] = now + timedelta(seconds=GUEST_CART_TTL_SECONDS)

        # Optimistic locking
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data=new_data,
        )

        if rowcount == 0:
            raise Conflict("Cart was modified by another operation")
