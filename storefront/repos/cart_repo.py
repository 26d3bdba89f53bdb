# storefront/repos/cart_repo.py
from datetime import datetime, timezone
from typing import List

from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.owner import CartOwner


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart(self, cart_id: int) -> CartModel | None:
        return self.db.get(CartModel, cart_id)

    def get_cart_by_user(self, user_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.user_id == user_id)
        ).scalar_one_or_none()

    def get_cart_by_token(self, token: str, now: datetime | None = None) -> CartModel | None:
        # a guest cart past its expiry is gone even before the cleanup task runs
        now = now or datetime.now(timezone.utc)
        return self.db.execute(
            select(CartModel).where(
                CartModel.guest_token == token,
                CartModel.user_id.is_(None),
                or_(CartModel.expires_at.is_(None), CartModel.expires_at >= now),
            )
        ).scalar_one_or_none()

    def get_cart_for_owner(self, owner: CartOwner | None) -> CartModel | None:
        if owner is None:
            return None
        if not owner.is_guest:
            return self.get_cart_by_user(owner.user_id)
        if owner.guest_token:
            return self.get_cart_by_token(owner.guest_token)
        return None

    def create_cart(self, cart: CartModel) -> CartModel:
        # flush only, the caller commits together with the first item
        self.db.add(cart)
        self.db.flush()
        return cart

    def get_cart_items(self, cart_id: int) -> List[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .where(CartItemModel.cart_id == cart_id)
                .order_by(CartItemModel.id)
            ).scalars()
        )

    def get_cart_item(self, cart_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def get_item(self, cart_id: int, item_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.id == item_id,
            )
        ).scalar_one_or_none()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_item(self, item: CartItemModel) -> None:
        self.db.delete(item)
        self.db.flush()

    def clear_items(self, cart_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.cart_id == cart_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def update_cart_version(self, cart_id: int, old_version: int, new_data: dict) -> int:
        # optimistic locking: UPDATE carts SET version = 2 WHERE id = 1 AND version = 1
        result = self.db.execute(
            update(CartModel)
            .where(
                CartModel.id == cart_id,
                CartModel.version == old_version,
            )
            .values(**new_data)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def delete_cart(self, cart: CartModel) -> None:
        self.db.delete(cart)
        self.db.flush()

    def get_expired_guest_carts(self, now: datetime) -> List[CartModel]:
        return list(
            self.db.execute(
                select(CartModel).where(
                    CartModel.user_id.is_(None),
                    CartModel.expires_at.is_not(None),
                    CartModel.expires_at < now,
                )
            ).scalars()
        )

    def delete_items_for_product(self, product_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.product_id == product_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
