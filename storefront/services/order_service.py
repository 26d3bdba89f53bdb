# storefront/services/order_service.py
import random
import time
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.domain.errors import NotFound, Unauthorized
from storefront.repos.order_repo import OrderRepo


def generate_order_number() -> str:
    """
    ORD-<last 6 digits of epoch millis>-<4 random digits>.

    Human facing only, uniqueness is enforced when the order is stored.
    """
    timestamp = str(int(time.time() * 1000))[-6:]
    suffix = f"{random.randint(0, 9999):04d}"
    return f"ORD-{timestamp}-{suffix}"


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "order_number": order.order_number,
        "user_id": order.user_id,
        "status": order.status,
        "items": [
            {**item, "price": Decimal(item["price"])}
            for item in order.items
        ],
        "total_amount": order.total_amount,
        "payment_method": dict(order.payment_method),
        "delivery_address": dict(order.delivery_address),
        "created_at": order.created_at,
    }


class OrderService:
    """
    Read side of orders; orders are written by the checkout.
    """

    def __init__(self, db: Session):
        self.repo = OrderRepo(db)

    def get_order(self, order_number: str, user_id: int) -> Dict[str, Any]:
        order = self.repo.get_order(order_number)

        if not order:
            raise NotFound("Order not found")

        if order.user_id != user_id:
            raise Unauthorized("No access to this order")

        return order_to_dict(order)

    def list_orders(self, user_id: int) -> List[Dict[str, Any]]:
        return [order_to_dict(o) for o in self.repo.list_orders(user_id)]
