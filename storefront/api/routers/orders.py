# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends

from storefront.api.deps import get_order_service, http_error, require_user_id
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import OrderOut
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=List[OrderOut])
def list_orders(
    user_id: int = Depends(require_user_id),
    svc: OrderService = Depends(get_order_service),
):
    return svc.list_orders(user_id)


@router.get("/{order_number}", response_model=OrderOut)
def get_order(
    order_number: str,
    user_id: int = Depends(require_user_id),
    svc: OrderService = Depends(get_order_service),
):
    """
    Order details, only for the user who placed it.
    """
    try:
        return svc.get_order(order_number, user_id)
    except StorefrontError as e:
        raise http_error(e)
