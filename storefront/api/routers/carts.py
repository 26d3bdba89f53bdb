#storefront/api/routers/carts.py
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Response

from storefront.api.deps import (
    get_cart_service,
    get_checkout_service,
    get_guest_token,
    get_owner,
    http_error,
    require_user_id,
)
from storefront.domain.errors import StorefrontError
from storefront.domain.owner import CartOwner
from storefront.domain.schemas import CartOut, ItemIn, OrderOut, QuantityIn, TransferOut
from storefront.services.cart_service import CartService
from storefront.services.checkout_service import CheckoutService
from storefront.utils.settings import GUEST_CART_COOKIE, GUEST_CART_TTL_SECONDS

router = APIRouter(prefix="/cart", tags=["cart"])


def _remember_guest(response: Response, owner: CartOwner, cart: Dict[str, Any]) -> None:
    #hand a new guest token back as a cookie
    token = cart.get("guest_token")
    if owner.is_guest and token and token != owner.guest_token:
        response.set_cookie(
            GUEST_CART_COOKIE,
            token,
            max_age=GUEST_CART_TTL_SECONDS,
            httponly=True,
            samesite="lax",
        )


@router.get("", response_model=CartOut)
def get_cart(
    owner: CartOwner = Depends(get_owner),
    svc: CartService = Depends(get_cart_service),
):
    return svc.get_cart(owner)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    response: Response,
    owner: CartOwner = Depends(get_owner),
    svc: CartService = Depends(get_cart_service),
):
    try:
        cart = svc.add_item(owner, payload.product_id, payload.quantity)
    except StorefrontError as e:
        raise http_error(e)

    _remember_guest(response, owner, cart)
    return cart


@router.patch("/items/{item_id}", response_model=CartOut)
def update_item(
    item_id: int,
    payload: QuantityIn,
    owner: CartOwner = Depends(get_owner),
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.update_item_quantity(owner, item_id, payload.quantity)
    except StorefrontError as e:
        raise http_error(e)


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_item(
    item_id: int,
    owner: CartOwner = Depends(get_owner),
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.remove_item(owner, item_id)
    except StorefrontError as e:
        raise http_error(e)


@router.delete("", response_model=CartOut)
def clear_cart(
    owner: CartOwner = Depends(get_owner),
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.clear(owner)
    except StorefrontError as e:
        raise http_error(e)


@router.post("/checkout", response_model=OrderOut, status_code=201)
def checkout(
    payload: Dict[str, Any] | None = Body(default=None),
    owner: CartOwner = Depends(get_owner),
    svc: CheckoutService = Depends(get_checkout_service),
):
    """
    Places an order from the user's cart.
    The body is validated by the service so an anonymous caller gets 401
    before any 400.
    """
    try:
        return svc.checkout(owner, payload)
    except StorefrontError as e:
        raise http_error(e)


@router.post("/transfer", response_model=TransferOut)
def transfer_guest_cart(
    response: Response,
    user_id: int = Depends(require_user_id),
    guest_token: str | None = Depends(get_guest_token),
    svc: CartService = Depends(get_cart_service),
):
    try:
        cart = svc.transfer_guest_to_user(guest_token, user_id)
    except StorefrontError as e:
        raise http_error(e)

    #the guest token is dead either way
    response.delete_cookie(GUEST_CART_COOKIE)

    if cart is None:
        return {"message": "No guest cart items to transfer", "cart": None}
    return {"message": "Guest cart transferred successfully", "cart": cart}
