# storefront/api/deps.py
from fastapi import Cookie, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.owner import CartOwner
from storefront.services.cart_service import CartService
from storefront.services.checkout_service import CheckoutService
from storefront.services.lock_service import LockService
from storefront.services.order_service import OrderService
from storefront.services.product_service import ProductService
from storefront.services.user_service import UserService
from storefront.utils.settings import GUEST_CART_COOKIE


def http_error(e: StorefrontError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.to_dict())


#identity
def get_user_id(x_user_id: int | None = Header(default=None)) -> int | None:
    # set by the auth gateway after the token was verified
    return x_user_id


def require_user_id(user_id: int | None = Depends(get_user_id)) -> int:
    if user_id is None:
        raise HTTPException(
            status_code=401,
            detail={"error": "Unauthenticated", "message": "Authentication required"},
        )
    return user_id


def get_guest_token(guest_token: str | None = Cookie(default=None, alias=GUEST_CART_COOKIE)) -> str | None:
    return guest_token


def get_owner(
    user_id: int | None = Depends(get_user_id),
    guest_token: str | None = Depends(get_guest_token),
) -> CartOwner:
    if user_id is not None:
        return CartOwner.user(user_id)
    return CartOwner.guest(guest_token)


#services
def get_cart_service(db: Session = Depends(get_db)) -> CartService:
    return CartService(db)


def get_lock_service() -> LockService:
    return LockService()


def get_checkout_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
) -> CheckoutService:
    return CheckoutService(db=db, lock_service=lock_service)


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(db)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)
