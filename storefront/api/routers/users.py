from typing import List

from fastapi import APIRouter, Depends

from storefront.api.deps import get_user_id, get_user_service, http_error, require_user_id
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import UserCreate, UserRead, UserUpdate, PaymentMethodIn, PaymentMethodOut
from storefront.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=201)
def create_user(payload: UserCreate, svc: UserService = Depends(get_user_service)):
    try:
        return svc.create_user(payload)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/profile", response_model=UserRead)
def get_profile(
    actor_id: int = Depends(require_user_id),
    svc: UserService = Depends(get_user_service),
):
    try:
        return svc.get_profile(actor_id)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, svc: UserService = Depends(get_user_service)):
    try:
        return svc.get_user(user_id)
    except StorefrontError as e:
        raise http_error(e)


@router.patch("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    payload: UserUpdate,
    actor_id: int | None = Depends(get_user_id),
    svc: UserService = Depends(get_user_service),
):
    try:
        return svc.update_user(actor_id, user_id, payload)
    except StorefrontError as e:
        raise http_error(e)


@router.post("/{user_id}/payment-methods", response_model=PaymentMethodOut, status_code=201)
def add_payment_method(
    user_id: int,
    payload: PaymentMethodIn,
    actor_id: int = Depends(require_user_id),
    svc: UserService = Depends(get_user_service),
):
    try:
        return svc.add_payment_method(actor_id, user_id, payload)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/{user_id}/payment-methods", response_model=List[PaymentMethodOut])
def list_payment_methods(
    user_id: int,
    actor_id: int = Depends(require_user_id),
    svc: UserService = Depends(get_user_service),
):
    try:
        return svc.list_payment_methods(actor_id, user_id)
    except StorefrontError as e:
        raise http_error(e)
