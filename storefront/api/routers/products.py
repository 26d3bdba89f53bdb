# storefront/api/routers/products.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_product_service, get_user_id, http_error
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import (
    Category,
    ProductCount,
    ProductCreate,
    ProductOut,
    ProductPage,
    ProductUpdate,
)
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.post("", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreate,
    user_id: int | None = Depends(get_user_id),
    svc: ProductService = Depends(get_product_service),
):
    try:
        return svc.create_product(user_id, payload)
    except StorefrontError as e:
        raise http_error(e)


@router.get("", response_model=ProductPage)
def list_products(
    category: Optional[Category] = Query(default=None),
    page: int = Query(default=1),
    limit: int = Query(default=10),
    svc: ProductService = Depends(get_product_service),
):
    try:
        return svc.list_products(category, page=page, limit=limit)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/count", response_model=ProductCount)
def count_products(
    category: Optional[Category] = Query(default=None),
    svc: ProductService = Depends(get_product_service),
):
    try:
        return {"count": svc.count_products(category)}
    except StorefrontError as e:
        raise http_error(e)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, svc: ProductService = Depends(get_product_service)):
    try:
        return svc.get_product(product_id)
    except StorefrontError as e:
        raise http_error(e)


@router.patch("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    user_id: int | None = Depends(get_user_id),
    svc: ProductService = Depends(get_product_service),
):
    try:
        return svc.update_product(user_id, product_id, payload)
    except StorefrontError as e:
        raise http_error(e)


@router.put("/{product_id}", response_model=ProductOut)
def replace_product(
    product_id: int,
    payload: ProductCreate,
    user_id: int | None = Depends(get_user_id),
    svc: ProductService = Depends(get_product_service),
):
    try:
        return svc.replace_product(user_id, product_id, payload)
    except StorefrontError as e:
        raise http_error(e)


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    user_id: int | None = Depends(get_user_id),
    svc: ProductService = Depends(get_product_service),
):
    try:
        return svc.delete_product(user_id, product_id)
    except StorefrontError as e:
        raise http_error(e)
