# storefront/services/product_service.py
import math
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.data.models.user import UserModel
from storefront.domain.errors import Conflict, NotFound, Unauthenticated, Unauthorized, ValidationFailed
from storefront.domain.schemas import ProductCreate, ProductOut, ProductUpdate
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.unit_of_work import UnitOfWork, storage_errors
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CATALOG_ROLES = ("admin", "superadmin")
MAX_PAGE_SIZE = 100


class ProductService:
    """
    Catalog use cases. Only admins and superadmins own products, and only the
    owner may change or remove one.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepo(db)
        self.users = UserRepo(db)
        self.carts = CartRepo(db)
        self.orders = OrderRepo(db)

    def _catalog_actor(self, actor_id: int | None) -> UserModel:
        if actor_id is None:
            raise Unauthenticated("Authentication required")

        actor = self.users.get_user(actor_id)
        if not actor:
            raise Unauthenticated("User not found")

        if actor.role not in CATALOG_ROLES:
            raise Unauthorized("You are not authorized")
        return actor

    def _owned_product(self, actor: UserModel, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFound("Product not found")

        if product.user_id != actor.id:
            raise Unauthorized("You don't have permission to modify this product")
        return product

    def _check_name_free(self, name: str, product_id: int | None = None) -> None:
        existing = self.repo.get_product_by_name(name)
        if existing and existing.id != product_id:
            raise Conflict(f'Product "{name}" already exists')

    @storage_errors("create product")
    def create_product(self, actor_id: int | None, payload: ProductCreate) -> ProductOut:
        actor = self._catalog_actor(actor_id)
        self._check_name_free(payload.name)

        product = ProductModel(
            name=payload.name,
            price=payload.price,
            description=payload.description,
            quantity=payload.quantity,
            category=payload.category,
            pictures=list(payload.pictures),
            user_id=actor.id,
        )
        try:
            created = self.repo.create_product(product)
        except IntegrityError:
            self.db.rollback()
            raise Conflict(f'Product "{payload.name}" already exists')

        logger.info(f"User {actor.id} created product {created.id} ({created.name}), stock {created.quantity}")
        return ProductOut.model_validate(created)

    @storage_errors("fetch product")
    def get_product(self, product_id: int) -> ProductOut:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFound("Product not found")
        return ProductOut.model_validate(product)

    @storage_errors("list products")
    def list_products(self, category: str | None = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        if page < 1:
            raise ValidationFailed("page must be at least 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationFailed(f"limit must be between 1 and {MAX_PAGE_SIZE}")

        total = self.repo.count_products(category)
        products = self.repo.list_products(category, offset=(page - 1) * limit, limit=limit)

        return {
            "products": [ProductOut.model_validate(p) for p in products],
            "pagination": {
                "total": total,
                "page": page,
                "pages": math.ceil(total / limit),
            },
        }

    @storage_errors("count products")
    def count_products(self, category: str | None = None) -> int:
        return self.repo.count_products(category)

    @storage_errors("update product")
    def update_product(self, actor_id: int | None, product_id: int, payload: ProductUpdate) -> ProductOut:
        actor = self._catalog_actor(actor_id)
        product = self._owned_product(actor, product_id)

        changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
        if "name" in changes:
            self._check_name_free(changes["name"], product.id)

        with UnitOfWork(self.db):
            for field, value in changes.items():
                setattr(product, field, list(value) if field == "pictures" else value)

        logger.info(f"User {actor.id} updated product {product.id}: {sorted(changes)}")
        return ProductOut.model_validate(product)

    @storage_errors("replace product")
    def replace_product(self, actor_id: int | None, product_id: int, payload: ProductCreate) -> ProductOut:
        actor = self._catalog_actor(actor_id)
        product = self._owned_product(actor, product_id)
        self._check_name_free(payload.name, product.id)

        with UnitOfWork(self.db):
            product.name = payload.name
            product.price = payload.price
            product.description = payload.description
            product.quantity = payload.quantity
            product.category = payload.category
            product.pictures = list(payload.pictures)

        logger.info(f"User {actor.id} replaced product {product.id} ({product.name})")
        return ProductOut.model_validate(product)

    @storage_errors("delete product")
    def delete_product(self, actor_id: int | None, product_id: int) -> Dict[str, str]:
        actor = self._catalog_actor(actor_id)
        product = self._owned_product(actor, product_id)

        # orders keep pointing at the product row
        if self.orders.product_is_ordered(product.id):
            raise Conflict("Product is referenced by existing orders and cannot be deleted")

        with UnitOfWork(self.db):
            removed = self.carts.delete_items_for_product(product.id)
            self.repo.delete_product(product)

        logger.info(f"User {actor.id} deleted product {product_id}, dropped {removed} cart lines")
        return {"message": "Product deleted successfully"}
