# storefront/repos/product_repo.py
from typing import List

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel


class ProductRepo:
    """Catalog store."""

    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int, fresh: bool = False) -> ProductModel | None:
        # fresh=True re-reads the row instead of trusting the identity map
        return self.db.get(ProductModel, product_id, populate_existing=fresh)

    def get_product_by_name(self, name: str) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(ProductModel.name == name)
        ).scalar_one_or_none()

    def _filtered(self, stmt, category: str | None):
        if category:
            stmt = stmt.where(ProductModel.category == category)
        return stmt

    def list_products(
        self,
        category: str | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> List[ProductModel]:
        stmt = self._filtered(select(ProductModel).order_by(ProductModel.id), category)
        stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.db.execute(stmt).scalars())

    def count_products(self, category: str | None = None) -> int:
        stmt = self._filtered(select(func.count()).select_from(ProductModel), category)
        return self.db.execute(stmt).scalar_one()

    def create_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def decrement_stock(self, product_id: int, amount: int) -> bool:
        """
        Atomic compare-and-decrement, no commit.

        UPDATE products SET quantity = quantity - :amount
        WHERE id = :id AND quantity >= :amount
        """
        result = self.db.execute(
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.quantity >= amount,
            )
            .values(quantity=ProductModel.quantity - amount)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1

    def delete_product(self, product: ProductModel) -> None:
        self.db.delete(product)
        self.db.flush()
