from typing import List

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel, PaymentMethodModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_user_by_email(self, email: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.email == email)
        ).scalar_one_or_none()

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def get_payment_methods(self, user_id: int) -> List[PaymentMethodModel]:
        return list(
            self.db.execute(
                select(PaymentMethodModel)
                .where(PaymentMethodModel.user_id == user_id)
                .order_by(PaymentMethodModel.id)
            ).scalars()
        )

    def add_payment_method(self, method: PaymentMethodModel) -> PaymentMethodModel:
        if method.is_default:
            self.db.execute(
                update(PaymentMethodModel)
                .where(PaymentMethodModel.user_id == method.user_id)
                .values(is_default=False)
            )
        self.db.add(method)
        self.db.commit()
        self.db.refresh(method)
        return method

    def save(self, user: UserModel) -> UserModel:
        self.db.commit()
        self.db.refresh(user)
        return user
