from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel, PaymentMethodModel
from storefront.domain.errors import Conflict, NotFound, Unauthenticated, Unauthorized
from storefront.domain.schemas import UserCreate, UserRead, UserUpdate, PaymentMethodIn, PaymentMethodOut
from storefront.repos.user_repo import UserRepo
from storefront.services.unit_of_work import storage_errors
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepo(db)

    def _actor(self, actor_id: int | None) -> UserModel:
        if actor_id is None:
            raise Unauthenticated("Authentication required")

        actor = self.repo.get_user(actor_id)
        if not actor:
            raise Unauthenticated("User not found")
        return actor

    def _own_account(self, actor_id: int | None, user_id: int) -> None:
        #payment methods are only ever visible to their owner
        if actor_id is None:
            raise Unauthenticated("Authentication required")
        if actor_id != user_id:
            raise Unauthorized("You can only manage your own payment methods")

    @storage_errors("create user")
    def create_user(self, payload: UserCreate) -> UserRead:
        email = payload.email.lower()

        if self.repo.get_user_by_email(email):
            raise Conflict("User already exists")

        user = UserModel(user_name=payload.user_name, email=email, role=payload.role)
        try:
            created = self.repo.create_user(user)
        except IntegrityError:
            self.db.rollback()
            raise Conflict("User already exists")

        logger.info(f"Created user {created.id} with role {created.role}")
        return UserRead.model_validate(created)

    @storage_errors("fetch user")
    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("User not found")
        return UserRead.model_validate(user)

    @storage_errors("fetch profile")
    def get_profile(self, actor_id: int | None) -> UserRead:
        return UserRead.model_validate(self._actor(actor_id))

    @storage_errors("update user")
    def update_user(self, actor_id: int | None, user_id: int, payload: UserUpdate) -> UserRead:
        actor = self._actor(actor_id)
        is_superadmin = actor.role == "superadmin"

        if payload.role is not None and not is_superadmin:
            raise Unauthorized("Role changes not allowed")

        if actor.id != user_id and not is_superadmin:
            raise Unauthorized("You can only update your own account")

        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("User not found")

        if payload.email is not None:
            email = payload.email.lower()
            existing = self.repo.get_user_by_email(email)
            if existing and existing.id != user.id:
                raise Conflict("Email already in use")
            user.email = email

        if payload.user_name is not None:
            user.user_name = payload.user_name

        if payload.role is not None and payload.role != user.role:
            logger.info(f"User {actor.id} changed role of user {user.id}: {user.role} -> {payload.role}")
            user.role = payload.role

        try:
            updated = self.repo.save(user)
        except IntegrityError:
            self.db.rollback()
            raise Conflict("Email already in use")

        return UserRead.model_validate(updated)

    @storage_errors("add payment method")
    def add_payment_method(self, actor_id: int | None, user_id: int, payload: PaymentMethodIn) -> PaymentMethodOut:
        self._own_account(actor_id, user_id)
        if not self.repo.get_user(user_id):
            raise NotFound("User not found")

        #the first method is always the default one
        is_default = payload.is_default or not self.repo.get_payment_methods(user_id)

        method = self.repo.add_payment_method(
            PaymentMethodModel(
                user_id=user_id,
                type=payload.type,
                token=payload.token,
                is_default=is_default,
            )
        )

        logger.info(f"User {user_id} added payment method {method.id} ({method.type})")
        return PaymentMethodOut.model_validate(method)

    @storage_errors("list payment methods")
    def list_payment_methods(self, actor_id: int | None, user_id: int) -> List[PaymentMethodOut]:
        self._own_account(actor_id, user_id)
        if not self.repo.get_user(user_id):
            raise NotFound("User not found")
        return [PaymentMethodOut.model_validate(m) for m in self.repo.get_payment_methods(user_id)]
