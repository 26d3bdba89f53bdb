# storefront/domain/owner.py
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CartOwner:
    """Who a cart belongs to: an authenticated user or a guest token."""

    user_id: Optional[int] = None
    guest_token: Optional[str] = None

    @classmethod
    def user(cls, user_id: int) -> "CartOwner":
        return cls(user_id=user_id)

    @classmethod
    def guest(cls, token: Optional[str]) -> "CartOwner":
        return cls(guest_token=token)

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    def __str__(self) -> str:
        if self.is_guest:
            return f"guest:{self.guest_token or '-'}"
        return f"user:{self.user_id}"
