# storefront/services/unit_of_work.py
import functools

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.domain.errors import Conflict, Internal
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def storage_errors(action: str):
    """
    Service method decorator: a storage failure anywhere in the operation,
    reads included, is rolled back and surfaces as a typed error.

    The decorated method's instance must expose the session as ``self.db``.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except SQLAlchemyError as e:
                self.db.rollback()

                # unique constraint lost to a concurrent writer
                if isinstance(e, IntegrityError):
                    logger.warning(f"Integrity error during {action}: {e}")
                    raise Conflict("Resource was modified by another operation") from e

                logger.error(f"Storage error during {action}: {e}")
                raise Internal(f"Failed to {action}") from e

        return wrapper

    return decorator


class UnitOfWork:
    """Commits on success, rolls back on any error and lets it propagate."""

    def __init__(self, db: Session):
        self.db = db

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            try:
                self.db.commit()
            except SQLAlchemyError:
                self.db.rollback()
                raise
            return False

        self.db.rollback()
        return False
