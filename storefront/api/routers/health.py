from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.database import get_db, ping
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        ping(db)
    except SQLAlchemyError as e:
        logger.error(f"Health check: database unavailable: {e}")
        return {"status": "degraded", "database": "unavailable"}
    return {"status": "ok", "database": "ok"}
