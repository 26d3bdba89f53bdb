# storefront/celery_worker.py
from celery import Celery
from celery.signals import setup_logging

from storefront.utils.logging import configure_logging
from storefront.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# import tasks explicitly so Celery registers them
celery_app.conf.imports = (
    "storefront.tasks.expire",
    "storefront.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "expire-guest-carts-every-hour": {
        "task": "storefront.tasks.expire.expire_guest_carts_task",
        "schedule": 60.0 * 60,
    },
}

celery_app.conf.timezone = "UTC"


@setup_logging.connect
def _configure_worker_logging(**kwargs):
    # keep celery from installing its own handlers
    configure_logging()
