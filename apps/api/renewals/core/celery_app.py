from celery import Celery

from renewals.core.config import get_settings

settings = get_settings()

celery_app = Celery("renewals", broker=settings.redis_url, backend=settings.redis_url, include=["renewals.tasks"])
celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)
