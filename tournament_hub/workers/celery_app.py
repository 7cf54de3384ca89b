from celery import Celery
from celery.signals import setup_logging

from tournament_hub.core.config import get_settings
from tournament_hub.core.logging import configure_logging

settings = get_settings()

celery_app = Celery(
    "tournament_hub",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "tournament_hub.workers.tasks.automation_events",
    ],
)

celery_app.conf.update(
    task_default_queue="q_events",
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
)


@setup_logging.connect
def _configure_worker_logging(**_kwargs: object) -> None:
    configure_logging(settings.log_level, app_env=settings.app_env)
