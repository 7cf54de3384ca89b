import logging
import sys
from collections.abc import Callable
from typing import Any

import structlog

SERVICE_NAME = "tournament_hub"


def _service_context(app_env: str) -> Callable[..., dict[str, Any]]:
    def add_service_context(
        _logger: Any,
        _method_name: str,
        event_dict: dict[str, Any],
    ) -> dict[str, Any]:
        event_dict.setdefault("service", SERVICE_NAME)
        event_dict.setdefault("app_env", app_env)
        return event_dict

    return add_service_context


def configure_logging(log_level: str = "INFO", *, app_env: str = "dev") -> None:
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # Access logs duplicate the structured request events.
    logging.getLogger("uvicorn.access").setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _service_context(app_env),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
