import structlog
import logging
import sys
from typing import Any, MutableMapping, Optional, TextIO

SENSITIVE_KEYS = {"password", "token", "secret", "cookie", "cookies", "cookie_header"}


def _security_filter(logger: Any, method_name: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """
    Filter sensitive keys from logs. Session cookies are credentials here.
    """
    for key in event_dict:
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = "***"
    return event_dict


def _shared_processors() -> list:
    return [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _security_filter,
    ]


def setup_logging(env: str, stream: Optional[TextIO] = None) -> None:
    """
    Configure structlog based on environment.

    The Qt glue logs through ``logging.getLogger``; those records pass the same
    processor chain (``extra`` fields included) so they get masked and rendered
    like structlog events.
    """
    if env in ("local", "development"):
        # Development: Colored Console
        renderers = [structlog.dev.ConsoleRenderer()]
    else:
        # Production: JSON
        renderers = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[structlog.stdlib.ExtraAdder(), *_shared_processors()],
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)

    # Every record, structlog or stdlib, ends up on this one handler
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(logging.INFO)
