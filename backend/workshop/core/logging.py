import logging
import sys
import structlog

# values that are credentials on their own and must never reach a log line
SECRET_KEYS = frozenset({"token", "access_token", "password", "password_hash", "public_token"})

def _mask_secrets(_logger, _method, event_dict):
    for key in SECRET_KEYS & event_dict.keys():
        value = event_dict[key]
        event_dict[key] = f"{str(value)[:4]}***" if value else value
    return event_dict

def configure_logging(env: str = "dev") -> None:
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        _mask_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if env == "prod":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=env == "dev")

    structlog.configure(
        processors=shared_processors + [renderer],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.WARNING if env == "test" else logging.INFO,
    )

def bind_request(method: str, path: str) -> None:
    if path.startswith("/public/"):
        # the last segment is a capability token
        path = path.rsplit("/", 1)[0] + "/***"
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(method=method, path=path)

logger = structlog.get_logger()
