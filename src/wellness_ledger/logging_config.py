"""
Logging setup: every record carries the environment, build and request id
"""
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Optional
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[Optional[str]] = ContextVar("ledger_request_id", default=None)

access_logger = logging.getLogger("wellness_ledger.access")


def get_request_id() -> Optional[str]:
    return request_id_var.get()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with an id and log its outcome

    An incoming X-Request-ID is reused so ids can be traced across services.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            access_logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)"
            )
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class StructuredFormatter(logging.Formatter):
    """Formatter adding env, build and request_id fields to each record"""

    DEFAULT_FORMAT = "%(asctime)s [%(env)s:%(build)s] [%(request_id)s] %(levelname)-8s %(name)s: %(message)s"

    def __init__(self, env: str = "dev", build: str = "dev", fmt: str = None):
        super().__init__(fmt=fmt or self.DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        self.env = env
        self.build = build

    def format(self, record: logging.LogRecord) -> str:
        record.env = self.env
        record.build = self.build
        record.request_id = get_request_id() or "-"
        return super().format(record)


def setup_logging(env: str = "dev", log_level: str = "INFO", build: str = "dev") -> logging.Logger:
    """
    Route all logging to stdout through StructuredFormatter

    Args:
        env: Environment label (dev, test, staging, prod)
        log_level: Root level name; unknown names fall back to INFO
        build: Build/deploy version label
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(StructuredFormatter(env=env, build=build))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Noisy libraries
    for name in ("sqlalchemy.engine", "httpx", "alembic.runtime.migration"):
        logging.getLogger(name).setLevel(logging.WARNING)
    # Our own access log replaces uvicorn's
    logging.getLogger("uvicorn.access").disabled = True

    return root_logger
