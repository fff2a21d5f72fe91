import logging
import sys
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

_LOG_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{extra[request_id]} | {extra[analysis_id]} | <level>{message}</level>"
)

# google-genai logs every response at INFO, including non-text part warnings
_NOISY_LOGGERS = ("httpcore", "httpx", "google_genai", "google_genai.models")


class _InterceptHandler(logging.Handler):
    """Redirect stdlib logging records (core modules, SDKs) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        level: str | int
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that actually issued the log call
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(log_level: str = "DEBUG") -> None:
    """Install loguru as the only log sink.

    Stdlib loggers used by the analysis core and by google-genai are routed
    through loguru so every line carries the request and analysis ids.
    """
    logger.remove()
    logger.configure(extra={"request_id": "-", "analysis_id": "-"})
    logger.add(
        sys.stderr,
        format=_LOG_FORMAT,
        level=log_level.upper(),
        colorize=True,
    )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def analysis_scope(mode: str, variant_count: int) -> Iterator[str]:
    """Tag every log line emitted during one analysis with a short id."""
    aid = uuid.uuid4().hex[:6]
    with logger.contextualize(analysis_id=aid):
        logger.debug(
            "Analysis {aid} opened: mode={mode}, variants={count}",
            aid=aid,
            mode=mode,
            count=variant_count,
        )
        yield aid


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with a unique request ID, method, path, status, and duration.

    Analyses block for the whole remote call, so the duration logged for
    POST /api/analyze is effectively the model latency.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = uuid.uuid4().hex[:8]
        method = request.method
        path = request.url.path

        with logger.contextualize(request_id=rid):
            logger.info("{method} {path}", method=method, path=path)
            start = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.error(
                    "{method} {path} -> UNHANDLED ({duration_ms:.0f}ms)",
                    method=method,
                    path=path,
                    duration_ms=duration_ms,
                )
                raise
            duration_ms = (time.perf_counter() - start) * 1000
            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "{method} {path} -> {status} ({duration_ms:.0f}ms)",
                method=method,
                path=path,
                status=response.status_code,
                duration_ms=duration_ms,
            )

        return response
