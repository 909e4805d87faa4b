"""
Event logging for request handlers.

Handlers record what happened through ``log_info`` and ``log_error``.
Both accept the current request so every line carries ``METHOD path``,
and ``log_error`` takes the underlying exception so the cause lands in
the log instead of the response. Neither function raises: a broken log
sink must never keep a handler from answering.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request

logger = logging.getLogger("userbucket.events")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logger.setLevel(level.upper())


def request_context(request: Optional[Request]) -> Optional[str]:
    if request is None:
        return None
    try:
        return f"{request.method} {request.url.path}"
    except Exception:
        return None


def describe_error(error: BaseException) -> str:
    """Render an exception and its causes as one line, outermost first."""
    chain = []
    seen = set()
    while error is not None and id(error) not in seen:
        seen.add(id(error))
        chain.append(f"{type(error).__name__}: {error}")
        error = error.__cause__ or error.__context__
    return " <- ".join(chain)


def log_info(message: str, request: Optional[Request] = None) -> None:
    try:
        context = request_context(request)
        if context:
            logger.info("%s [%s]", message, context)
        else:
            logger.info("%s", message)
    except Exception:
        pass


def log_error(
    message: str,
    request: Optional[Request] = None,
    error: Optional[BaseException] = None,
) -> None:
    try:
        context = request_context(request)
        parts = [message]
        if context:
            parts.append(f"[{context}]")
        if error is not None:
            parts.append(describe_error(error))
        exc_info = (
            (type(error), error, error.__traceback__) if error is not None else None
        )
        logger.error(" ".join(parts), exc_info=exc_info)
    except Exception:
        pass
