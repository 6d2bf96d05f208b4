"""Shared error mapping for generation service HTTP calls."""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager

import httpx

from museum_tour.domain.errors import ApiError

_logger = logging.getLogger(__name__)


@contextmanager
def request_errors(method: str, endpoint: str) -> Iterator[None]:
    """Log a request's duration and translate transport failures to ApiError."""
    started = time.perf_counter()
    try:
        yield
    except httpx.TimeoutException as exc:
        _log_failure(method, endpoint, started, exc)
        raise ApiError("Request timeout", code="TIMEOUT") from exc
    except httpx.TransportError as exc:
        _log_failure(method, endpoint, started, exc)
        raise ApiError("Network request failed", code="NETWORK_ERROR") from exc
    except Exception as exc:
        _log_failure(method, endpoint, started, exc)
        raise
    _logger.debug(
        "%s %s - complete (%sms)", method, endpoint, _elapsed_ms(started)
    )


async def raise_for_status(response: httpx.Response) -> None:
    """Raise ApiError with the service's message for non-2xx responses."""
    if response.is_success:
        return
    await response.aread()
    message = response.reason_phrase or "Request failed"
    code: str | None = None
    details: object | None = None
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        details = payload
        message = str(payload.get("message") or payload.get("detail") or message)
        raw_code = payload.get("code")
        code = str(raw_code) if raw_code is not None else None
    raise ApiError(
        message, status_code=response.status_code, code=code, details=details
    )


def _elapsed_ms(started: float) -> int:
    return round((time.perf_counter() - started) * 1000)


def _log_failure(method: str, endpoint: str, started: float, exc: Exception) -> None:
    _logger.warning(
        "%s %s - failed (%sms): %s", method, endpoint, _elapsed_ms(started), exc
    )
