"""Shared HTTP helpers used by registry clients.

Encapsulates request/timeout error handling so callers receive a single
``RegistryUnavailableError`` (with the underlying exception chained) instead
of handling ``requests`` exceptions themselves. Requests are never retried
here; retry policy belongs to the caller.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from errors import RegistryUnavailableError

logger = logging.getLogger(__name__)


def default_headers() -> Dict[str, str]:
    """Headers sent with every registry request."""
    return {"User-Agent": Constants.USER_AGENT, "Accept": "application/json"}


def safe_get(
    url: str,
    *,
    context: str,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any,
) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "crates.io").
        headers: Extra headers merged over ``default_headers()``.
        **kwargs: Passed through to requests.get.

    Returns:
        requests.Response: A response with a 2xx status.

    Raises:
        RegistryUnavailableError: On timeout, connection failure or non-2xx status.
    """
    safe_target = safe_url(url)
    merged = default_headers()
    if headers:
        merged.update(headers)

    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=context,
                ),
            )
        try:
            res = requests.get(url, timeout=Constants.REQUEST_TIMEOUT, headers=merged, **kwargs)
        except requests.Timeout as exc:
            raise RegistryUnavailableError(
                f"{context} request timed out after {Constants.REQUEST_TIMEOUT} seconds"
            ) from exc
        except requests.RequestException as exc:  # includes ConnectionError
            raise RegistryUnavailableError(f"failed to contact {context}") from exc

    if is_debug_enabled(logger):
        logger.debug(
            "HTTP response",
            extra=extra_context(
                event="http_response",
                component="http_client",
                action="GET",
                status_code=res.status_code,
                duration_ms=t.duration_ms(),
                target=safe_target,
                context=context,
            ),
        )

    try:
        res.raise_for_status()
    except requests.HTTPError as exc:
        raise RegistryUnavailableError(
            f"{context} returned an error status ({res.status_code})"
        ) from exc
    return res


def get_json(
    url: str,
    *,
    context: str,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any,
) -> Any:
    """Perform GET request and parse JSON response.

    Raises:
        RegistryUnavailableError: On transport failure or an undecodable body.
    """
    res = safe_get(url, context=context, headers=headers, **kwargs)
    try:
        return res.json()
    except ValueError as exc:  # json.JSONDecodeError and requests' variant
        if is_debug_enabled(logger):
            logger.debug(
                "JSON decode error",
                extra=extra_context(
                    event="parse",
                    component="http_client",
                    action="get_json",
                    outcome="json_decode_error",
                    target=safe_url(url),
                ),
            )
        raise RegistryUnavailableError(f"failed to parse {context} response") from exc
