"""JSON-over-HTTP transport used by the API client.

``fetchify`` performs a single GET request and returns the decoded JSON
body.  It does not retry and does not translate errors: httpx exceptions
reach the caller as raised, and cancellation through an
:class:`~offapi.abort.AbortController` surfaces as
:class:`~offapi.abort.AbortError`.
"""

import asyncio
import logging
from typing import Any

import httpx

from offapi.abort import AbortController, AbortError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


async def _get_json(url: str, headers: dict[str, str] | None, http_client: httpx.AsyncClient | None) -> Any:
    """GET *url* and decode the JSON body, raising for non-2xx status."""
    try:
        if http_client is not None:
            response = await http_client.get(url, headers=headers)
            response.raise_for_status()
            return response.json()
        async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT) as client:
            response = await client.get(url, headers=headers)
            response.raise_for_status()
            return response.json()
    except httpx.TimeoutException as e:
        logger.warning("Request to %s timed out: %s", url, e)
        raise
    except httpx.HTTPError as e:
        logger.warning("Request to %s failed: %s", url, e)
        raise


async def fetchify(
    url: str,
    headers: dict[str, str] | None = None,
    controller: AbortController | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> Any:
    """Fetch *url* and return its parsed JSON body.

    Args:
        url:         Absolute URL to GET.
        headers:     Extra request headers, or ``None``.
        controller:  Optional abort controller.  If it is already aborted the
                     request is never sent; if it fires while the request is
                     in flight the request is cancelled.
        http_client: Caller-owned client to send the request with.  When
                     omitted a short-lived client is opened for this call.

    Raises:
        AbortError:            The controller was aborted.
        httpx.HTTPStatusError: The service answered with a non-2xx status.
        httpx.RequestError:    Connection failure, timeout, etc.
    """
    if controller is not None and controller.aborted:
        raise AbortError(controller.reason)

    logger.debug("GET %s", url)
    if controller is None:
        return await _get_json(url, headers, http_client)

    request_task = asyncio.ensure_future(_get_json(url, headers, http_client))
    abort_task = asyncio.ensure_future(controller.wait())
    try:
        done, _ = await asyncio.wait({request_task, abort_task}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        request_task.cancel()
        raise
    finally:
        abort_task.cancel()

    if request_task in done:
        return request_task.result()

    request_task.cancel()
    try:
        await request_task
    except asyncio.CancelledError:
        # Only the request was cancelled; the caller being cancelled must propagate
        if asyncio.current_task().cancelling():
            raise
    logger.warning("Request to %s aborted", url)
    raise AbortError(controller.reason)
