"""
Generic fetch/classify/decode pipeline for HIBP queries.

A query is a QueryTarget handed to a fetch function (the transport).
The transport reports raw bytes or a classified ServiceError; the
pipeline decodes successful payloads and delivers exactly one Result
to the caller's completion function, unless the request was cancelled.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import asyncio
import errno
import json
import logging
import socket
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping, TypeVar

import aiohttp

from hibpkit.errors import Result, ServiceError
from hibpkit.urls import QueryTarget

logger = logging.getLogger(__name__)

T = TypeVar("T")

JSON_MIME_TYPE = "application/json"
TEXT_MIME_TYPE = "text/plain"

# errno values meaning the host has no usable network at all
OFFLINE_ERRNOS = frozenset({errno.ENETUNREACH, errno.ENETDOWN, errno.EHOSTUNREACH})


class ServiceRequest(ABC):
    """Represents an active request that can be cancelled."""

    @abstractmethod
    def cancel(self) -> None:
        """Cancel the request."""
        pass


class NetworkServiceRequest(ServiceRequest):
    """A request running as an asyncio task."""

    def __init__(self, task: "asyncio.Task[None]"):
        self.task = task

    def cancel(self) -> None:
        """Cancel the underlying task; a finished task is left alone."""
        self.task.cancel()


class PendingRequest(ServiceRequest):
    """Handle returned to callers for an outstanding query.

    Cancelling forwards to the transport and suppresses any result that
    arrives afterwards. Once a result has been delivered, cancel() is a
    no-op.
    """

    def __init__(self) -> None:
        self.cancelled = False
        self.delivered = False
        self._request: ServiceRequest | None = None

    def attach(self, request: ServiceRequest | None) -> None:
        self._request = request

    def cancel(self) -> None:
        if self.delivered or self.cancelled:
            return
        self.cancelled = True
        logger.debug("Request cancelled")
        if self._request is not None:
            self._request.cancel()

    def deliver(self, completion: Callable[[Result[T]], None], result: Result[T]) -> bool:
        """Hand result to completion once; returns False if it was suppressed."""
        if self.cancelled or self.delivered:
            return False
        self.delivered = True
        completion(result)
        return True


FetchCompletion = Callable[[Result[bytes]], None]
FetchFunction = Callable[[str, str, FetchCompletion], ServiceRequest | None]
Decoder = Callable[[bytes], Any]


# =============================================================================
# Classification
# =============================================================================

def _header(headers: Mapping[str, str], name: str) -> str | None:
    name = name.lower()
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def parse_retry_after(value: str | None) -> int | None:
    """Seconds from a Retry-After header, or None if absent or not numeric."""
    if value is None:
        return None
    value = value.strip()
    if not value.isdigit():
        return None
    return int(value)


def mime_type_of(headers: Mapping[str, str]) -> str | None:
    """The bare media type of a Content-Type header (no parameters)."""
    content_type = _header(headers, "Content-Type")
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower()


def is_offline(exc: BaseException) -> bool:
    """True if a transport exception means there is no network connectivity."""
    os_error: BaseException | None = exc
    if isinstance(exc, aiohttp.ClientConnectorError):
        os_error = exc.os_error
    if isinstance(os_error, socket.gaierror):
        return True
    return isinstance(os_error, OSError) and os_error.errno in OFFLINE_ERRNOS


def classify_exception(exc: BaseException) -> ServiceError:
    """Classify a transport-level failure."""
    detail = f"Error: {exc!r}"
    if is_offline(exc):
        return ServiceError.offline(detail)
    return ServiceError.error(detail)


def classify_response(
    status: int,
    headers: Mapping[str, str],
    body: bytes | None,
    mime_type: str,
) -> Result[bytes]:
    """Classify a completed HTTP exchange.

    404 and 429 are checked before the content type.
    """
    if status == 404:
        return Result.failure(ServiceError.not_found())

    description = f"Response: status={status}, headers={dict(headers)!r}"

    if status == 429:
        retry_after = parse_retry_after(_header(headers, "Retry-After"))
        logger.warning(f"Rate limited. Retry after {retry_after}s")
        return Result.failure(ServiceError.rate_limited(retry_after, description))

    if mime_type_of(headers) != mime_type.lower() or body is None:
        return Result.failure(ServiceError.invalid_response(description))

    return Result.success(body)


# =============================================================================
# Transport
# =============================================================================

class AiohttpTransport:
    """Default fetch function backed by an aiohttp session.

    Calling the transport schedules one task on the running event loop,
    so it must be called from a coroutine or a loop callback.
    """

    def __init__(self, headers: dict[str, str], timeout: float):
        self.headers = headers
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure HTTP session exists."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers=self.headers)
        return self._session

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    def __call__(
        self,
        url: str,
        mime_type: str,
        completion: FetchCompletion,
    ) -> ServiceRequest:
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._exchange(url, mime_type, completion))
        return NetworkServiceRequest(task)

    async def _exchange(self, url: str, mime_type: str, completion: FetchCompletion) -> None:
        logger.debug(f"GET {url}")
        try:
            session = await self._ensure_session()
            async with session.get(
                url,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                body = await response.read()
                result = classify_response(response.status, response.headers, body, mime_type)
        except asyncio.CancelledError:
            logger.debug(f"Cancelled GET {url}")
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            result = Result.failure(classify_exception(e))

        completion(result)


# =============================================================================
# Pipeline
# =============================================================================

def process_query(
    target: QueryTarget | None,
    completion: Callable[[Result[T]], None],
    fetch: FetchFunction,
    mime_type: str = JSON_MIME_TYPE,
    decode: Decoder | None = None,
) -> PendingRequest | None:
    """Fetch a target, classify the outcome and decode the payload.

    Args:
        target: Where to send the request
        completion: Called exactly once with the Result, on whatever
            context the transport completes on
        fetch: Transport used to issue the request
        mime_type: Content type the response must carry
        decode: Turns the response bytes into the result value
            (JSON by default); ValueError, TypeError, KeyError and
            RecursionError from it become PARSE_ERROR

    Returns:
        A handle to cancel the request, or None if the target was invalid
        (in which case completion has already received INVALID_URL)
    """
    url = target.url if target is not None else None
    if url is None:
        completion(Result.failure(ServiceError.invalid_url()))
        return None

    decoder = decode or json.loads
    pending = PendingRequest()

    def on_complete(result: Result[bytes]) -> None:
        if result.ok:
            try:
                result = Result.success(decoder(result.value))
            except (ValueError, TypeError, KeyError, RecursionError) as e:
                result = Result.failure(ServiceError.parse_error(f"Parse Error: {e}"))
        pending.deliver(completion, result)

    pending.attach(fetch(url, mime_type, on_complete))
    return pending


async def await_result(
    start: Callable[[Callable[[Result[T]], None]], ServiceRequest | None],
) -> Result[T]:
    """Run a completion-style operation and await its Result.

    Cancelling the awaiting task cancels the underlying request.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Result[T]] = loop.create_future()

    def _set(result: Result[T]) -> None:
        if not future.done():
            future.set_result(result)

    def completion(result: Result[T]) -> None:
        # Transports may complete on another thread
        loop.call_soon_threadsafe(_set, result)

    request = start(completion)
    try:
        return await future
    except asyncio.CancelledError:
        if request is not None:
            request.cancel()
        raise
