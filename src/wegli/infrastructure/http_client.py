"""Retrying request executor (requests + tenacity).

Every API call goes through :class:`RequestExecutor`: it prepares a fresh
request from a :class:`RequestDescriptor`, sends it, classifies the status
and backs off exponentially between attempts. Failures are always raised as
typed :mod:`wegli.domain.errors` exceptions.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

import requests
from tenacity import AsyncRetrying, RetryCallState, Retrying

from wegli.domain.config.retry import RateLimitPolicy, RetryPolicy
from wegli.domain.errors import (
    RateLimitedError,
    RequestCancelledError,
    RequestNotReissuableError,
    TransportError,
    UnexpectedStatusError,
)
from wegli.infrastructure.retry import (
    RATE_LIMIT_STATUSES,
    RETRY_AFTER_HEADER,
    create_retrying,
    log_before_retry,
    parse_retry_after,
)

logger = logging.getLogger(__name__)

# Bodies that can be encoded again for every attempt
_REPLAYABLE_BODIES = (bytes, bytearray, str, dict, list, tuple)


class CancellationToken:
    """Cooperative cancellation for a running call chain.

    Checked before every attempt and before every backoff delay. Sync
    backoff sleeps wake up as soon as the token is cancelled.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RequestCancelledError("request chain was cancelled")

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; returns True early if cancelled."""
        return self._event.wait(min(seconds, threading.TIMEOUT_MAX))


@dataclass(frozen=True)
class RequestDescriptor:
    """Re-issuable description of one HTTP call.

    Attributes:
        method: HTTP method
        url: Absolute URL
        headers: Request headers
        params: Query string parameters
        body: Raw body (bytes/str) or form fields; file objects and iterators are not replayable
        json: JSON body
        stream: Read the response body lazily (downloads)
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, Any] = field(default_factory=dict)
    body: Any = None
    json: Any = None
    stream: bool = False

    @property
    def is_reissuable(self) -> bool:
        return self.body is None or isinstance(self.body, _REPLAYABLE_BODIES)

    def try_clone(self) -> Optional[requests.PreparedRequest]:
        """Prepare an independent copy of the request, or None for streaming bodies."""
        if not self.is_reissuable:
            return None
        return requests.Request(
            method=self.method,
            url=self.url,
            headers=dict(self.headers),
            params=dict(self.params),
            data=self.body,
            json=self.json,
        ).prepare()


def check_response(response: requests.Response) -> requests.Response:
    """Return a 2xx response, raise the matching error for anything else.

    Raises:
        RateLimitedError: Status 429 or 503, with the Retry-After hint if parseable
        UnexpectedStatusError: Any other non-success status
    """
    status_code = response.status_code
    if 200 <= status_code < 300:
        return response

    retry_after = parse_retry_after(response.headers.get(RETRY_AFTER_HEADER))
    response.close()
    if status_code in RATE_LIMIT_STATUSES:
        raise RateLimitedError(retry_after, status_code=status_code)
    raise UnexpectedStatusError(status_code)


class RequestExecutor:
    """Sends requests with bounded exponential backoff.

    Only UnexpectedStatusError is retried by default. Rate-limit signals
    (429/503) end the chain with RateLimitedError unless the executor is
    built with ``rate_limit=RateLimitPolicy.RETRY``. Transport failures,
    non-replayable requests and backoff overflow are never retried.

    An executor owns one requests session. Share it between threads only
    for sequential calls.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        timeout: float = 30.0,
        rate_limit: Union[RateLimitPolicy, str] = RateLimitPolicy.TERMINAL,
        sleep: Optional[Callable[[float], None]] = None,
        async_sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        """Initialize executor

        Args:
            session: requests session owning the connection pool (new one if None)
            timeout: Per-attempt transport timeout in seconds
            rate_limit: Handling of 429/503 responses
            sleep: Backoff sleep for execute() (default: interruptible wait / time.sleep)
            async_sleep: Backoff sleep for execute_async() (default: asyncio.sleep)
        """
        self.session = session or requests.Session()
        self.timeout = timeout
        self.rate_limit = RateLimitPolicy(rate_limit)
        self._sleep = sleep
        self._async_sleep = async_sleep or asyncio.sleep

    def execute(
        self,
        descriptor: RequestDescriptor,
        policy: Optional[RetryPolicy] = None,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> requests.Response:
        """Send the request, retrying failed statuses according to ``policy``.

        Args:
            descriptor: Request to send
            policy: Retry policy; None means a single attempt
            cancel_token: Optional cancellation token

        Returns:
            The successful (2xx) response

        Raises:
            WegliError: A subclass describing the terminal failure
        """
        if policy is None:
            return self._attempt(descriptor, cancel_token)

        retrying = create_retrying(
            policy,
            rate_limit=self.rate_limit,
            sleep=self._sync_sleep(cancel_token),
            before_sleep=self._before_sleep(policy, cancel_token),
            retrying_cls=Retrying,
        )
        return retrying(self._attempt, descriptor, cancel_token)

    async def execute_async(
        self,
        descriptor: RequestDescriptor,
        policy: Optional[RetryPolicy] = None,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> requests.Response:
        """Non-blocking variant of :meth:`execute`.

        The blocking send runs in a worker thread and backoff delays use
        the async sleep, so other tasks keep running during a retry chain.

        All worker threads send through the executor's one
        ``requests.Session``, which requests does not guarantee to be
        thread-safe. Use one executor per concurrently running chain.
        """
        if policy is None:
            return await self._attempt_async(descriptor, cancel_token)

        retrying = create_retrying(
            policy,
            rate_limit=self.rate_limit,
            sleep=self._async_sleep,
            before_sleep=self._before_sleep(policy, cancel_token),
            retrying_cls=AsyncRetrying,
        )
        return await retrying(self._attempt_async, descriptor, cancel_token)

    def _sync_sleep(self, cancel_token: Optional[CancellationToken]) -> Callable[[float], Any]:
        if self._sleep is not None:
            return self._sleep
        if cancel_token is not None:
            return cancel_token.wait
        return time.sleep

    def _before_sleep(
        self, policy: RetryPolicy, cancel_token: Optional[CancellationToken]
    ) -> Callable[[RetryCallState], None]:
        log_retry = log_before_retry(policy)

        def _before_sleep(retry_state: RetryCallState) -> None:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            log_retry(retry_state)

        return _before_sleep

    def _prepare(
        self, descriptor: RequestDescriptor, cancel_token: Optional[CancellationToken]
    ) -> requests.PreparedRequest:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        try:
            prepared = descriptor.try_clone()
        except requests.exceptions.RequestException as e:
            raise TransportError(str(e)) from e
        if prepared is None:
            raise RequestNotReissuableError()
        logger.debug(f"HTTP {prepared.method} {prepared.url}")
        return prepared

    def _attempt(
        self, descriptor: RequestDescriptor, cancel_token: Optional[CancellationToken]
    ) -> requests.Response:
        prepared = self._prepare(descriptor, cancel_token)
        try:
            response = self.session.send(prepared, timeout=self.timeout, stream=descriptor.stream)
        except requests.exceptions.RequestException as e:
            raise TransportError(str(e)) from e
        return check_response(response)

    async def _attempt_async(
        self, descriptor: RequestDescriptor, cancel_token: Optional[CancellationToken]
    ) -> requests.Response:
        prepared = self._prepare(descriptor, cancel_token)
        try:
            response = await asyncio.to_thread(
                self.session.send, prepared, timeout=self.timeout, stream=descriptor.stream
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(str(e)) from e
        return check_response(response)
