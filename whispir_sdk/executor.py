"""Executor - Sends prepared requests and captures responses.

The Executor owns pooled httpx clients (one per proxy configuration) for its
whole lifetime and sends each PreparedRequest through the matching one.

Failure contract:
    - Transport failures and undecodable bodies are logged and returned as a
      WhispirResponse with error set and status_code 0, or the status already
      received when only the body was unreadable. They are not raised.
    - Sending on an executor closed by another thread raises
      ConfigurationError.
    - Failures while releasing a response or closing a client raise
      ResourceReleaseError.

Rate limiting:
    A 403 carrying X-Mashery-Error-Code: ERR_403_DEVELOPER_OVER_QPS is retried
    exactly once after a fixed 1 second wait. The retry's outcome is final,
    whatever it is. The wait can be cancelled through a threading.Event or by
    closing the executor, in which case the first response is returned.
"""

from __future__ import annotations

import logging
import time
from threading import Event, Lock
from typing import Any

import httpx

from whispir_sdk.errors import ConfigurationError, ResourceReleaseError
from whispir_sdk.models import PreparedRequest, ProxyConfig, WhispirResponse
from whispir_sdk.request_builder import build_auth


logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS = 403
RATE_LIMIT_HEADER = "X-Mashery-Error-Code"
RATE_LIMIT_CODE = "ERR_403_DEVELOPER_OVER_QPS"
RETRY_DELAY_SECONDS = 1.0

# How often a pending retry checks its cancellation token
_CANCEL_POLL_INTERVAL = 0.05


def is_over_qps(response: httpx.Response) -> bool:
    """True if the response is the upstream per-second quota rejection."""
    if response.status_code != RATE_LIMIT_STATUS:
        return False
    return any(value == RATE_LIMIT_CODE for value in response.headers.get_list(RATE_LIMIT_HEADER))


def _release(response: httpx.Response) -> None:
    try:
        response.close()
    except (httpx.HTTPError, OSError) as e:
        raise ResourceReleaseError(f"Failed to release HTTP response: {e}") from e


class Executor:
    """Executes prepared requests against the Whispir API.

    Usage:
        executor = Executor()
        try:
            response = executor.execute(prepared)
        finally:
            executor.close()

    Or with context manager:
        with Executor() as executor:
            response = executor.execute(prepared)
    """

    def __init__(self, transport: httpx.BaseTransport | None = None) -> None:
        """Initialize the executor.

        Args:
            transport: Optional httpx transport used by every pooled client.
                       Proxy routing is layered on top by httpx, so a proxied
                       client only uses it for hosts the proxy does not cover.
        """
        self._transport = transport
        self._clients: dict[ProxyConfig | None, httpx.Client] = {}
        self._clients_lock = Lock()
        self._shutdown = Event()

    def __enter__(self) -> "Executor":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._shutdown.is_set()

    def close(self) -> None:
        """Close every pooled client and abort any pending retry wait.

        All clients are closed even if one fails; the first failure is raised.

        Raises:
            ResourceReleaseError: If a client could not be closed.
        """
        self._shutdown.set()
        with self._clients_lock:
            clients = list(self._clients.values())
            self._clients.clear()

        first_error: Exception | None = None
        for client in clients:
            try:
                client.close()
            except (httpx.HTTPError, OSError) as e:
                if first_error is None:
                    first_error = e

        if first_error is not None:
            raise ResourceReleaseError(f"Failed to close HTTP client: {first_error}") from first_error

    def _build_client_kwargs(self, proxy: ProxyConfig | None) -> dict[str, Any]:
        """Build kwargs for httpx.Client.

        No timeout is set, so httpx defaults apply.
        """
        kwargs: dict[str, Any] = {}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        if proxy is not None:
            kwargs["proxy"] = proxy.url
        return kwargs

    def _client_for(self, proxy: ProxyConfig | None) -> httpx.Client:
        with self._clients_lock:
            if self._shutdown.is_set():
                raise ConfigurationError("Executor is closed")
            client = self._clients.get(proxy)
            if client is None:
                client = httpx.Client(**self._build_client_kwargs(proxy))
                self._clients[proxy] = client
            return client

    def execute(
        self,
        request: PreparedRequest,
        cancel: Event | None = None,
    ) -> WhispirResponse:
        """Send a request, retrying once if the upstream reports over-QPS.

        Args:
            request: The request to send.
            cancel: Optional token; setting it aborts a pending retry wait.

        Returns:
            WhispirResponse for the final attempt. status_code is 0 if the
            transport failed before a status line arrived.

        Raises:
            ConfigurationError: If the executor has been closed.
            ResourceReleaseError: If the response could not be released.
        """
        client = self._client_for(request.proxy)
        auth = build_auth(request)
        http_request = client.build_request(
            request.method,
            request.url,
            headers=request.headers,
            content=request.content,
        )

        status_code = 0
        body = ""
        error: str | None = None

        try:
            response = self._send(client, http_request, auth)
            try:
                status_code = response.status_code

                if is_over_qps(response):
                    if self._wait_before_retry(cancel):
                        logger.info(
                            "Over QPS limit on %s %s, retrying once",
                            request.method,
                            request.target.resource,
                        )
                        _release(response)
                        status_code = 0
                        response = self._send(client, http_request, auth)
                        status_code = response.status_code
                    else:
                        logger.warning(
                            "Retry of %s %s cancelled, returning rate-limited response",
                            request.method,
                            request.target.resource,
                        )

                response.read()
                body = response.text
                logger.debug("Response body (%d): %s", status_code, body)
            finally:
                _release(response)

        except httpx.RequestError as e:
            # Status stays as recorded if the failure came while reading the body
            error = str(e) or type(e).__name__
            logger.error("Message Failed - Connection Error: %s", error)

        return WhispirResponse(status_code=status_code, body=body, error=error)

    def _send(
        self,
        client: httpx.Client,
        http_request: httpx.Request,
        auth: httpx.Auth,
    ) -> httpx.Response:
        try:
            return client.send(http_request, auth=auth, stream=True)
        except RuntimeError as e:
            # httpx refuses to send on a client closed by another thread
            if self._shutdown.is_set():
                raise ConfigurationError("Executor is closed") from e
            raise

    def _wait_before_retry(self, cancel: Event | None) -> bool:
        """Wait out the retry delay. Returns False if cancelled first."""
        deadline = time.monotonic() + RETRY_DELAY_SECONDS
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return True
            if cancel is not None and cancel.is_set():
                return False
            if self._shutdown.wait(min(remaining, _CANCEL_POLL_INTERVAL)):
                return False
