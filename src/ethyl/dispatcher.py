"""
Request dispatch across registered endpoints.

Two policies share one attempt routine:

- FIRST_SUCCESS tries endpoints in registration order and returns the first
  successful answer.
- CONFIRM_ALL sends the request to every endpoint concurrently and requires
  every successful answer to decode to the same value.

Transient transport failures are retried on the same endpoint with
exponential backoff; RPC-level rejections move straight to the next endpoint.
"""

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Executor, Future, wait
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .config import DispatchPolicy, ProviderConfig
from .errors import (
    AllEndpointsUnreachableError,
    CallCancelledError,
    DeadlineExceededError,
    InconsistentResponseError,
    NoEndpointsConfiguredError,
    ProtocolError,
    TransportError,
)
from .models import Endpoint, RpcFailure, RpcRequest, RpcResponse, RpcSuccess, parse_envelope
from .registry import EndpointRegistry

logger = logging.getLogger(__name__)

CANCEL_POLL_INTERVAL = 0.05

Decoder = Callable[[Any], Any]


def _identity(value: Any) -> Any:
    return value


class CallContext:
    """Deadline and cancellation state shared by every attempt of one call."""

    def __init__(self, deadline: Optional[float] = None, cancel: Optional[threading.Event] = None) -> None:
        self.deadline = deadline
        self.cancel = cancel
        self.expires_at = time.monotonic() + deadline if deadline is not None else None

    def remaining(self) -> Optional[float]:
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - time.monotonic())

    def check(self) -> None:
        if self.cancel is not None and self.cancel.is_set():
            raise CallCancelledError("call cancelled by caller")
        if self.deadline is not None and self.remaining() <= 0:
            raise DeadlineExceededError(self.deadline)

    @property
    def interruptible(self) -> bool:
        return self.deadline is not None or self.cancel is not None

    def attempt_timeout(self, timeout: float) -> float:
        remaining = self.remaining()
        if remaining is None:
            return timeout
        if remaining <= 0:
            raise DeadlineExceededError(self.deadline)
        return min(timeout, remaining)

    def sleep(self, seconds: float) -> None:
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        if self.cancel is not None:
            self.cancel.wait(seconds)
        elif seconds > 0:
            time.sleep(seconds)
        self.check()

    def poll_interval(self) -> Optional[float]:
        remaining = self.remaining()
        if self.cancel is None:
            return remaining
        return CANCEL_POLL_INTERVAL if remaining is None else min(CANCEL_POLL_INTERVAL, remaining)


class Dispatcher:
    def __init__(
        self,
        registry: EndpointRegistry,
        transport: Any,
        config: ProviderConfig,
        executor_factory: Callable[[], Executor],
    ) -> None:
        self._registry = registry
        self._transport = transport
        self._config = config
        self._executor_factory = executor_factory

    def dispatch(
        self,
        request: RpcRequest,
        decode: Optional[Decoder] = None,
        deadline: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Any:
        endpoints = self._registry.list()
        if not endpoints:
            raise NoEndpointsConfiguredError()

        call = CallContext(deadline=deadline, cancel=cancel)
        call.check()
        decode = decode or _identity
        if self._config.policy is DispatchPolicy.CONFIRM_ALL:
            return self._dispatch_all(request, endpoints, decode, call)
        return self._dispatch_first(request, endpoints, decode, call)

    def _dispatch_first(
        self, request: RpcRequest, endpoints: Sequence[Endpoint], decode: Decoder, call: CallContext
    ) -> Any:
        failures: List[Tuple[str, TransportError]] = []
        last_rejection: Optional[RpcFailure] = None

        for index, endpoint in enumerate(endpoints):
            try:
                response = self._run_attempt(request, endpoint, call)
            except TransportError as exc:
                logger.warning(f"[dispatch] {endpoint.name} unreachable for {request.method}: {exc}")
                failures.append((endpoint.name, exc))
                continue

            if isinstance(response, RpcFailure):
                logger.warning(
                    f"[dispatch] {endpoint.name} rejected {request.method}: {response.code} {response.message}"
                )
                last_rejection = response
                continue

            if index:
                logger.info(f"[dispatch] {request.method} succeeded on {endpoint.name} after {index} failover(s)")
            return decode(response.result)

        return self._give_up(request, failures, last_rejection, call)

    def _dispatch_all(
        self, request: RpcRequest, endpoints: Sequence[Endpoint], decode: Decoder, call: CallContext
    ) -> Any:
        executor = self._executor_factory()
        futures: Dict[Future, Endpoint] = {
            executor.submit(self._try_endpoint, request, endpoint, call): endpoint for endpoint in endpoints
        }
        try:
            pending = set(futures)
            while pending:
                _, pending = wait(pending, timeout=call.poll_interval(), return_when=FIRST_COMPLETED)
                call.check()
        finally:
            for future in futures:
                future.cancel()

        values: Dict[str, Any] = {}
        failures: List[Tuple[str, TransportError]] = []
        last_rejection: Optional[RpcFailure] = None
        for future, endpoint in futures.items():
            try:
                response = future.result()
            except TransportError as exc:
                logger.warning(f"[dispatch] {endpoint.name} unreachable for {request.method}: {exc}")
                failures.append((endpoint.name, exc))
                continue
            if isinstance(response, RpcFailure):
                logger.warning(
                    f"[dispatch] {endpoint.name} rejected {request.method}: {response.code} {response.message}"
                )
                last_rejection = response
                continue
            values[endpoint.name] = decode(response.result)

        if not values:
            return self._give_up(request, failures, last_rejection, call)

        first = next(iter(values.values()))
        if any(type(value) is not type(first) or value != first for value in values.values()):
            logger.error(f"[dispatch] endpoints disagree on {request.method}: {values!r}")
            raise InconsistentResponseError(request.method, values)

        if len(values) < len(endpoints):
            logger.warning(f"[dispatch] {request.method} confirmed by {len(values)}/{len(endpoints)} endpoints")
        return first

    def _run_attempt(self, request: RpcRequest, endpoint: Endpoint, call: CallContext) -> RpcResponse:
        if not call.interruptible:
            return self._try_endpoint(request, endpoint, call)

        # Run off the caller's thread so a deadline or cancel releases it mid-request
        future = self._executor_factory().submit(self._try_endpoint, request, endpoint, call)
        try:
            while not wait([future], timeout=call.poll_interval()).done:
                call.check()
            call.check()
        finally:
            future.cancel()
        return future.result()

    def _try_endpoint(self, request: RpcRequest, endpoint: Endpoint, call: CallContext) -> RpcResponse:
        attempt = 0
        while True:
            call.check()
            timeout = call.attempt_timeout(self._config.timeout)
            logger.debug(f"[dispatch] {request.method} id={request.id} -> {endpoint.name} (attempt {attempt + 1})")
            try:
                body = self._transport.post_json(endpoint.url, request.to_payload(), timeout)
            except TransportError as exc:
                if not exc.transient or attempt >= self._config.max_retries:
                    raise
                delay = self._config.retry_backoff * (2 ** attempt)
                logger.warning(f"[dispatch] {endpoint.name} failed ({exc}), retrying in {delay:.2f}s")
                attempt += 1
                call.sleep(delay)
                continue
            except ProtocolError as exc:
                return RpcFailure(exc.code, exc.message, endpoint=endpoint.name, data=exc.data)

            response = parse_envelope(body, endpoint.name)
            if isinstance(response, RpcSuccess):
                logger.debug(f"[dispatch] {request.method} id={request.id} <- {endpoint.name} ok")
            return response

    def _give_up(
        self,
        request: RpcRequest,
        failures: List[Tuple[str, TransportError]],
        last_rejection: Optional[RpcFailure],
        call: CallContext,
    ) -> Any:
        call.check()
        logger.error(f"[dispatch] All endpoints failed for {request.method}")
        if last_rejection is not None:
            raise last_rejection.to_error()
        raise AllEndpointsUnreachableError(failures)
