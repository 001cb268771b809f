"""Typed failures raised by the provider and its collaborators."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple


class ProviderError(Exception):
    """Base class for every failure the provider surfaces."""


class ConfigurationError(ProviderError):
    """Raised for bad endpoint registration or provider settings."""


class DuplicateNameError(ConfigurationError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"endpoint name already registered: {name!r}")


class InvalidEndpointError(ConfigurationError):
    def __init__(self, value: Any, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"invalid endpoint {value!r}: {reason}")


class NoEndpointsConfiguredError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("no endpoints configured")


class ValidationError(ProviderError):
    """Raised when caller input or a node result fails validation."""


class InvalidAddressError(ValidationError):
    def __init__(self, address: Any) -> None:
        self.address = address
        super().__init__(f"not a 0x-prefixed 20-byte hex address: {address!r}")


class DecodeError(ValidationError):
    """Raised when a raw RPC result cannot be turned into a domain value."""


class MalformedQuantityError(DecodeError):
    def __init__(self, raw: Any) -> None:
        self.raw = raw
        super().__init__(f"malformed quantity: {raw!r}")


class TransportError(ProviderError):
    """Failure talking to an endpoint. Retried by the dispatcher."""

    transient = True

    def __init__(self, message: str, endpoint: Optional[str] = None, cause: Optional[BaseException] = None) -> None:
        self.message = message
        self.endpoint = endpoint
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        suffix = []
        if self.endpoint is not None:
            suffix.append(f"endpoint={self.endpoint}")
        if self.cause is not None:
            suffix.append(f"cause={self.cause}")
        detail = ", ".join(suffix)
        return f"{self.message} ({detail})" if detail else self.message


class EndpointTimeoutError(TransportError):
    pass


class EndpointConnectionError(TransportError):
    pass


class EndpointUnavailableError(TransportError):
    def __init__(self, message: str, http_status: int, endpoint: Optional[str] = None) -> None:
        self.http_status = http_status
        super().__init__(f"{message} (status={http_status})", endpoint=endpoint)


class AllEndpointsUnreachableError(TransportError):
    transient = False

    def __init__(self, failures: List[Tuple[str, TransportError]]) -> None:
        self.failures = failures
        names = ", ".join(name for name, _ in failures)
        super().__init__(f"all endpoints unreachable: {names}")


class ProtocolError(ProviderError):
    """JSON-RPC level rejection or a malformed response envelope."""

    def __init__(self, code: Optional[int], message: str, data: Any = None, endpoint: Optional[str] = None) -> None:
        self.code = code
        self.message = message
        self.data = data
        self.endpoint = endpoint
        super().__init__(f"RPC Error {code}: {message}")


class ConsistencyError(ProviderError):
    """Endpoints answered the same request with different values."""


class InconsistentResponseError(ConsistencyError):
    def __init__(self, method: str, values: Dict[str, Any]) -> None:
        self.method = method
        self.values = values
        super().__init__(f"endpoints disagree on {method}: {values!r}")


class CallCancelledError(ProviderError):
    """The caller cancelled the call before it finished."""


class DeadlineExceededError(CallCancelledError):
    def __init__(self, deadline: float) -> None:
        self.deadline = deadline
        super().__init__(f"call did not finish within {deadline:g}s")
