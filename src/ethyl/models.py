from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from .errors import ProtocolError

MALFORMED_RESPONSE = -32603


@dataclass(frozen=True)
class Endpoint:
    name: str
    url: str


@dataclass(frozen=True)
class RpcRequest:
    method: str
    params: List[Any]
    id: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "method": self.method,
            "params": list(self.params),
            "id": self.id,
        }


@dataclass(frozen=True)
class RpcSuccess:
    result: Any
    endpoint: str


@dataclass(frozen=True)
class RpcFailure:
    code: Optional[int]
    message: str
    endpoint: str
    data: Any = None

    def to_error(self) -> ProtocolError:
        return ProtocolError(self.code, self.message, data=self.data, endpoint=self.endpoint)


RpcResponse = Union[RpcSuccess, RpcFailure]


def parse_envelope(envelope: Any, endpoint: str) -> RpcResponse:
    """Split a decoded JSON-RPC body into a success or a failure.

    Bodies that are not objects, or carry neither ``result`` nor ``error``,
    are reported as failures with code -32603.
    """
    if not isinstance(envelope, dict):
        return RpcFailure(MALFORMED_RESPONSE, "malformed response: body is not an object", endpoint=endpoint)

    if "error" in envelope and envelope["error"] is not None:
        error = envelope["error"]
        if not isinstance(error, dict):
            return RpcFailure(MALFORMED_RESPONSE, f"malformed error object: {error!r}", endpoint=endpoint)
        code = error.get("code")
        return RpcFailure(
            code=code if isinstance(code, int) else None,
            message=str(error.get("message", "")),
            endpoint=endpoint,
            data=error.get("data"),
        )

    if "result" not in envelope:
        return RpcFailure(MALFORMED_RESPONSE, "malformed response: missing result", endpoint=endpoint)

    return RpcSuccess(result=envelope["result"], endpoint=endpoint)


@dataclass(frozen=True)
class Balance:
    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.isdigit() or not self.value.isascii():
            raise ValueError(f"balance must be a decimal digit string, got {self.value!r}")

    @property
    def wei(self) -> int:
        return int(self.value)

    def to_ether(self) -> Decimal:
        return Decimal(f"{self.value}e-18")
