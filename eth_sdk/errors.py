"""
Typed error classes for the eth_sdk call-resolution layer.

Every failure the SDK raises derives from `EthSdkError`, so callers can catch
the whole family at once or pick out a specific failure mode:

- ArityError       wrong number of logical arguments (raised before formatting)
- FormatError      an input failed validation while encoding
- ResolutionError  unknown logical method/subscription name (configuration bug)
- TransportError   surfaced unchanged from the JSON-RPC transport
- DecodeError      an output formatter could not interpret a wire result

The concrete classes also derive from the closest builtin (TypeError,
ValueError, LookupError) so generic handlers keep working.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional

__all__ = [
    "EthSdkError",
    "ArityError",
    "FormatError",
    "ResolutionError",
    "TransportError",
    "DecodeError",
    "JsonRpcCode",
    "from_jsonrpc_error",
]


class EthSdkError(Exception):
    """Base class for all SDK errors."""


class JsonRpcCode(IntEnum):
    # JSON-RPC 2.0 spec
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Server errors (implementation-defined range: -32099 to -32000)
    SERVER_ERROR = -32000

    # Client-side transport failures (no response object from the node)
    TRANSPORT_FAILURE = -32098


@dataclass(eq=False)
class ArityError(EthSdkError, TypeError):
    """Raised when a logical call receives the wrong number of arguments."""

    method: Optional[str]
    expected: int
    got: int

    def __str__(self) -> str:
        where = f"{self.method}: " if self.method else ""
        return f"{where}expected {self.expected} argument(s), got {self.got}"


@dataclass(eq=False)
class FormatError(EthSdkError, ValueError):
    """
    Raised when an input value fails validation during encoding.

    `position` is the zero-based argument index when the failure happened
    inside a FormatterPipeline, otherwise None.
    """

    message: str
    value: Any = None
    position: Optional[int] = None

    def __str__(self) -> str:
        where = f" [arg {self.position}]" if self.position is not None else ""
        return f"FormatError{where}: {self.message} (value={self.value!r})"


@dataclass(eq=False)
class ResolutionError(EthSdkError, LookupError):
    """Raised for a lookup of an unknown logical method or subscription."""

    name: str
    kind: str = "method"

    def __str__(self) -> str:
        return f"unknown {self.kind} {self.name!r}"


@dataclass(eq=False)
class TransportError(EthSdkError):
    """Raised by transports when a JSON-RPC call fails or returns an error object."""

    method: Optional[str]
    code: int
    message: str
    data: Optional[Any] = None
    request_id: Optional[Any] = None
    http_status: Optional[int] = None

    def __str__(self) -> str:
        parts = [f"RPC[{self.method or '-'}] code={self.code} msg={self.message!r}"]
        if self.request_id is not None:
            parts.append(f"id={self.request_id}")
        if self.http_status is not None:
            parts.append(f"http={self.http_status}")
        if self.data is not None:
            parts.append(f"data={self.data!r}")
        return " ".join(parts)

    @property
    def code_enum(self) -> Optional[JsonRpcCode]:
        try:
            return JsonRpcCode(self.code)
        except ValueError:
            return None


@dataclass(eq=False)
class DecodeError(EthSdkError, ValueError):
    """Raised when a wire result cannot be converted into its caller-facing form."""

    message: str
    method: Optional[str] = None
    value: Any = None

    def __str__(self) -> str:
        where = f"[{self.method}] " if self.method else ""
        return f"DecodeError {where}{self.message}"


def from_jsonrpc_error(
    err_obj: Dict[str, Any],
    *,
    method: Optional[str] = None,
    request_id: Optional[Any] = None,
    http_status: Optional[int] = None,
) -> TransportError:
    """
    Convert a JSON-RPC error object into TransportError.

    `err_obj` should resemble: {"code": int, "message": str, "data": any?}
    """
    code = int(err_obj.get("code", JsonRpcCode.SERVER_ERROR))
    message = str(err_obj.get("message", "Unknown JSON-RPC error"))
    return TransportError(
        method=method,
        code=code,
        message=message,
        data=err_obj.get("data"),
        request_id=request_id,
        http_status=http_status,
    )
