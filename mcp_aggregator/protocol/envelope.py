"""JSON-RPC envelope models shared by callers and backends."""

from typing import Any, Optional, Union

import mcp.types as types
from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, ValidationError

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"

RequestId = Union[StrictStr, StrictInt]


class EnvelopeDecodeError(ValueError):
    """Raised when raw bytes cannot be read as an envelope."""


class Envelope(BaseModel):
    """A single request or response message.

    Members are typed loosely so that a backend reply is relayed exactly as
    the backend sent it: any JSON object is accepted, unknown members are
    kept, and only members that were present (or explicitly set) are written
    back out. Caller requests are checked more strictly through
    ``RequestEnvelope``.
    """

    model_config = ConfigDict(extra="allow")

    jsonrpc: Any = JSONRPC_VERSION
    id: Optional[Any] = None
    method: Optional[Any] = None
    params: Optional[Any] = None
    result: Optional[Any] = None
    error: Optional[Any] = None

    @classmethod
    def request(
        cls, method: str, params: Any = None, request_id: Optional[RequestId] = None
    ) -> "Envelope":
        """Build an outbound request envelope."""
        fields: dict = {"jsonrpc": JSONRPC_VERSION, "method": method}
        if request_id is not None:
            fields["id"] = request_id
        if params is not None:
            fields["params"] = params
        return cls(**fields)

    @classmethod
    def decode(cls, raw: Union[str, bytes]) -> "Envelope":
        """Parse wire bytes into an envelope.

        Raises:
            EnvelopeDecodeError: if the payload is not a JSON object, or, for
                ``RequestEnvelope``, its members have the wrong types.
        """
        try:
            return cls.model_validate_json(raw)
        except ValidationError as e:
            raise EnvelopeDecodeError(
                f"Invalid envelope: {e.error_count()} validation error(s): "
                f"{e.errors()[0]['msg']}"
            ) from e

    def encode(self) -> dict:
        """JSON-ready dict with only the members that were set."""
        return self.model_dump(mode="json", exclude_unset=True)

    @property
    def has_id(self) -> bool:
        return "id" in self.model_fields_set

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def error_message(self) -> str:
        """Human-readable form of ``error`` for logging."""
        if isinstance(self.error, dict):
            message = self.error.get("message", "no message")
            code = self.error.get("code")
            return f"{message} (code {code})" if code is not None else str(message)
        return str(self.error)

    def reply(self, result: Any) -> "Envelope":
        """Success response correlated with this request."""
        fields = {"jsonrpc": JSONRPC_VERSION, "result": result}
        if self.has_id:
            fields["id"] = self.id
        return Envelope(**fields)

    def error_reply(self, code: int, message: str, data: Any = None) -> "Envelope":
        """Error response correlated with this request."""
        fields = {"jsonrpc": JSONRPC_VERSION, "error": _error_data(code, message, data)}
        if self.has_id:
            fields["id"] = self.id
        return Envelope(**fields)


class RequestEnvelope(Envelope):
    """Envelope received from a caller; id and method must be well typed."""

    id: Optional[RequestId] = None
    method: Optional[str] = None


def _error_data(code: int, message: str, data: Any = None) -> dict:
    if data is None:
        error = types.ErrorData(code=code, message=message)
    else:
        error = types.ErrorData(code=code, message=message, data=data)
    return error.model_dump(mode="json", exclude_unset=True)


def parse_error_envelope() -> Envelope:
    """Response for a body that could not be decoded; it carries no id."""
    return Envelope(
        jsonrpc=JSONRPC_VERSION,
        error=_error_data(types.PARSE_ERROR, "Parse error"),
    )
