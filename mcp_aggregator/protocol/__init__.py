"""Envelope codec for the JSON-RPC messages exchanged with callers and backends."""

from .envelope import (
    JSONRPC_VERSION,
    PROTOCOL_VERSION,
    Envelope,
    EnvelopeDecodeError,
    RequestEnvelope,
    parse_error_envelope,
)

__all__ = [
    "Envelope",
    "EnvelopeDecodeError",
    "JSONRPC_VERSION",
    "PROTOCOL_VERSION",
    "RequestEnvelope",
    "parse_error_envelope",
]
