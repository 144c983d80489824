"""Verify and parse signed payment-platform webhooks."""

from .errors import (
    ApiVersionMismatchError,
    DeserializationError,
    MalformedHeaderError,
    MissingSecretError,
    NoSignaturesFoundError,
    SignatureMismatchError,
    SignatureVerificationError,
    TimestampOutOfToleranceError,
    WebhookError,
)
from .events import (
    check_api_version,
    construct_event,
    parse_event,
    parse_event_with_version_check,
    unsafe_parse_event,
    validate_signature,
)
from .keys import RotatingSecrets, SecretProvider, StaticSecret
from .schemas import Event, EventData, EventRequest
from .signature import SignedHeader, generate_header, parse_header, verify_header

__version__ = "1.0.0"
__all__ = [
    "ApiVersionMismatchError",
    "DeserializationError",
    "Event",
    "EventData",
    "EventRequest",
    "MalformedHeaderError",
    "MissingSecretError",
    "NoSignaturesFoundError",
    "RotatingSecrets",
    "SecretProvider",
    "SignatureMismatchError",
    "SignatureVerificationError",
    "SignedHeader",
    "StaticSecret",
    "TimestampOutOfToleranceError",
    "WebhookError",
    "check_api_version",
    "construct_event",
    "generate_header",
    "parse_event",
    "parse_event_with_version_check",
    "parse_header",
    "unsafe_parse_event",
    "validate_signature",
    "verify_header",
]
