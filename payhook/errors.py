"""
Exception hierarchy for webhook verification and event parsing.

Every error raised by this package derives from WebhookError. Messages never
include the signing secret, the payload or a computed digest.
"""

from typing import Optional


class WebhookError(Exception):
    """Base class for all errors raised by payhook."""


class MissingSecretError(WebhookError):
    """No signing secret was passed and none is configured."""


class SignatureVerificationError(WebhookError):
    """The payload could not be authenticated against the signature header."""

    def __init__(self, message: str, sig_header: Optional[str] = None):
        super().__init__(message)
        self.sig_header = sig_header


class MalformedHeaderError(SignatureVerificationError):
    """Header is empty, missing `t`, has a non-numeric timestamp or bad pairs."""


class NoSignaturesFoundError(SignatureVerificationError):
    """Header carries no signature for the expected scheme."""


class SignatureMismatchError(SignatureVerificationError):
    """No candidate signature matched the expected digest for any secret."""


class TimestampOutOfToleranceError(SignatureVerificationError):
    """Signed timestamp is too far from the verifier's clock."""

    def __init__(
        self,
        message: str,
        sig_header: Optional[str] = None,
        timestamp: Optional[int] = None,
        now: Optional[int] = None,
        tolerance: Optional[int] = None,
    ):
        super().__init__(message, sig_header)
        self.timestamp = timestamp
        self.now = now
        self.tolerance = tolerance


class DeserializationError(WebhookError):
    """Payload is not valid JSON or does not fit the event shape."""


class ApiVersionMismatchError(WebhookError):
    """Event API version differs from the expected one."""

    def __init__(self, message: str, expected: Optional[str], received: Optional[str]):
        super().__init__(message)
        self.expected = expected
        self.received = received
