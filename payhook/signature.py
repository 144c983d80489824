"""
Webhook signature verification.

The platform signs every delivery with HMAC-SHA256 over
``"<timestamp>.<raw body>"`` and sends the result in a header such as::

    t=1492774577,v1=5257a869e7ecebeda32affa62cdca3fa51cad7e77a0e56ff536d0ce8e108d8bd

Several signatures for the same scheme may be present while a secret is being
rotated. Any match is accepted. Signatures for unknown schemes are ignored.
"""

import hashlib
import hmac
import logging
import time
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from payhook.config import get_settings
from payhook.errors import (
    MalformedHeaderError,
    NoSignaturesFoundError,
    SignatureMismatchError,
    TimestampOutOfToleranceError,
)
from payhook.keys import SecretLike, resolve_secret_provider
from payhook.metrics import record_verification_outcome

logger = logging.getLogger(__name__)

PAIR_DELIMITER = ","
KEY_VALUE_DELIMITER = "="
TIMESTAMP_KEY = "t"
# Unix seconds fit in a signed 64-bit integer
MAX_TIMESTAMP_DIGITS = 19


@dataclass(frozen=True)
class SignedHeader:
    """Parsed signature header."""

    timestamp: int
    signatures: Tuple[Tuple[str, str], ...]

    def candidates(self, scheme: str) -> Tuple[str, ...]:
        """Return every signature value sent for ``scheme``, in header order."""
        return tuple(value for name, value in self.signatures if name == scheme)


def _payload_bytes(payload: Union[bytes, str]) -> bytes:
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, str):
        return payload.encode("utf-8")
    raise TypeError(f"payload must be bytes or str, not {type(payload).__name__}")


def parse_header(header: Optional[str]) -> SignedHeader:
    """
    Parse a signature header into its timestamp and signature pairs.

    Raises:
        MalformedHeaderError: if the header is empty, contains a pair without
            a key or value, or has zero, several or a non-numeric ``t``
    """
    if not header or not header.strip():
        raise MalformedHeaderError("Signature header is empty", header)

    timestamp: Optional[int] = None
    signatures = []
    for item in header.split(PAIR_DELIMITER):
        key, sep, value = item.strip().partition(KEY_VALUE_DELIMITER)
        key = key.strip()
        value = value.strip()
        if not sep or not key or not value:
            raise MalformedHeaderError(
                "Unable to parse signature header: expected key=value pairs", header
            )

        if key == TIMESTAMP_KEY:
            if timestamp is not None:
                raise MalformedHeaderError(
                    "Signature header contains more than one timestamp", header
                )
            if not (value.isascii() and value.isdigit()):
                raise MalformedHeaderError(
                    "Signature header timestamp is not a number", header
                )
            if len(value) > MAX_TIMESTAMP_DIGITS:
                raise MalformedHeaderError(
                    "Signature header timestamp is out of range", header
                )
            timestamp = int(value)
        else:
            signatures.append((key, value))

    if timestamp is None:
        raise MalformedHeaderError("Signature header has no timestamp", header)

    return SignedHeader(timestamp=timestamp, signatures=tuple(signatures))


def compute_signature(payload: Union[bytes, str], timestamp: int, secret: bytes) -> str:
    """Return the lowercase hex HMAC-SHA256 of ``"<timestamp>.<payload>"``."""
    signed_payload = str(timestamp).encode("ascii") + b"." + _payload_bytes(payload)
    return hmac.new(secret, signed_payload, hashlib.sha256).hexdigest()


def _any_signature_matches(expected: Tuple[str, ...], candidates: Tuple[str, ...]) -> bool:
    # Every pair is compared; the loop never exits early on a match.
    matched = False
    for digest in expected:
        digest_bytes = digest.encode("ascii")
        for candidate in candidates:
            if hmac.compare_digest(digest_bytes, candidate.encode("utf-8")):
                matched = True
    return matched


def verify_header(
    payload: Union[bytes, str],
    header: Optional[str],
    secret: Optional[SecretLike] = None,
    tolerance: Optional[int] = None,
    now: Optional[int] = None,
    scheme: Optional[str] = None,
) -> SignedHeader:
    """
    Verify that ``payload`` was signed by the platform.

    Args:
        payload: Raw request body, exactly as received
        header: Value of the signature header
        secret: Signing secret, raw bytes or a SecretProvider; defaults to
            the configured WEBHOOK_SECRET
        tolerance: Maximum allowed difference in seconds between the signed
            timestamp and ``now``; <= 0 disables the check. Defaults to
            WEBHOOK_TOLERANCE.
        now: Current Unix time in seconds; defaults to the system clock
        scheme: Signature scheme to check; defaults to SIGNATURE_SCHEME

    Returns:
        The parsed header

    Raises:
        MalformedHeaderError: header cannot be parsed
        NoSignaturesFoundError: no signature for ``scheme``
        SignatureMismatchError: no signature matched any accepted secret, or
            a ``str`` payload is not encodable as UTF-8
        TimestampOutOfToleranceError: signed timestamp outside the window
    """
    settings = get_settings()
    provider = resolve_secret_provider(secret)
    if tolerance is None:
        tolerance = settings.WEBHOOK_TOLERANCE
    if scheme is None:
        scheme = settings.SIGNATURE_SCHEME
    if now is None:
        now = int(time.time())

    try:
        signed = parse_header(header)
    except MalformedHeaderError as e:
        logger.warning(f"Rejected webhook: {e}")
        record_verification_outcome("malformed_header")
        raise

    candidates = signed.candidates(scheme)
    logger.debug(
        f"Parsed signature header: timestamp={signed.timestamp}, "
        f"{len(candidates)} '{scheme}' signature(s)"
    )
    if not candidates:
        logger.warning(f"Rejected webhook: no '{scheme}' signatures in header")
        record_verification_outcome("no_signatures")
        raise NoSignaturesFoundError(
            f"No signatures found with expected scheme '{scheme}'", header
        )

    try:
        body = _payload_bytes(payload)
    except UnicodeEncodeError as e:
        logger.warning("Rejected webhook: payload text is not encodable as UTF-8")
        record_verification_outcome("signature_mismatch")
        raise SignatureMismatchError(
            "Payload text cannot be encoded as UTF-8 and cannot match any signature",
            header,
        ) from e

    expected = tuple(
        compute_signature(body, signed.timestamp, key)
        for key in provider.candidate_secrets()
    )
    if not _any_signature_matches(expected, candidates):
        logger.warning("Rejected webhook: signature mismatch")
        record_verification_outcome("signature_mismatch")
        raise SignatureMismatchError(
            "No signatures found matching the expected signature for payload", header
        )

    age = now - signed.timestamp
    if tolerance > 0 and abs(age) > tolerance:
        logger.warning(
            f"Rejected webhook: timestamp {signed.timestamp} is {age}s from now "
            f"(tolerance {tolerance}s)"
        )
        record_verification_outcome("timestamp_out_of_tolerance")
        raise TimestampOutOfToleranceError(
            f"Timestamp outside the tolerance zone ({age}s, tolerance {tolerance}s)",
            header,
            timestamp=signed.timestamp,
            now=now,
            tolerance=tolerance,
        )

    logger.info("Webhook signature verified")
    record_verification_outcome("verified")
    return signed


def generate_header(
    payload: Union[bytes, str],
    secret: Union[str, bytes],
    timestamp: Optional[int] = None,
    scheme: Optional[str] = None,
) -> str:
    """
    Build a signature header for ``payload``.

    Used by senders and by tests that need a header the verifier accepts.

    Example:
        >>> generate_header('{"id":"evt_1"}', "whsec_test", timestamp=1000)
        't=1000,v1=...'
    """
    if timestamp is None:
        timestamp = int(time.time())
    if scheme is None:
        scheme = get_settings().SIGNATURE_SCHEME
    key = secret.encode("utf-8") if isinstance(secret, str) else secret
    signature = compute_signature(payload, timestamp, key)
    return f"{TIMESTAMP_KEY}={timestamp},{scheme}={signature}"
