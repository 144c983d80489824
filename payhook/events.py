"""
Event parsing and the verifying entry points.

construct_event() is the function webhook receivers should call: it verifies
the signature header and only then parses the payload. unsafe_parse_event()
skips verification and exists for callers that authenticate deliveries some
other way (e.g. mutual TLS).
"""

import logging
from typing import Optional, Union

from pydantic import ValidationError

from payhook.config import get_settings
from payhook.errors import ApiVersionMismatchError, DeserializationError
from payhook.keys import SecretLike
from payhook.metrics import record_parse_outcome
from payhook.schemas import Event
from payhook.signature import verify_header

logger = logging.getLogger(__name__)


def _describe_validation_error(exc: ValidationError) -> str:
    # Input values are left out so payload content never reaches the message.
    details = []
    for error in exc.errors(include_url=False, include_input=False):
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        details.append(f"{location}: {error['msg']}")
    return "; ".join(details)


def parse_event(payload: Union[bytes, str]) -> Event:
    """
    Deserialize a webhook payload into an Event without any checks.

    Raises:
        DeserializationError: payload is not JSON or not an event object
    """
    try:
        event = Event.model_validate_json(payload)
    except ValidationError as e:
        record_parse_outcome("deserialization_error")
        logger.warning(f"Invalid event payload: {e.error_count()} error(s)")
        raise DeserializationError(
            f"Invalid event payload: {_describe_validation_error(e)}"
        ) from e

    logger.debug(f"Parsed event {event.id} of type {event.type}")
    return event


def check_api_version(
    event: Event,
    expected_api_version: Optional[str],
    enforce: bool = True,
) -> Event:
    """
    Compare the event's API version with the expected one.

    A missing version on either side counts as a mismatch.

    Raises:
        ApiVersionMismatchError: versions differ and ``enforce`` is true
    """
    if event.api_version == expected_api_version:
        return event

    if not enforce:
        logger.debug(
            f"Ignoring API version mismatch for event {event.id}: "
            f"{event.api_version} != {expected_api_version}"
        )
        return event

    record_parse_outcome("api_version_mismatch")
    logger.warning(
        f"Event {event.id} has API version {event.api_version}, "
        f"expected {expected_api_version}"
    )
    raise ApiVersionMismatchError(
        f"Received event with API version {event.api_version}, but expected "
        f"API version {expected_api_version}. Configure the webhook endpoint "
        f"with this API version, or pass enforce_api_version=False and be "
        f"wary that event data may be incorrectly deserialized.",
        expected=expected_api_version,
        received=event.api_version,
    )


def parse_event_with_version_check(
    payload: Union[bytes, str],
    expected_api_version: Optional[str] = None,
    enforce: bool = True,
) -> Event:
    """
    Parse a payload and check its API version.

    Args:
        payload: Raw event JSON
        expected_api_version: Version to require; defaults to API_VERSION
        enforce: Raise on mismatch when true, ignore it otherwise
    """
    if expected_api_version is None:
        expected_api_version = get_settings().API_VERSION
    event = parse_event(payload)
    return check_api_version(event, expected_api_version, enforce)


def construct_event(
    payload: Union[bytes, str],
    header: Optional[str],
    secret: Optional[SecretLike] = None,
    tolerance: Optional[int] = None,
    now: Optional[int] = None,
    enforce_api_version: bool = True,
    expected_api_version: Optional[str] = None,
    scheme: Optional[str] = None,
) -> Event:
    """
    Verify a webhook delivery and parse it into an Event.

    Args:
        payload: Raw request body, exactly as received
        header: Value of the signature header
        secret: Signing secret or SecretProvider; defaults to WEBHOOK_SECRET
        tolerance: Timestamp tolerance in seconds; defaults to WEBHOOK_TOLERANCE
        now: Current Unix time in seconds; defaults to the system clock
        enforce_api_version: Raise if the event API version differs
        expected_api_version: Version to require; defaults to API_VERSION
        scheme: Signature scheme to check; defaults to SIGNATURE_SCHEME

    Raises:
        SignatureVerificationError: any verification failure; the payload
            is not parsed
        DeserializationError: payload is not a valid event
        ApiVersionMismatchError: version differs and enforcement is on
    """
    verify_header(
        payload, header, secret=secret, tolerance=tolerance, now=now, scheme=scheme
    )
    event = parse_event_with_version_check(
        payload, expected_api_version, enforce=enforce_api_version
    )
    record_parse_outcome("parsed")
    return event


def validate_signature(
    payload: Union[bytes, str],
    header: Optional[str],
    secret: Optional[SecretLike] = None,
    tolerance: Optional[int] = None,
    now: Optional[int] = None,
    scheme: Optional[str] = None,
) -> None:
    """Verify a webhook delivery without parsing it."""
    verify_header(
        payload, header, secret=secret, tolerance=tolerance, now=now, scheme=scheme
    )


def unsafe_parse_event(
    payload: Union[bytes, str],
    enforce_api_version: bool = True,
    expected_api_version: Optional[str] = None,
) -> Event:
    """
    Parse a payload WITHOUT verifying its signature.

    Only use this when the delivery has already been authenticated by other
    means. Prefer construct_event().
    """
    logger.warning("Parsing webhook payload without signature verification")
    event = parse_event_with_version_check(
        payload, expected_api_version, enforce=enforce_api_version
    )
    record_parse_outcome("unverified")
    return event
