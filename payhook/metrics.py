"""
Prometheus metrics for webhook verification and parsing.

This module provides:
- Signature verification outcome counter (result)
- Event parse outcome counter (result)

Metrics are stored in-memory using prometheus-client.
"""

from prometheus_client import Counter, generate_latest, CONTENT_TYPE_LATEST


# =============================================================================
# Metric Definitions
# =============================================================================

# result: verified, malformed_header, no_signatures, signature_mismatch,
# timestamp_out_of_tolerance
signature_verifications_total = Counter(
    "webhook_signature_verifications_total",
    "Total webhook signature verification outcomes",
    labelnames=["result"]
)

# result: parsed, unverified, deserialization_error, api_version_mismatch
event_parses_total = Counter(
    "webhook_event_parses_total",
    "Total webhook event parse outcomes",
    labelnames=["result"]
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_verification_outcome(result: str) -> None:
    """
    Record a signature verification outcome.

    Args:
        result: Verification result - one of:
            - "verified": Signature matched and timestamp within tolerance
            - "malformed_header": Header could not be parsed
            - "no_signatures": No signature for the expected scheme
            - "signature_mismatch": No signature matched
            - "timestamp_out_of_tolerance": Replay or clock skew
    """
    signature_verifications_total.labels(result=result).inc()


def record_parse_outcome(result: str) -> None:
    """
    Record an event parse outcome.

    Args:
        result: Parse result - one of:
            - "parsed": Event parsed through a verifying entry point
            - "unverified": Event parsed through unsafe_parse_event
            - "deserialization_error": Payload was not a valid event
            - "api_version_mismatch": Enforced version check failed
    """
    event_parses_total.labels(result=result).inc()


def get_metrics() -> bytes:
    """
    Render the verification and parse counters for a /metrics endpoint.

    The host application serves the result; payhook itself opens no port.
    """
    return generate_latest()


def get_metrics_content_type() -> str:
    """Content-Type header value to send with get_metrics() output."""
    return CONTENT_TYPE_LATEST
