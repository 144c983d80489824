"""
Tests for metrics and structured logging.

Tests cover:
- Verification and parse outcome counters
- JSON log records with delivery_id
- Secrets never appearing in log output
"""

import json
import logging

import pytest
from prometheus_client import REGISTRY

from payhook.errors import NoSignaturesFoundError, SignatureMismatchError
from payhook.events import construct_event, unsafe_parse_event
from payhook.logging_utils import (
    CustomJsonFormatter,
    bind_delivery_id,
    get_delivery_id,
    setup_logging,
)
from payhook.metrics import get_metrics, get_metrics_content_type
from payhook.signature import generate_header, verify_header


def sample(name: str, result: str) -> float:
    return REGISTRY.get_sample_value(name, {"result": result}) or 0.0


class TestMetrics:
    """Test Prometheus outcome counters."""

    def test_verified_counter(self, event_body, timestamp, secret):
        before = sample("webhook_signature_verifications_total", "verified")
        header = generate_header(event_body, secret, timestamp=timestamp)

        verify_header(event_body, header, secret, now=timestamp)

        assert sample("webhook_signature_verifications_total", "verified") == before + 1

    def test_failure_counters(self, event_body, timestamp, secret):
        mismatch = sample("webhook_signature_verifications_total", "signature_mismatch")
        missing = sample("webhook_signature_verifications_total", "no_signatures")

        with pytest.raises(SignatureMismatchError):
            verify_header(event_body, f"t={timestamp},v1=deadbeef", secret, now=timestamp)
        with pytest.raises(NoSignaturesFoundError):
            verify_header(event_body, f"t={timestamp}", secret, now=timestamp)

        assert sample("webhook_signature_verifications_total", "signature_mismatch") == mismatch + 1
        assert sample("webhook_signature_verifications_total", "no_signatures") == missing + 1

    def test_parse_counters(self, event_body, timestamp, secret):
        parsed = sample("webhook_event_parses_total", "parsed")
        unverified = sample("webhook_event_parses_total", "unverified")
        header = generate_header(event_body, secret, timestamp=timestamp)

        construct_event(event_body, header, secret, now=timestamp)
        unsafe_parse_event(event_body)

        assert sample("webhook_event_parses_total", "parsed") == parsed + 1
        assert sample("webhook_event_parses_total", "unverified") == unverified + 1

    def test_exposition(self):
        assert b"webhook_signature_verifications_total" in get_metrics()
        assert get_metrics_content_type().startswith("text/plain")


class TestLogging:
    """Test structured JSON logging."""

    def test_json_record_fields(self):
        formatter = CustomJsonFormatter('%(ts)s %(level)s %(name)s %(message)s')
        record = logging.LogRecord("payhook.test", logging.INFO, __file__, 1, "hello", None, None)

        with bind_delivery_id("req_123"):
            output = json.loads(formatter.format(record))

        assert output["message"] == "hello"
        assert output["level"] == "INFO"
        assert output["name"] == "payhook.test"
        assert output["delivery_id"] == "req_123"
        assert output["ts"].endswith("Z")

    def test_delivery_id_is_reset(self):
        with bind_delivery_id("req_1"):
            assert get_delivery_id() == "req_1"

        assert get_delivery_id() is None

    def test_setup_logging(self):
        logger = setup_logging("debug")

        assert logger.name == "payhook"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, CustomJsonFormatter)

    def test_secret_and_payload_not_logged(self, caplog, event_body, timestamp, secret):
        header = generate_header(event_body, secret, timestamp=timestamp)
        logging.getLogger("payhook").propagate = True

        with caplog.at_level(logging.DEBUG, logger="payhook"):
            verify_header(event_body, header, secret, now=timestamp)
            with pytest.raises(SignatureMismatchError):
                verify_header(event_body + b" ", header, secret, now=timestamp)

        digest = header.split("v1=")[1]
        for message in caplog.messages:
            assert secret not in message
            assert digest not in message
            assert "charge.succeeded" not in message
