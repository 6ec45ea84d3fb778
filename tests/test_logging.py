"""Tests for the structlog processors."""

from chatcache.core.logging import NOISY_LOGGERS, add_service_info


def test_events_carry_service_info():
    event = add_service_info(None, "info", {"event": "Redis cache connected"})
    assert event == {"event": "Redis cache connected", "service": "chatcache", "version": "1.0.0"}


def test_explicit_service_field_wins():
    event = add_service_info(None, "info", {"event": "x", "service": "worker"})
    assert event["service"] == "worker"


def test_http_stack_is_quietened():
    assert {"httpx", "httpcore"} <= set(NOISY_LOGGERS)
