"""Unit tests for logging helpers."""

import structlog

from pbmigrate.core.logging import LoggingContext, add_correlation_id


def test_correlation_id_follows_run_id():
    event_dict = add_correlation_id(None, "info", {"event": "Applying", "run_id": "run_abc123"})

    assert event_dict["correlation_id"] == "run_abc123"


def test_existing_correlation_id_is_kept():
    event_dict = add_correlation_id(
        None, "info", {"event": "Applying", "run_id": "run_abc123", "correlation_id": "cid_given"}
    )

    assert event_dict["correlation_id"] == "cid_given"


def test_correlation_id_generated_outside_a_run():
    event_dict = add_correlation_id(None, "info", {"event": "Migration file created"})

    assert event_dict["correlation_id"].startswith("cid_")
    assert len(event_dict["correlation_id"]) == len("cid_") + 12


def test_logging_context_binds_and_unbinds():
    structlog.contextvars.clear_contextvars()

    with LoggingContext(run_id="run_abc123", direction="up"):
        assert structlog.contextvars.get_contextvars() == {
            "run_id": "run_abc123",
            "direction": "up",
        }

    assert structlog.contextvars.get_contextvars() == {}
