"""
Tests for structured event logging.
"""

import json
import logging

from amibackup.events import EventTypes, emit_event


def test_emit_event_logs_json(caplog):
    with caplog.at_level(logging.INFO, logger="amibackup.events"):
        event = emit_event(EventTypes.IMAGE_CREATED, {"image_id": "ami-1"})

    assert event["type"] == "IMAGE_CREATED"
    logged = json.loads(caplog.records[-1].getMessage())
    assert logged["type"] == "IMAGE_CREATED"
    assert logged["data"] == {"image_id": "ami-1"}
    assert "ts" in logged


def test_emit_event_level(caplog):
    with caplog.at_level(logging.INFO, logger="amibackup.events"):
        emit_event(EventTypes.RUN_FAILED, {"error": "boom"}, level=logging.ERROR)

    assert caplog.records[-1].levelno == logging.ERROR
