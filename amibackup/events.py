"""
Structured event logging for backup runs.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def emit_event(event_type: str, data: Optional[Dict[str, Any]] = None,
               level: int = logging.INFO) -> Dict[str, Any]:
    """
    Emit an event as a single JSON log line.
    
    Args:
        event_type: Event type (e.g., "RUN_START", "IMAGE_CREATED")
        data: Event data
        level: Logging level for the line
        
    Returns:
        The emitted event
    """
    event = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "type": event_type,
        "data": data or {},
    }
    logger.log(level, json.dumps(event, default=str))
    return event


# Predefined event types for consistency
class EventTypes:
    RUN_START = "RUN_START"
    INSTANCES_DISCOVERED = "INSTANCES_DISCOVERED"
    IMAGE_CREATED = "IMAGE_CREATED"
    IMAGE_SKIPPED = "IMAGE_SKIPPED"
    IMAGE_CREATE_FAILED = "IMAGE_CREATE_FAILED"
    IMAGES_DISCOVERED = "IMAGES_DISCOVERED"
    IMAGE_EXPIRED = "IMAGE_EXPIRED"
    IMAGE_DEREGISTERED = "IMAGE_DEREGISTERED"
    SNAPSHOT_DELETED = "SNAPSHOT_DELETED"
    DELETE_FAILED = "DELETE_FAILED"
    METRICS_PUBLISHED = "METRICS_PUBLISHED"
    METRICS_FAILED = "METRICS_FAILED"
    RUN_DONE = "RUN_DONE"
    RUN_FAILED = "RUN_FAILED"
