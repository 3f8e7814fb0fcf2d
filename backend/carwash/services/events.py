"""
backend/carwash/services/events.py

Event emitter: pushes booking events to a Redis list for downstream
consumers (notifications, analytics). Delivery is best effort; a Redis
failure never fails the request that produced the event.
"""

import json
import time
import logging

from ..redis_client import redis_client

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"


def emit_event(event_type: str, payload: dict) -> None:
    """Push an event onto `events:p2p`."""
    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis_client.rpush(P2P_QUEUE, json.dumps(event))
        logger.info(f"Event emitted: {event_type} → {P2P_QUEUE}")
    except Exception as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
