# live_sessions/utils/kafka_helpers.py
"""
Kafka helper functions for publishing live session lifecycle events.

Notification and email services consume these; publishing is best-effort
and never fails the request that triggered it.
"""
import logging
from typing import Optional

from live_sessions.utils.time import utcnow

logger = logging.getLogger(__name__)

# Kafka Topics
TOPIC_LIVE_SESSION_LIFECYCLE = "live-sessions.lifecycle.v1"

# Event types
SESSION_CREATED = "SESSION_CREATED"
SESSION_STARTED = "SESSION_STARTED"
SESSION_ENDED = "SESSION_ENDED"
SESSION_CANCELLED = "SESSION_CANCELLED"
SESSION_DELETED = "SESSION_DELETED"


def publish_lifecycle_event(
    producer,
    *,
    event_type: str,
    session_id: str,
    instructor_id: Optional[str] = None,
    status: Optional[str] = None,
    payload: Optional[dict] = None,
) -> bool:
    """
    Publish a lifecycle event for a live session.

    Args:
        producer: KafkaProducer, or None when Kafka is unavailable
        event_type: One of the SESSION_* constants
        session_id: Live session ID
        instructor_id: Owning instructor, if known
        status: Session status after the transition
        payload: Extra event-specific fields (participant counts, links...)

    Returns:
        bool: True if handed to the producer, False otherwise
    """
    if producer is None:
        logger.warning(
            f"Kafka producer unavailable, skipping {event_type} for session {session_id}"
        )
        return False

    event_data = {
        "type": event_type,
        "sessionId": session_id,
        "instructorId": instructor_id,
        "status": status,
        "timestamp": utcnow().isoformat(),
        **(payload or {}),
    }
    try:
        producer.send(TOPIC_LIVE_SESSION_LIFECYCLE, key=session_id.encode("utf-8"), value=event_data)
        logger.info(f"Published {event_type} for session {session_id}")
        return True
    except Exception as e:
        logger.error(f"Failed to publish {event_type} for session {session_id}: {e}", exc_info=True)
        return False
