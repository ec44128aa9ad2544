# live_sessions/core/kafka_producer.py

import json
import logging
from threading import Lock
from typing import Optional

from kafka import KafkaProducer
from kafka.errors import KafkaError

from live_sessions.core.config import settings

logger = logging.getLogger(__name__)

_producer: Optional[KafkaProducer] = None
_producer_lock = Lock()


def _build_producer() -> KafkaProducer:
    return KafkaProducer(
        bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
        value_serializer=lambda v: json.dumps(v, default=str).encode("utf-8"),
        # Fail fast when the broker is unreachable instead of stalling a request
        request_timeout_ms=5000,
        max_block_ms=5000,
    )


def get_kafka_singleton() -> Optional[KafkaProducer]:
    """
    Return the process-wide producer, creating it on first use.

    Returns None when no broker is reachable so callers can skip publishing.
    """
    global _producer
    if _producer is not None:
        return _producer
    with _producer_lock:
        if _producer is None:
            try:
                _producer = _build_producer()
            except KafkaError as e:
                logger.warning(f"Kafka producer unavailable: {e}")
                return None
    return _producer


def get_kafka_producer():
    """FastAPI dependency yielding the shared producer (or None)."""
    yield get_kafka_singleton()


def close_kafka_producer() -> None:
    global _producer
    with _producer_lock:
        if _producer is not None:
            _producer.flush()
            _producer.close()
            _producer = None
