from unittest.mock import MagicMock

from kafka.errors import KafkaError

from live_sessions.core import kafka_producer as kafka_module
from live_sessions.utils import kafka_helpers


def test_publish_without_producer_is_skipped():
    assert kafka_helpers.publish_lifecycle_event(
        None, event_type=kafka_helpers.SESSION_STARTED, session_id="lses_1"
    ) is False


def test_publish_sends_keyed_event():
    producer = MagicMock()

    published = kafka_helpers.publish_lifecycle_event(
        producer,
        event_type=kafka_helpers.SESSION_STARTED,
        session_id="lses_1",
        instructor_id="instructor_1",
        status="live",
        payload={"participantCount": 3},
    )

    assert published is True
    producer.send.assert_called_once()
    args, kwargs = producer.send.call_args
    assert args == (kafka_helpers.TOPIC_LIVE_SESSION_LIFECYCLE,)
    assert kwargs["key"] == b"lses_1"
    event = kwargs["value"]
    assert event["type"] == "SESSION_STARTED"
    assert event["sessionId"] == "lses_1"
    assert event["instructorId"] == "instructor_1"
    assert event["status"] == "live"
    assert event["participantCount"] == 3
    assert "timestamp" in event


def test_publish_failure_is_swallowed():
    producer = MagicMock()
    producer.send.side_effect = KafkaError("broker down")

    assert kafka_helpers.publish_lifecycle_event(
        producer, event_type=kafka_helpers.SESSION_ENDED, session_id="lses_1"
    ) is False


def test_singleton_is_none_when_broker_unreachable(monkeypatch):
    monkeypatch.setattr(kafka_module, "_producer", None)

    def unreachable():
        raise KafkaError("NoBrokersAvailable")

    monkeypatch.setattr(kafka_module, "_build_producer", unreachable)

    assert kafka_module.get_kafka_singleton() is None


def test_singleton_is_built_once_and_closed(monkeypatch):
    monkeypatch.setattr(kafka_module, "_producer", None)
    producer = MagicMock()
    build = MagicMock(return_value=producer)
    monkeypatch.setattr(kafka_module, "_build_producer", build)

    assert kafka_module.get_kafka_singleton() is producer
    assert kafka_module.get_kafka_singleton() is producer
    build.assert_called_once()

    kafka_module.close_kafka_producer()
    producer.flush.assert_called_once()
    producer.close.assert_called_once()
    assert kafka_module._producer is None
