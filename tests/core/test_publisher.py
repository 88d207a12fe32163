from unittest.mock import MagicMock, patch

from kafka.errors import KafkaTimeoutError

from app.core.kafka_producer import EventPublisher, create_kafka_producer
from app.schemas.events import EventEnvelope, EventOperation


def test_publish_sends_to_exchange_with_routing_key_header():
    producer = MagicMock()
    publisher = EventPublisher(producer, exchange="activities.events")
    envelope = EventEnvelope.for_activity(EventOperation.update, "42")

    assert publisher.publish("activity.updated", envelope, key="42") is True

    producer.send.assert_called_once()
    args, kwargs = producer.send.call_args
    assert args == ("activities.events",)
    assert kwargs["key"] == "42"
    assert kwargs["value"]["op"] == "update"
    assert kwargs["value"]["activityId"] == "42"
    assert kwargs["value"]["sessionId"] == ""
    assert ("routing_key", b"activity.updated") in kwargs["headers"]


def test_publish_does_not_wait_for_broker_ack():
    producer = MagicMock()
    EventPublisher(producer).publish("activity.created", {"op": "create"})

    producer.send.return_value.get.assert_not_called()
    producer.flush.assert_not_called()


def test_publish_failure_is_swallowed():
    producer = MagicMock()
    producer.send.side_effect = KafkaTimeoutError("buffer full")

    assert EventPublisher(producer).publish("activity.deleted", {"op": "delete"}) is False


def test_publish_without_producer_is_a_noop():
    publisher = EventPublisher(None)

    assert publisher.publish("activity.created", {"op": "create"}) is False


@patch("app.core.kafka_producer.KafkaProducer")
def test_producer_send_blocks_for_at_most_one_second(mock_producer_cls):
    create_kafka_producer()

    kwargs = mock_producer_cls.call_args.kwargs
    assert kwargs["max_block_ms"] == 1000
    assert kwargs["request_timeout_ms"] == 5000
