import pytest
from unittest.mock import MagicMock, call

from kafka.errors import NoBrokersAvailable, TopicAlreadyExistsError

from app.core.broker import (
    BrokerTopology,
    connect_consumer,
    header_value,
    topic_matches,
)


class TestTopicMatches:
    @pytest.mark.parametrize(
        "pattern,routing_key",
        [
            ("#", "activity.created"),
            ("#", "enrollment.cancelled"),
            ("activity.*", "activity.updated"),
            ("activity.#", "activity.session.deleted"),
            ("activity.#", "activity"),
            ("*.session.*", "activity.session.created"),
            ("activity.created", "activity.created"),
        ],
    )
    def test_matches(self, pattern, routing_key):
        assert topic_matches(pattern, routing_key)

    @pytest.mark.parametrize(
        "pattern,routing_key",
        [
            ("activity.*", "activity.session.created"),
            ("activity.*", "enrollment.created"),
            ("activity.created", "activity.updated"),
            ("*.created", "activity.session.created"),
        ],
    )
    def test_does_not_match(self, pattern, routing_key):
        assert not topic_matches(pattern, routing_key)


def test_header_value_decodes_bytes():
    headers = [("other", b"x"), ("routing_key", b"activity.created")]
    assert header_value(headers, "routing_key") == "activity.created"
    assert header_value(headers, "missing") == ""
    assert header_value(None, "routing_key") == ""


class TestBrokerTopology:
    def setup_method(self):
        self.topology = BrokerTopology(
            exchange="activities.events",
            queue="search_sync",
            binding="activity.#",
            dead_letter="activities.events.dlq",
        )

    def test_binds_uses_binding_pattern(self):
        assert self.topology.binds("activity.deleted")
        assert not self.topology.binds("enrollment.created")

    def test_ensure_topics_skips_existing(self):
        admin = MagicMock()
        admin.create_topics.side_effect = [None, TopicAlreadyExistsError()]

        created = self.topology.ensure_topics(admin)

        assert created == ["activities.events"]
        assert admin.create_topics.call_count == 2


class TestConnectConsumer:
    def test_retries_with_capped_exponential_backoff(self):
        consumer = MagicMock()
        factory = MagicMock(side_effect=[NoBrokersAvailable(), NoBrokersAvailable(), consumer])
        sleep = MagicMock()

        result = connect_consumer(
            factory, max_attempts=10, initial_delay=2.0, max_delay=30.0, sleep=sleep
        )

        assert result is consumer
        assert factory.call_count == 3
        assert sleep.call_args_list == [call(2.0), call(4.0)]

    def test_delay_never_exceeds_cap(self):
        factory = MagicMock(side_effect=NoBrokersAvailable())
        sleep = MagicMock()

        connect_consumer(factory, max_attempts=6, initial_delay=2.0, max_delay=30.0, sleep=sleep)

        delays = [c.args[0] for c in sleep.call_args_list]
        assert delays == [2.0, 4.0, 8.0, 16.0, 30.0]

    def test_gives_up_without_raising(self):
        factory = MagicMock(side_effect=NoBrokersAvailable())

        result = connect_consumer(
            factory, max_attempts=3, initial_delay=0.1, max_delay=1.0, sleep=MagicMock()
        )

        assert result is None
        assert factory.call_count == 3
