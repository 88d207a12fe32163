#!/usr/bin/env python3
"""
Kafka Topics Auto-Creation Script
Creates the activities exchange topic and its dead-letter topic.
Skips topics that already exist.

Usage:
    python create-kafka-topics.py [--partitions 3] [--replication-factor 1]
"""

import argparse
import sys

from kafka.admin import KafkaAdminClient
from kafka.errors import KafkaError

from app.core.broker import BrokerTopology
from app.core.config import settings


def create_topics(partitions: int, replication_factor: int) -> int:
    """Create all required Kafka topics, skipping ones that already exist."""
    topology = BrokerTopology.from_settings(settings)

    print("=" * 80)
    print("Kafka Topics Auto-Creation Script")
    print("=" * 80)
    print(f"Exchange topic:    {topology.exchange}")
    print(f"Dead-letter topic: {topology.dead_letter}")
    print(f"Consumer group:    {topology.queue} (binding {topology.binding!r})")
    print()

    print(f"Connecting to {settings.KAFKA_BOOTSTRAP_SERVERS}...")
    try:
        admin_client = KafkaAdminClient(
            bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
            client_id="sporthub-topic-setup",
        )
    except KafkaError as e:
        print(f"Failed to connect to Kafka: {e}")
        return 1

    try:
        created = topology.ensure_topics(
            admin_client, partitions=partitions, replication_factor=replication_factor
        )
    except KafkaError as e:
        print(f"Failed to create topics: {e}")
        return 1
    finally:
        admin_client.close()

    print("-" * 80)
    print(f"Created: {len(created)} topic(s)")
    for name in created:
        print(f"   + {name}")
    print("=" * 80)
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--partitions", type=int, default=3)
    parser.add_argument("--replication-factor", type=int, default=1)
    args = parser.parse_args()
    try:
        sys.exit(create_topics(args.partitions, args.replication_factor))
    except KeyboardInterrupt:
        print("\n\nScript interrupted by user")
        sys.exit(1)
