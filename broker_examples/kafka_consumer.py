from __future__ import annotations

# Kafka consumer.
#
# Joins a consumer group, subscribes to one topic and prints every record.
# Offsets are committed automatically by the client (its default).

import argparse

from confluent_kafka import Consumer, KafkaException

from .destinations import KAFKA_BOOTSTRAP_SERVERS, KAFKA_GROUP_ID, KAFKA_TOPIC
from .errors import BrokerSetupError, exit_with
from .payload import payload_text


def run_consumer(
    *,
    bootstrap_servers: str,
    topic: str,
    group_id: str,
    auto_offset_reset: str = "earliest",
    poll_timeout: float = 1.0,
    connect_timeout: float = 10.0,
    max_messages: int | None = None,
) -> int:
    """Consume until Ctrl+C (or max_messages). Returns the number of records seen.

    Raises:
        BrokerSetupError: if the cluster metadata for `topic` cannot be fetched
            within connect_timeout seconds (unreachable brokers), or the
            subscription fails.
    """
    try:
        consumer = Consumer(
            {
                "bootstrap.servers": bootstrap_servers,
                "group.id": group_id,
                "auto.offset.reset": auto_offset_reset,
            }
        )
    except KafkaException as e:
        raise BrokerSetupError("create consumer", e) from e

    received = 0
    try:
        try:
            consumer.list_topics(topic, timeout=connect_timeout)
        except KafkaException as e:
            raise BrokerSetupError("connect to Kafka", e) from e

        try:
            consumer.subscribe([topic])
        except KafkaException as e:
            raise BrokerSetupError("subscribe to topic", e) from e

        while max_messages is None or received < max_messages:
            msg = consumer.poll(poll_timeout)
            if msg is None:
                continue
            if msg.error():
                print(f"[kafka consumer] Consumer error: {msg.error()}")
                continue
            received += 1
            print(
                f"[kafka consumer] Received message from {msg.topic()} [{msg.partition()}] "
                f"@ {msg.offset()}: {payload_text(msg.value())}"
            )
    except KeyboardInterrupt:
        pass
    finally:
        consumer.close()
    return received


def main() -> None:
    parser = argparse.ArgumentParser(description="Kafka consumer")
    parser.add_argument("--bootstrap-servers", default=KAFKA_BOOTSTRAP_SERVERS)
    parser.add_argument("--topic", default=KAFKA_TOPIC)
    parser.add_argument("--group-id", default=KAFKA_GROUP_ID)
    parser.add_argument("--auto-offset-reset", default="earliest", choices=["earliest", "latest"])
    parser.add_argument("--connect-timeout", type=float, default=10.0)
    parser.add_argument("--max-messages", type=int, default=None)
    args = parser.parse_args()

    print(f"[kafka consumer] subscribing to {args.topic} on {args.bootstrap_servers}, group={args.group_id}")
    try:
        run_consumer(
            bootstrap_servers=args.bootstrap_servers,
            topic=args.topic,
            group_id=args.group_id,
            auto_offset_reset=args.auto_offset_reset,
            connect_timeout=args.connect_timeout,
            max_messages=args.max_messages,
        )
    except BrokerSetupError as e:
        raise exit_with("kafka consumer", e) from e


if __name__ == "__main__":
    main()
