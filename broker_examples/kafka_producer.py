from __future__ import annotations

# Kafka producer.
#
# confluent-kafka delivers results asynchronously: `produce()` only enqueues,
# and the delivery report callback runs from `poll()` / `flush()`. We flush
# with a fixed timeout before exiting so every report is printed.

import argparse
from typing import Any

from confluent_kafka import KafkaError, KafkaException, Producer

from .destinations import KAFKA_BOOTSTRAP_SERVERS, KAFKA_TOPIC
from .errors import BrokerSetupError, exit_with
from .payload import encode_payload

FLUSH_TIMEOUT_SECONDS = 15.0


def delivery_report(err: KafkaError | None, msg: Any) -> None:
    """Called once per produced message with the broker's verdict."""
    if err is not None:
        print(f"[kafka producer] Failed to deliver message: {err}")
        return
    print(
        f"[kafka producer] Successfully produced record to topic {msg.topic()} "
        f"partition [{msg.partition()}] @ offset {msg.offset()}"
    )


def produce_messages(
    *,
    config: dict[str, Any],
    topic: str,
    values: list[str | bytes],
    key: str | bytes | None = None,
    flush_timeout: float = FLUSH_TIMEOUT_SECONDS,
    on_delivery=delivery_report,
) -> int:
    """Produce `values` to `topic` and wait for their delivery reports.

    Returns:
        The number of messages the broker reported as failed.

    Raises:
        BrokerSetupError: if the producer cannot be created, a message cannot
            be enqueued, or messages are still undelivered after the flush.
    """
    if not values:
        raise ValueError("values must not be empty")
    payloads = [encode_payload(v) for v in values]

    try:
        producer = Producer(config)
    except KafkaException as e:
        raise BrokerSetupError("create producer", e) from e

    failed = 0

    def report(err, msg) -> None:
        nonlocal failed
        if err is not None:
            failed += 1
        on_delivery(err, msg)

    for data in payloads:
        try:
            producer.produce(topic, value=data, key=key, on_delivery=report)
        except (KafkaException, BufferError) as e:
            raise BrokerSetupError("produce message", e) from e

    remaining = producer.flush(flush_timeout)
    if remaining:
        raise BrokerSetupError("write messages", f"{remaining} message(s) undelivered after {flush_timeout}s")
    return failed


def main() -> None:
    parser = argparse.ArgumentParser(description="Kafka producer")
    parser.add_argument("--bootstrap-servers", default=KAFKA_BOOTSTRAP_SERVERS)
    parser.add_argument("--topic", default=KAFKA_TOPIC)
    parser.add_argument("--message", default="Hello, Kafka!")
    parser.add_argument("--flush-timeout", type=float, default=FLUSH_TIMEOUT_SECONDS)
    args = parser.parse_args()

    try:
        produce_messages(
            config={"bootstrap.servers": args.bootstrap_servers},
            topic=args.topic,
            values=[args.message],
            flush_timeout=args.flush_timeout,
        )
    except BrokerSetupError as e:
        raise exit_with("kafka producer", e) from e
    print("[kafka producer] Message sent successfully")


if __name__ == "__main__":
    main()
