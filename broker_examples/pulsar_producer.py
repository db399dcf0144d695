from __future__ import annotations

# Pulsar producer.
#
# Sends a short numbered series of messages synchronously: `send()` blocks
# until the broker has persisted each message.

import argparse

import pulsar
from pulsar.exceptions import PulsarException

from .destinations import PULSAR_TOPIC, PULSAR_URL
from .errors import BrokerSetupError, exit_with
from .payload import encode_payload


def produce_messages(*, service_url: str, topic: str, count: int = 10, prefix: str = "hello") -> int:
    """Send `<prefix>-0` .. `<prefix>-<count-1>`. Returns the number sent."""
    if count <= 0:
        raise ValueError("count must be > 0")

    try:
        client = pulsar.Client(service_url)
    except PulsarException as e:
        raise BrokerSetupError("create client", e) from e

    sent = 0
    try:
        try:
            producer = client.create_producer(topic)
        except PulsarException as e:
            raise BrokerSetupError("create producer", e) from e

        try:
            for i in range(count):
                text = f"{prefix}-{i}"
                try:
                    producer.send(encode_payload(text))
                except PulsarException as e:
                    raise BrokerSetupError("send message", e) from e
                sent += 1
                print(f"[pulsar producer] Produced message: {text}")
        finally:
            producer.close()
    finally:
        client.close()
    return sent


def main() -> None:
    parser = argparse.ArgumentParser(description="Pulsar producer")
    parser.add_argument("--service-url", default=PULSAR_URL)
    parser.add_argument("--topic", default=PULSAR_TOPIC)
    parser.add_argument("--count", type=int, default=10)
    parser.add_argument("--prefix", default="hello")
    args = parser.parse_args()

    try:
        produce_messages(service_url=args.service_url, topic=args.topic, count=args.count, prefix=args.prefix)
    except BrokerSetupError as e:
        raise exit_with("pulsar producer", e) from e


if __name__ == "__main__":
    main()
