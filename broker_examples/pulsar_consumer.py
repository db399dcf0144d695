from __future__ import annotations

# Pulsar consumer.
#
# Exclusive subscription: only one consumer may attach to the subscription at
# a time. Each message is acknowledged as soon as it is received.

import argparse

import pulsar
from pulsar.exceptions import PulsarException

from .destinations import PULSAR_SUBSCRIPTION, PULSAR_TOPIC, PULSAR_URL
from .errors import BrokerSetupError, exit_with
from .payload import payload_text


def run_consumer(
    *,
    service_url: str,
    topic: str,
    subscription: str,
    max_messages: int | None = None,
) -> int:
    try:
        client = pulsar.Client(service_url)
    except PulsarException as e:
        raise BrokerSetupError("create client", e) from e

    received = 0
    try:
        try:
            consumer = client.subscribe(topic, subscription, consumer_type=pulsar.ConsumerType.Exclusive)
        except PulsarException as e:
            raise BrokerSetupError("subscribe", e) from e

        try:
            while max_messages is None or received < max_messages:
                try:
                    msg = consumer.receive()
                except PulsarException as e:
                    raise BrokerSetupError("receive message", e) from e
                consumer.acknowledge(msg)
                received += 1
                print(f"[pulsar consumer] Received message: {payload_text(msg.data())}")
        except KeyboardInterrupt:
            pass
        finally:
            consumer.close()
    finally:
        client.close()
    return received


def main() -> None:
    parser = argparse.ArgumentParser(description="Pulsar consumer (exclusive subscription)")
    parser.add_argument("--service-url", default=PULSAR_URL)
    parser.add_argument("--topic", default=PULSAR_TOPIC)
    parser.add_argument("--subscription", default=PULSAR_SUBSCRIPTION)
    parser.add_argument("--max-messages", type=int, default=None)
    args = parser.parse_args()

    print(f"[pulsar consumer] subscribing to {args.topic} as {args.subscription}")
    try:
        run_consumer(
            service_url=args.service_url,
            topic=args.topic,
            subscription=args.subscription,
            max_messages=args.max_messages,
        )
    except BrokerSetupError as e:
        raise exit_with("pulsar consumer", e) from e


if __name__ == "__main__":
    main()
