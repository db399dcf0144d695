from __future__ import annotations

# Credentialed Kafka producer (e.g. a hosted/serverless Kafka cluster).
#
# Connection details come from the environment:
#   KAFKA_URL       host:port of the cluster
#   KAFKA_USERNAME  SCRAM username
#   KAFKA_PASSWORD  SCRAM password
#
# Traffic is TLS encrypted and authenticated with SASL SCRAM-SHA-256.

import argparse
import os
from collections.abc import Mapping
from typing import Any

from .destinations import KAFKA_CLOUD_TOPIC
from .errors import BrokerSetupError, exit_with
from .kafka_producer import FLUSH_TIMEOUT_SECONDS, produce_messages

ENV_VARS = ("KAFKA_URL", "KAFKA_USERNAME", "KAFKA_PASSWORD")


def cloud_config_from_env(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Build a SASL_SSL/SCRAM-SHA-256 producer config.

    Raises:
        BrokerSetupError: if a required variable is missing or empty.
    """
    env = os.environ if environ is None else environ
    missing = [name for name in ENV_VARS if not env.get(name)]
    if missing:
        raise BrokerSetupError("create mechanism", "missing environment variable(s): " + ", ".join(missing))

    return {
        "bootstrap.servers": env["KAFKA_URL"],
        "security.protocol": "SASL_SSL",
        "sasl.mechanism": "SCRAM-SHA-256",
        "sasl.username": env["KAFKA_USERNAME"],
        "sasl.password": env["KAFKA_PASSWORD"],
    }


def write_message(
    *,
    topic: str,
    key: str,
    value: str,
    environ: Mapping[str, str] | None = None,
    flush_timeout: float = FLUSH_TIMEOUT_SECONDS,
) -> None:
    config = cloud_config_from_env(environ)
    failed = produce_messages(
        config=config,
        topic=topic,
        values=[value],
        key=key,
        flush_timeout=flush_timeout,
        on_delivery=_report_failure,
    )
    if failed:
        raise BrokerSetupError("write messages", f"{failed} message(s) rejected by the broker")
    print(f"[kafka cloud producer] wrote key={key} to {topic}")


def _report_failure(err, msg) -> None:
    if err is not None:
        print(f"[kafka cloud producer] failed to write messages: {err}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Kafka producer with SASL/SCRAM credentials from the environment")
    parser.add_argument("--topic", default=KAFKA_CLOUD_TOPIC)
    parser.add_argument("--key", default="second")
    parser.add_argument("--value", default="test")
    args = parser.parse_args()

    try:
        write_message(topic=args.topic, key=args.key, value=args.value)
    except BrokerSetupError as e:
        raise exit_with("kafka cloud producer", e) from e


if __name__ == "__main__":
    main()
