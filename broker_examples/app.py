from __future__ import annotations

# Single-entrypoint runner.
#
# Every program is also runnable on its own (`python -m broker_examples.<module>`).
# This entrypoint lists them in one place:
#     python -m broker_examples.app <program> [program args...]
#     python -m broker_examples.app pair <broker>
#
# Arguments after the program name are forwarded untouched, so
# `app stomp-consumer -h` shows the program's own help.

import argparse
import importlib

# program name -> (module, help)
PROGRAMS: dict[str, tuple[str, str]] = {
    "stomp-producer": ("broker_examples.stomp_producer", "Send one message to a STOMP queue (ActiveMQ)"),
    "stomp-consumer": ("broker_examples.stomp_consumer", "Print messages from a STOMP queue (ActiveMQ)"),
    "kafka-producer": ("broker_examples.kafka_producer", "Produce one record to a Kafka topic"),
    "kafka-cloud-producer": (
        "broker_examples.kafka_cloud_producer",
        "Produce one record with SASL/SCRAM credentials from the environment",
    ),
    "kafka-consumer": ("broker_examples.kafka_consumer", "Print records from a Kafka topic"),
    "nsq-producer": ("broker_examples.nsq_producer", "Publish one message to an NSQ topic"),
    "nsq-consumer": ("broker_examples.nsq_consumer", "Print messages from an NSQ topic/channel"),
    "pulsar-producer": ("broker_examples.pulsar_producer", "Send a numbered series of messages to Pulsar"),
    "pulsar-consumer": ("broker_examples.pulsar_consumer", "Print messages from an exclusive Pulsar subscription"),
    "redis-publisher": ("broker_examples.redis_publisher", "Publish to a Redis channel every second"),
    "redis-subscriber": ("broker_examples.redis_subscriber", "Print messages from a Redis channel"),
}

# broker -> (producer program, consumer program)
PAIRS: dict[str, tuple[str, str]] = {
    "stomp": ("stomp-producer", "stomp-consumer"),
    "kafka": ("kafka-producer", "kafka-consumer"),
    "nsq": ("nsq-producer", "nsq-consumer"),
    "pulsar": ("pulsar-producer", "pulsar-consumer"),
    "redis": ("redis-publisher", "redis-subscriber"),
}


def main() -> None:
    parser = argparse.ArgumentParser(description="Message broker examples - main entrypoint")
    sub = parser.add_subparsers(dest="cmd", required=True)

    for name, (_module, help_text) in PROGRAMS.items():
        # add_help=False: -h is forwarded to the program itself.
        sub.add_parser(name, help=help_text, add_help=False)

    p_pair = sub.add_parser("pair", help="Start a consumer, run the matching producer, keep consuming")
    p_pair.add_argument("broker", choices=sorted(PAIRS))
    p_pair.add_argument("--startup-delay", type=float, default=1.0, help="seconds to let the consumer subscribe")

    args, rest = parser.parse_known_args()

    if args.cmd == "pair":
        if rest:
            parser.error("unrecognized arguments: " + " ".join(rest))
        from .run_pair import main as run

        _dispatch_to_module_main(run, [args.broker, "--startup-delay", str(args.startup_delay)])
        return

    module = importlib.import_module(PROGRAMS[args.cmd][0])
    _dispatch_to_module_main(module.main, rest)


def _dispatch_to_module_main(module_main, argv: list[str]) -> None:
    import sys

    old_argv = sys.argv[:]
    try:
        sys.argv = [old_argv[0], *argv]
        module_main()
    finally:
        sys.argv = old_argv


if __name__ == "__main__":
    main()
