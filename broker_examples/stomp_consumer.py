from __future__ import annotations

# STOMP consumer.
#
# Subscribes to one queue with auto-acknowledge and prints every message until
# the subscription is closed (connection lost) or Ctrl+C.

import argparse
import os

from .destinations import STOMP_DESTINATION, STOMP_HOST, STOMP_PORT
from .errors import BrokerSetupError, exit_with
from .payload import payload_text
from .stomp_client import CLOSED, StompClient


def run_consumer(
    *,
    host: str,
    port: int,
    destination: str,
    login: str | None = None,
    passcode: str | None = None,
    max_messages: int | None = None,
) -> int:
    """Consume until the subscription closes (or max_messages is reached).

    Returns:
        The number of messages received.
    """
    client = StompClient(host=host, port=port, login=login, passcode=passcode)
    client.connect()

    received = 0
    try:
        sub = client.subscribe(destination, ack="auto")
        try:
            while max_messages is None or received < max_messages:
                frame = sub.get()
                if frame is CLOSED:
                    print("[stomp consumer] Subscription channel closed")
                    break
                if frame is None or not getattr(frame, "body", None):
                    print("[stomp consumer] Received nil message")
                    continue
                received += 1
                print(f"[stomp consumer] Received message: {payload_text(frame.body)}")
        except KeyboardInterrupt:
            pass
        finally:
            sub.unsubscribe()
    finally:
        client.disconnect()
    return received


def main() -> None:
    parser = argparse.ArgumentParser(description="STOMP consumer (ActiveMQ)")
    parser.add_argument("--host", default=STOMP_HOST)
    parser.add_argument("--port", type=int, default=STOMP_PORT)
    parser.add_argument("--destination", default=STOMP_DESTINATION)
    parser.add_argument("--login", default=os.environ.get("STOMP_LOGIN"), help="defaults to $STOMP_LOGIN")
    parser.add_argument("--passcode", default=os.environ.get("STOMP_PASSCODE"), help="defaults to $STOMP_PASSCODE")
    parser.add_argument("--max-messages", type=int, default=None)
    args = parser.parse_args()

    print(f"[stomp consumer] connecting to {args.host}:{args.port}, destination={args.destination}")
    try:
        run_consumer(
            host=args.host,
            port=args.port,
            destination=args.destination,
            login=args.login,
            passcode=args.passcode,
            max_messages=args.max_messages,
        )
    except BrokerSetupError as e:
        raise exit_with("stomp consumer", e) from e


if __name__ == "__main__":
    main()
