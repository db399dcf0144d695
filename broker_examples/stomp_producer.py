from __future__ import annotations

# STOMP producer.
#
# A short-lived process:
# - connect to the broker (ActiveMQ speaks STOMP on 61613)
# - send one text message to a queue
# - disconnect

import argparse
import os

from .destinations import STOMP_DESTINATION, STOMP_HOST, STOMP_PORT
from .errors import BrokerSetupError, exit_with
from .payload import encode_payload
from .stomp_client import StompClient


def send_message(
    *,
    host: str,
    port: int,
    destination: str,
    body: str,
    content_type: str = "text/plain",
    login: str | None = None,
    passcode: str | None = None,
) -> None:
    data = encode_payload(body)

    client = StompClient(host=host, port=port, login=login, passcode=passcode)
    client.connect()
    try:
        client.send(destination, data, content_type=content_type)
        print(f"[stomp producer] Message sent to {destination}: {body}")
    finally:
        client.disconnect()


def main() -> None:
    parser = argparse.ArgumentParser(description="STOMP producer (ActiveMQ)")
    parser.add_argument("--host", default=STOMP_HOST)
    parser.add_argument("--port", type=int, default=STOMP_PORT)
    parser.add_argument("--destination", default=STOMP_DESTINATION)
    parser.add_argument("--body", default="Hello, ActiveMQ!")
    parser.add_argument("--content-type", default="text/plain")
    parser.add_argument("--login", default=os.environ.get("STOMP_LOGIN"), help="defaults to $STOMP_LOGIN")
    parser.add_argument("--passcode", default=os.environ.get("STOMP_PASSCODE"), help="defaults to $STOMP_PASSCODE")
    args = parser.parse_args()

    try:
        send_message(
            host=args.host,
            port=args.port,
            destination=args.destination,
            body=args.body,
            content_type=args.content_type,
            login=args.login,
            passcode=args.passcode,
        )
    except BrokerSetupError as e:
        raise exit_with("stomp producer", e) from e


if __name__ == "__main__":
    main()
