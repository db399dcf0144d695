from __future__ import annotations

# Redis publisher.
#
# PUBLISH is fire-and-forget: messages published while nobody is subscribed
# are dropped by the server. We publish on a fixed interval forever (or
# `count` times) so a subscriber started later still sees traffic.

import argparse
import time

import redis

from .destinations import REDIS_CHANNEL, REDIS_HOST, REDIS_PORT
from .errors import BrokerSetupError, exit_with


def run_publisher(
    *,
    host: str,
    port: int,
    channel: str,
    message: str,
    interval: float = 1.0,
    count: int | None = None,
    sleep=time.sleep,
) -> int:
    """Publish until Ctrl+C (or `count` times). Returns the number published."""
    if count is not None and count <= 0:
        raise ValueError("count must be > 0")
    if not message:
        raise ValueError("message must not be empty")

    r = redis.Redis(host=host, port=port)
    sent = 0
    try:
        while count is None or sent < count:
            try:
                receivers = r.publish(channel, message)
            except redis.RedisError as e:
                raise BrokerSetupError("publish", e) from e
            sent += 1
            print(f"[redis publisher] published to {channel} ({receivers} subscriber(s)): {message}")
            if count is None or sent < count:
                sleep(interval)
    except KeyboardInterrupt:
        pass
    finally:
        r.close()
    return sent


def main() -> None:
    parser = argparse.ArgumentParser(description="Redis pub/sub publisher")
    parser.add_argument("--host", default=REDIS_HOST)
    parser.add_argument("--port", type=int, default=REDIS_PORT)
    parser.add_argument("--channel", default=REDIS_CHANNEL)
    parser.add_argument("--message", default="Hello, Redis!")
    parser.add_argument("--interval", type=float, default=1.0, help="seconds between publications")
    parser.add_argument("--count", type=int, default=None, help="stop after this many publications")
    args = parser.parse_args()

    try:
        run_publisher(
            host=args.host,
            port=args.port,
            channel=args.channel,
            message=args.message,
            interval=args.interval,
            count=args.count,
        )
    except BrokerSetupError as e:
        raise exit_with("redis publisher", e) from e


if __name__ == "__main__":
    main()
