from __future__ import annotations

# Redis subscriber.
#
# After SUBSCRIBE the server first answers with a confirmation message; we wait
# for it so connection problems surface before entering the receive loop.

import argparse

import redis

from .destinations import REDIS_CHANNEL, REDIS_HOST, REDIS_PORT
from .errors import BrokerSetupError, exit_with
from .payload import payload_text


def run_subscriber(
    *,
    host: str,
    port: int,
    channel: str,
    confirm_timeout: float = 5.0,
    max_messages: int | None = None,
) -> int:
    r = redis.Redis(host=host, port=port)
    pubsub = r.pubsub()
    received = 0
    try:
        try:
            pubsub.subscribe(channel)
            confirmation = pubsub.get_message(timeout=confirm_timeout)
        except redis.RedisError as e:
            raise BrokerSetupError("subscribe", e) from e
        if confirmation is None or confirmation.get("type") != "subscribe":
            raise BrokerSetupError("subscribe", f"no confirmation for {channel!r}: {confirmation}")

        try:
            for msg in pubsub.listen():
                if msg.get("type") != "message":
                    continue
                received += 1
                print(f"[redis subscriber] {payload_text(msg['channel'])} {payload_text(msg['data'])}")
                if max_messages is not None and received >= max_messages:
                    break
        except redis.ConnectionError as e:
            print(f"[redis subscriber] Subscription channel closed: {e}")
        except KeyboardInterrupt:
            pass
    finally:
        pubsub.close()
        r.close()
    return received


def main() -> None:
    parser = argparse.ArgumentParser(description="Redis pub/sub subscriber")
    parser.add_argument("--host", default=REDIS_HOST)
    parser.add_argument("--port", type=int, default=REDIS_PORT)
    parser.add_argument("--channel", default=REDIS_CHANNEL)
    parser.add_argument("--max-messages", type=int, default=None)
    args = parser.parse_args()

    try:
        run_subscriber(host=args.host, port=args.port, channel=args.channel, max_messages=args.max_messages)
    except BrokerSetupError as e:
        raise exit_with("redis subscriber", e) from e


if __name__ == "__main__":
    main()
