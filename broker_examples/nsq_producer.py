from __future__ import annotations

# NSQ producer.
#
# pynsq runs on a tornado IO loop: `nsq.Writer` connects in the background and
# `pub()` reports the result through a callback. To get a one-shot
# "publish then exit" program we:
# - wait until the writer has an open connection (bounded by connect_timeout)
# - publish once
# - stop the loop from the publish callback

import argparse
import time
from typing import Any

import nsq
import tornado.ioloop

from .destinations import NSQ_TOPIC, NSQD_ADDRESS, valid_nsq_name
from .errors import BrokerSetupError, exit_with
from .payload import encode_payload


class OneShotPublish:
    """Publish a single message through a `nsq.Writer` and stop the loop."""

    def __init__(self, *, writer: Any, io_loop: Any, topic: str, body: bytes, connect_timeout: float) -> None:
        self.writer = writer
        self.io_loop = io_loop
        self.topic = topic
        self.body = body
        self.deadline = time.monotonic() + connect_timeout
        self.error: Exception | None = None
        self.done = False

    def start(self) -> None:
        self.io_loop.add_callback(self._publish_when_connected)

    def _publish_when_connected(self) -> None:
        if not self.writer.conns:
            if time.monotonic() >= self.deadline:
                self._finish(None, nsq.Error("no open connections"))
                return
            self.io_loop.call_later(0.1, self._publish_when_connected)
            return
        self.writer.pub(self.topic, self.body, self._finish)

    def _finish(self, conn: Any, data: Any) -> None:
        if isinstance(data, Exception):
            self.error = data
        self.done = True
        self.io_loop.stop()


def publish_message(
    *,
    nsqd_address: str,
    topic: str,
    body: str,
    connect_timeout: float = 5.0,
    io_loop: Any = None,
) -> None:
    if not valid_nsq_name(topic):
        raise ValueError(f"invalid NSQ topic name: {topic!r}")
    data = encode_payload(body)

    loop = io_loop or tornado.ioloop.IOLoop.current()
    writer = nsq.Writer([nsqd_address])
    job = OneShotPublish(writer=writer, io_loop=loop, topic=topic, body=data, connect_timeout=connect_timeout)
    job.start()
    try:
        loop.start()
    finally:
        for conn in list(writer.conns.values()):
            conn.close()

    if job.error is not None:
        raise BrokerSetupError("publish", job.error)
    print(f"[nsq producer] Message published: {body}")


def main() -> None:
    parser = argparse.ArgumentParser(description="NSQ producer")
    parser.add_argument("--nsqd-address", default=NSQD_ADDRESS, help="nsqd TCP address host:port")
    parser.add_argument("--topic", default=NSQ_TOPIC)
    parser.add_argument("--body", default="Hello NSQ!")
    parser.add_argument("--connect-timeout", type=float, default=5.0)
    args = parser.parse_args()

    try:
        publish_message(
            nsqd_address=args.nsqd_address,
            topic=args.topic,
            body=args.body,
            connect_timeout=args.connect_timeout,
        )
    except BrokerSetupError as e:
        raise exit_with("nsq producer", e) from e


if __name__ == "__main__":
    main()
