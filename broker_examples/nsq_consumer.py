from __future__ import annotations

# NSQ consumer.
#
# `nsq.Reader` subscribes a channel to a topic on nsqd and calls our handler
# for every message. Returning True finishes (acknowledges) the message.
# The process then simply runs the tornado IO loop forever.
#
# pynsq connects in the background and keeps reconnecting on failure, so we
# check once after connect_timeout that the reader actually has a connection.

import argparse
from typing import Any, Callable

import nsq
import tornado.ioloop

from .destinations import NSQ_CHANNEL, NSQ_TOPIC, NSQD_ADDRESS, valid_nsq_name
from .errors import BrokerSetupError, exit_with
from .payload import payload_text


def make_handler(on_body: Callable[[str], None] | None = None) -> Callable[[Any], bool]:
    def handler(message: Any) -> bool:
        text = payload_text(message.body)
        print(f"[nsq consumer] Received message: {text}")
        if on_body is not None:
            on_body(text)
        return True

    return handler


def create_reader(*, nsqd_address: str, topic: str, channel: str, max_in_flight: int = 1, handler=None) -> Any:
    if not valid_nsq_name(topic):
        raise BrokerSetupError("create consumer", f"invalid topic name {topic!r}")
    if not valid_nsq_name(channel):
        raise BrokerSetupError("create consumer", f"invalid channel name {channel!r}")

    try:
        return nsq.Reader(
            topic=topic,
            channel=channel,
            message_handler=handler or make_handler(),
            nsqd_tcp_addresses=[nsqd_address],
            max_in_flight=max_in_flight,
        )
    except (AssertionError, ValueError) as e:
        raise BrokerSetupError("create consumer", e) from e


class ConsumeState:
    """Tracks the connect deadline and the message limit for one run."""

    def __init__(self, *, io_loop: Any, nsqd_address: str, max_messages: int | None) -> None:
        self.io_loop = io_loop
        self.nsqd_address = nsqd_address
        self.max_messages = max_messages
        self.reader: Any = None
        self.received = 0
        self.error: BrokerSetupError | None = None

    def on_body(self, text: str) -> None:
        self.received += 1
        if self.max_messages is not None and self.received >= self.max_messages:
            # Let the FIN for this message go out before the loop stops.
            self.io_loop.add_callback(self.io_loop.stop)

    def check_connected(self) -> None:
        if self.reader is not None and not self.reader.conns:
            self.error = BrokerSetupError("connect to NSQD", f"no connection to {self.nsqd_address}")
            self.io_loop.stop()


def run_consumer(
    *,
    nsqd_address: str,
    topic: str,
    channel: str,
    max_in_flight: int = 1,
    connect_timeout: float = 5.0,
    max_messages: int | None = None,
    io_loop: Any = None,
) -> int:
    """Consume until Ctrl+C (or max_messages). Returns the number of messages seen.

    Raises:
        BrokerSetupError: for invalid names, or if nsqd is not connected
            within connect_timeout seconds.
    """
    if max_messages is not None and max_messages <= 0:
        raise ValueError("max_messages must be > 0")

    loop = io_loop or tornado.ioloop.IOLoop.current()
    state = ConsumeState(io_loop=loop, nsqd_address=nsqd_address, max_messages=max_messages)
    state.reader = create_reader(
        nsqd_address=nsqd_address,
        topic=topic,
        channel=channel,
        max_in_flight=max_in_flight,
        handler=make_handler(state.on_body),
    )
    loop.call_later(connect_timeout, state.check_connected)
    try:
        loop.start()
    except KeyboardInterrupt:
        pass
    finally:
        state.reader.close()

    if state.error is not None:
        raise state.error
    return state.received


def main() -> None:
    parser = argparse.ArgumentParser(description="NSQ consumer")
    parser.add_argument("--nsqd-address", default=NSQD_ADDRESS, help="nsqd TCP address host:port")
    parser.add_argument("--topic", default=NSQ_TOPIC)
    parser.add_argument("--channel", default=NSQ_CHANNEL)
    parser.add_argument("--max-in-flight", type=int, default=1)
    parser.add_argument("--connect-timeout", type=float, default=5.0)
    parser.add_argument("--max-messages", type=int, default=None)
    args = parser.parse_args()

    print(f"[nsq consumer] connecting to {args.nsqd_address}, topic={args.topic}, channel={args.channel}")
    try:
        run_consumer(
            nsqd_address=args.nsqd_address,
            topic=args.topic,
            channel=args.channel,
            max_in_flight=args.max_in_flight,
            connect_timeout=args.connect_timeout,
            max_messages=args.max_messages,
        )
    except BrokerSetupError as e:
        raise exit_with("nsq consumer", e) from e


if __name__ == "__main__":
    main()
