import pytest
import redis

from broker_examples import redis_publisher, redis_subscriber
from broker_examples.errors import BrokerSetupError


class FakePubSub:
    def __init__(self, messages, confirm=True):
        self.messages = messages
        self.confirm = confirm
        self.channels = []
        self.closed = False

    def subscribe(self, channel):
        self.channels.append(channel)

    def get_message(self, timeout=0.0):
        if not self.confirm:
            return None
        return {"type": "subscribe", "pattern": None, "channel": self.channels[0].encode(), "data": 1}

    def listen(self):
        for msg in self.messages:
            if isinstance(msg, Exception):
                raise msg
            yield msg

    def close(self):
        self.closed = True


def fake_redis(publish_error=None, messages=(), confirm=True):
    class FakeRedis:
        instances = []

        def __init__(self, host="localhost", port=6379, **kwargs):
            self.host = host
            self.port = port
            self.published = []
            self.closed = False
            self._pubsub = FakePubSub(list(messages), confirm=confirm)
            FakeRedis.instances.append(self)

        def publish(self, channel, message):
            if publish_error is not None:
                raise publish_error
            self.published.append((channel, message))
            return 1

        def pubsub(self):
            return self._pubsub

        def close(self):
            self.closed = True

    return FakeRedis


def test_publisher_publishes_count_times(monkeypatch, capsys):
    redis_cls = fake_redis()
    monkeypatch.setattr(redis_publisher.redis, "Redis", redis_cls)
    sleeps = []

    sent = redis_publisher.run_publisher(
        host="localhost", port=6379, channel="mychannel", message="Hello, Redis!", count=3, sleep=sleeps.append
    )

    assert sent == 3
    assert sleeps == [1.0, 1.0]
    r = redis_cls.instances[0]
    assert r.published == [("mychannel", "Hello, Redis!")] * 3
    assert r.closed
    assert "published to mychannel (1 subscriber(s)): Hello, Redis!" in capsys.readouterr().out


def test_publish_error_is_fatal(monkeypatch):
    redis_cls = fake_redis(publish_error=redis.ConnectionError("Connection refused"))
    monkeypatch.setattr(redis_publisher.redis, "Redis", redis_cls)

    with pytest.raises(BrokerSetupError, match="failed to publish: Connection refused"):
        redis_publisher.run_publisher(host="localhost", port=6379, channel="mychannel", message="x", count=1)
    assert redis_cls.instances[0].closed


def test_publisher_rejects_bad_count():
    with pytest.raises(ValueError):
        redis_publisher.run_publisher(host="localhost", port=6379, channel="mychannel", message="x", count=0)


def test_subscriber_prints_channel_and_payload(monkeypatch, capsys):
    messages = [
        {"type": "message", "pattern": None, "channel": b"mychannel", "data": b"Hello, Redis!"},
        {"type": "pong", "pattern": None, "channel": None, "data": b""},
        {"type": "message", "pattern": None, "channel": b"mychannel", "data": b"again"},
    ]
    redis_cls = fake_redis(messages=messages)
    monkeypatch.setattr(redis_subscriber.redis, "Redis", redis_cls)

    received = redis_subscriber.run_subscriber(host="localhost", port=6379, channel="mychannel")

    assert received == 2
    out = capsys.readouterr().out
    assert "mychannel Hello, Redis!" in out
    assert "mychannel again" in out
    r = redis_cls.instances[0]
    assert r.pubsub().channels == ["mychannel"]
    assert r.pubsub().closed and r.closed


def test_subscriber_requires_confirmation(monkeypatch):
    monkeypatch.setattr(redis_subscriber.redis, "Redis", fake_redis(confirm=False))

    with pytest.raises(BrokerSetupError, match="no confirmation"):
        redis_subscriber.run_subscriber(host="localhost", port=6379, channel="mychannel", confirm_timeout=0.01)


def test_subscriber_stops_when_connection_drops(monkeypatch, capsys):
    messages = [
        {"type": "message", "pattern": None, "channel": b"mychannel", "data": b"before"},
        redis.ConnectionError("Connection closed by server."),
        {"type": "message", "pattern": None, "channel": b"mychannel", "data": b"after"},
    ]
    redis_cls = fake_redis(messages=messages)
    monkeypatch.setattr(redis_subscriber.redis, "Redis", redis_cls)

    received = redis_subscriber.run_subscriber(host="localhost", port=6379, channel="mychannel")

    assert received == 1
    out = capsys.readouterr().out
    assert "mychannel before" in out
    assert "Subscription channel closed: Connection closed by server." in out
    assert "after" not in out
    r = redis_cls.instances[0]
    assert r.pubsub().closed and r.closed
