import sys

import pytest
from stomp.exception import ConnectFailedException

from broker_examples import stomp_client, stomp_consumer, stomp_producer
from broker_examples.errors import BrokerSetupError
from broker_examples.stomp_client import CLOSED, StompClient


class FakeFrame:
    def __init__(self, body, sub_id="1"):
        self.body = body
        self.headers = {"subscription": sub_id}


def fake_connection(frames=(), fail_connect=False, close_after_frames=True):
    """Build a stand-in for stomp.Connection.

    On subscribe, it delivers `frames` through the listener (as the receiver
    thread would) and then reports a disconnect.
    """

    class FakeConnection:
        instances = []

        def __init__(self, host_and_ports, **kwargs):
            self.host_and_ports = host_and_ports
            self.listener = None
            self.credentials = None
            self.sent = []
            self.subscribed = []
            self.unsubscribed = []
            self.disconnected = False
            FakeConnection.instances.append(self)

        def set_listener(self, name, listener):
            self.listener = listener

        def connect(self, username=None, passcode=None, wait=False):
            if fail_connect:
                raise ConnectFailedException()
            self.credentials = (username, passcode)

        def send(self, destination, body, content_type=None):
            self.sent.append((destination, body, content_type))

        def subscribe(self, destination, id, ack="auto"):
            self.subscribed.append((destination, id, ack))
            for body in frames:
                self.listener.on_message(FakeFrame(body, id))
            if close_after_frames:
                self.listener.on_disconnected()

        def unsubscribe(self, id):
            self.unsubscribed.append(id)

        def disconnect(self):
            self.disconnected = True
            self.listener.on_disconnected()

    return FakeConnection


def test_producer_sends_text_message(monkeypatch, capsys):
    conn_cls = fake_connection()
    monkeypatch.setattr(stomp_client.stomp, "Connection", conn_cls)

    stomp_producer.send_message(
        host="localhost", port=61613, destination="/queue/test", body="Hello, ActiveMQ!", login="u", passcode="p"
    )

    conn = conn_cls.instances[0]
    assert conn.host_and_ports == [("localhost", 61613)]
    assert conn.credentials == ("u", "p")
    assert conn.sent == [("/queue/test", b"Hello, ActiveMQ!", "text/plain")]
    assert conn.disconnected
    assert "Message sent to /queue/test: Hello, ActiveMQ!" in capsys.readouterr().out


def test_producer_rejects_empty_body_before_connecting(monkeypatch):
    conn_cls = fake_connection()
    monkeypatch.setattr(stomp_client.stomp, "Connection", conn_cls)

    with pytest.raises(ValueError):
        stomp_producer.send_message(host="localhost", port=61613, destination="/queue/test", body="")
    assert conn_cls.instances == []


def test_connect_failure_is_setup_error(monkeypatch):
    monkeypatch.setattr(stomp_client.stomp, "Connection", fake_connection(fail_connect=True))

    with pytest.raises(BrokerSetupError, match="failed to connect to STOMP server"):
        stomp_producer.send_message(host="localhost", port=61613, destination="/queue/test", body="x")


def test_producer_main_exits_on_connect_failure(monkeypatch):
    monkeypatch.setattr(stomp_client.stomp, "Connection", fake_connection(fail_connect=True))
    monkeypatch.setattr(sys, "argv", ["stomp_producer"])

    with pytest.raises(SystemExit) as exc:
        stomp_producer.main()
    assert exc.value.code == "[stomp producer] failed to connect to STOMP server: ConnectFailedException"


def test_consumer_prints_until_subscription_closes(monkeypatch, capsys):
    conn_cls = fake_connection(frames=["first", "", "second"])
    monkeypatch.setattr(stomp_client.stomp, "Connection", conn_cls)

    received = stomp_consumer.run_consumer(host="localhost", port=61613, destination="/queue/test")

    assert received == 2
    out = capsys.readouterr().out
    assert "Received message: first" in out
    assert "Received nil message" in out
    assert "Received message: second" in out
    assert "Subscription channel closed" in out

    conn = conn_cls.instances[0]
    assert conn.subscribed == [("/queue/test", "1", "auto")]
    assert conn.disconnected


def test_consumer_stops_at_max_messages(monkeypatch):
    conn_cls = fake_connection(frames=["a", "b", "c"], close_after_frames=False)
    monkeypatch.setattr(stomp_client.stomp, "Connection", conn_cls)

    received = stomp_consumer.run_consumer(
        host="localhost", port=61613, destination="/queue/test", max_messages=2
    )

    assert received == 2
    conn = conn_cls.instances[0]
    assert conn.unsubscribed == ["1"]
    assert conn.disconnected


def test_subscription_stays_closed(monkeypatch):
    monkeypatch.setattr(stomp_client.stomp, "Connection", fake_connection(frames=["only"]))

    client = StompClient(host="localhost", port=61613)
    client.connect()
    sub = client.subscribe("/queue/test")

    assert sub.get().body == "only"
    assert sub.get() is CLOSED
    assert sub.get() is CLOSED
    client.disconnect()
