"""Destination names and default addresses.

We keep the defaults in one place so producers and consumers of the same
broker agree on where to meet.

Destination formats:
- STOMP: `/queue/<name>` (point-to-point) or `/topic/<name>` (broadcast)
- Kafka: plain topic name
- NSQ: topic + channel, both limited to `[.a-zA-Z0-9_-]` (max 64 chars),
  optionally suffixed with `#ephemeral`
- Pulsar: `persistent://<tenant>/<namespace>/<topic>`; a bare name is
  shorthand for `persistent://public/default/<name>`
- Redis: plain channel name
"""

from __future__ import annotations

import re

STOMP_HOST = "localhost"
STOMP_PORT = 61613
STOMP_DESTINATION = "/queue/test"

KAFKA_BOOTSTRAP_SERVERS = "localhost:9094"
KAFKA_TOPIC = "reevu.test"
KAFKA_CLOUD_TOPIC = "coins"
KAFKA_GROUP_ID = "reevu-test-group"

NSQD_ADDRESS = "localhost:4150"
NSQ_TOPIC = "test"
NSQ_CHANNEL = "test_channel"

PULSAR_URL = "pulsar://localhost:6650"
PULSAR_TOPIC = "my-topic"
PULSAR_SUBSCRIPTION = "my-subscription"

REDIS_HOST = "localhost"
REDIS_PORT = 6379
REDIS_CHANNEL = "mychannel"

_NSQ_NAME_RE = re.compile(r"^[.a-zA-Z0-9_-]+(#ephemeral)?$")


def stomp_queue(name: str) -> str:
    return f"/queue/{name}"


def stomp_topic(name: str) -> str:
    return f"/topic/{name}"


def pulsar_topic(name: str, tenant: str = "public", namespace: str = "default", persistent: bool = True) -> str:
    """Fully qualified Pulsar topic name."""
    scheme = "persistent" if persistent else "non-persistent"
    return f"{scheme}://{tenant}/{namespace}/{name}"


def valid_nsq_name(name: str) -> bool:
    """Check an NSQ topic or channel name the way nsqd does."""
    if not 0 < len(name) <= 64:
        return False
    return _NSQ_NAME_RE.match(name) is not None

