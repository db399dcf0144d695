"""Small producer/consumer programs for common message brokers.

Each module is a standalone program that talks to one broker through its
usual Python client library:
- ActiveMQ over STOMP (stomp.py)
- Kafka (confluent-kafka)
- NSQ (pynsq on tornado)
- Pulsar (pulsar-client)
- Redis pub/sub (redis-py)

See `python -m broker_examples.app -h` for the list of programs.
"""
