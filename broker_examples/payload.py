from __future__ import annotations

# Payload helpers.
#
# Every program sends or receives an opaque byte sequence. Client libraries
# differ on whether they hand us `bytes` or already-decoded `str`, so we
# normalize in one place.


def encode_payload(value: str | bytes) -> bytes:
    """Turn a CLI/literal payload into bytes.

    Raises:
        ValueError: for an empty payload.
    """
    data = value.encode("utf-8") if isinstance(value, str) else bytes(value)
    if not data:
        raise ValueError("payload must not be empty")
    return data


def payload_text(raw: str | bytes | None) -> str:
    """Render a received payload for logging."""
    if raw is None:
        return ""
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return bytes(raw).decode("utf-8", errors="replace")
    return str(raw)
