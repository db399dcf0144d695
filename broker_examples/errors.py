"""Shared error type.

Every program treats setup failures (connect, authenticate, subscribe,
create producer) as fatal. We wrap the client library's exception so
`main()` can report it in one consistent line and exit.
"""

from __future__ import annotations


class BrokerSetupError(RuntimeError):
    """A fatal failure while talking to the broker."""

    def __init__(self, step: str, cause: object) -> None:
        # Some client exceptions (e.g. stomp.py's ConnectFailedException) carry no message.
        reason = str(cause) or type(cause).__name__
        super().__init__(f"failed to {step}: {reason}")
        self.step = step
        self.cause = cause


def exit_with(tag: str, err: BrokerSetupError) -> SystemExit:
    """Build the SystemExit raised by a program's `main()`."""
    return SystemExit(f"[{tag}] {err}")
