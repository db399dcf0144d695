from __future__ import annotations

# Producer/consumer pair runner.
#
# Starts the consumer of one broker as a child process, gives it a moment to
# subscribe, then runs the matching producer to completion. The consumer keeps
# running until Ctrl+C (or until it exits on its own).
#
# Both programs keep their default destinations, so they meet on the broker.

import argparse
import os
import signal
import subprocess
import sys
import time
from dataclasses import dataclass

from .app import PAIRS, PROGRAMS


@dataclass
class Child:
    name: str
    proc: subprocess.Popen


def program_command(program: str, extra: list[str] | None = None) -> list[str]:
    """Command line that runs one program in a fresh interpreter."""
    module, _help = PROGRAMS[program]
    return [sys.executable, "-m", module, *(extra or [])]


def pair_commands(broker: str) -> tuple[list[str], list[str]]:
    """(producer, consumer) command lines for a broker."""
    if broker not in PAIRS:
        raise ValueError(f"unknown broker {broker!r}, expected one of {sorted(PAIRS)}")
    producer, consumer = PAIRS[broker]
    producer_extra = ["--count", "5"] if broker == "redis" else None
    return program_command(producer, producer_extra), program_command(consumer)


def run_pair(*, broker: str, startup_delay: float = 1.0) -> None:
    if startup_delay < 0:
        raise ValueError("startup_delay must be >= 0")

    producer_cmd, consumer_cmd = pair_commands(broker)

    # Own process group so Ctrl+C handling can stop the consumer cleanly.
    consumer = Child(name=PAIRS[broker][1], proc=subprocess.Popen(consumer_cmd, preexec_fn=os.setsid))
    print(f"[pair] started {consumer.name}(pid={consumer.proc.pid})")

    try:
        # Give the consumer time to subscribe before anything is sent.
        time.sleep(startup_delay)
        rc = consumer.proc.poll()
        if rc is not None:
            raise RuntimeError(f"{consumer.name} exited with code {rc}")

        producer_name = PAIRS[broker][0]
        print(f"[pair] running {producer_name}")
        rc = subprocess.run(producer_cmd, check=False).returncode
        if rc != 0:
            raise RuntimeError(f"{producer_name} exited with code {rc}")

        print("[pair] producer done, press Ctrl+C to stop the consumer.")
        while consumer.proc.poll() is None:
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass
    finally:
        _terminate(consumer)


def _terminate(child: Child, grace: float = 2.0) -> None:
    if child.proc.poll() is not None:
        return
    try:
        os.killpg(os.getpgid(child.proc.pid), signal.SIGTERM)
    except ProcessLookupError:
        return

    deadline = time.time() + grace
    while time.time() < deadline:
        if child.proc.poll() is not None:
            return
        time.sleep(0.1)

    try:
        os.killpg(os.getpgid(child.proc.pid), signal.SIGKILL)
    except ProcessLookupError:
        return
    child.proc.wait()


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a consumer and the matching producer against one broker")
    parser.add_argument("broker", choices=sorted(PAIRS))
    parser.add_argument("--startup-delay", type=float, default=1.0)
    args = parser.parse_args()

    run_pair(broker=args.broker, startup_delay=args.startup_delay)


if __name__ == "__main__":
    main()
