import math
import time
import logging
import subprocess
from dataclasses import dataclass
from typing import Callable, Optional

from supervise.config import effective_settings as config
from supervise.supervisor.errors import UsageError

log = logging.getLogger(__name__)

# Turns an absolute time expression into epoch seconds, raising ValueError on failure.
DateResolver = Callable[[str], float]


class DateCommandResolver:
    """
    Resolves absolute time expressions with the external `date` utility,
    e.g. `date -d 'tomorrow 03:00' +%s`.
    """

    def __init__(self, command: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self.command = command or config.DATE_COMMAND
        self.timeout = timeout if timeout is not None else config.DATE_COMMAND_TIMEOUT

    def __call__(self, expression: str) -> float:
        cmd = [self.command, "-d", expression, "+%s"]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout, check=False)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise ValueError(f"could not run '{self.command}': {e}") from e

        if result.returncode != 0:
            raise ValueError(result.stderr.strip() or f"'{self.command}' exited with {result.returncode}")
        try:
            return float(result.stdout.strip())
        except ValueError as e:
            raise ValueError(f"unexpected output from '{self.command}': {result.stdout.strip()!r}") from e


@dataclass(frozen=True)
class Deadline:
    """A single absolute point in time, resolved once at startup."""
    expires_at: float  # epoch seconds
    seconds: float     # remaining at resolution time

    @property
    def disabled(self) -> bool:
        return math.isinf(self.seconds)

    def monotonic_expiry(self, resolved_at_monotonic: Optional[float] = None) -> float:
        """Converts the deadline into a time.monotonic() value, starting the clock now."""
        start = resolved_at_monotonic if resolved_at_monotonic is not None else time.monotonic()
        return start + self.seconds


def resolve_deadline(timeout: str, now: Optional[float] = None, resolver: Optional[DateResolver] = None) -> Deadline:
    """
    Resolves a TIMEOUT argument into a Deadline.

    :param timeout: Non-negative integer seconds (0 disables the deadline), or an absolute time expression.
    :param now: The current epoch time, defaults to time.time().
    :param resolver: Callable turning an absolute expression into epoch seconds.
    :return: The resolved Deadline.
    :raises UsageError: If the expression cannot be parsed or lies in the past.
    """
    now = time.time() if now is None else now
    timeout = timeout.strip()
    if not timeout:
        raise UsageError("TIMEOUT must not be empty.")

    if timeout.isascii() and timeout.isdigit():
        seconds = int(timeout)
        if seconds == 0:
            log.debug("Deadline disabled, waiting for the child indefinitely.")
            return Deadline(expires_at=math.inf, seconds=math.inf)
        log.debug(f"Relative deadline of {seconds}s.")
        return Deadline(expires_at=now + seconds, seconds=float(seconds))

    resolver = resolver or DateCommandResolver()
    try:
        timestamp = resolver(timeout)
    except ValueError as e:
        raise UsageError(f"cannot parse time '{timeout}': {e}") from e

    seconds = timestamp - now
    if seconds < 0:
        raise UsageError(f"deadline '{timeout}' is in the past ({-seconds:.0f}s ago).")
    log.debug(f"Absolute deadline '{timeout}' resolves to {timestamp:.0f} ({seconds:.0f}s from now).")
    return Deadline(expires_at=timestamp, seconds=seconds)
