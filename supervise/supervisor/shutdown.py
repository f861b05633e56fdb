import time
import psutil
import logging
import subprocess
from typing import TYPE_CHECKING, Optional

from supervise.config import effective_settings as config

if TYPE_CHECKING:
    from .process_utils import SupervisedProcess

log = logging.getLogger(__name__)


def escalate_to_kill(
    process: "SupervisedProcess",
    attempts: Optional[int] = None,
    interval: Optional[float] = None,
) -> bool:
    """
    Gives the child's process group a bounded grace period, then force-kills it.

    Each attempt reaps the child without blocking and checks whether the
    process group is still populated. Once the attempts are used up, the
    whole group receives the forceful signal. Calling this against a group
    that is already gone is a no-op.

    :param process: The supervised child.
    :param attempts: Number of liveness checks, defaults to `ESCALATION_ATTEMPTS`.
    :param interval: Seconds to sleep between checks, defaults to `ESCALATION_INTERVAL`.
    :return: True if the forceful signal was sent.
    """
    attempts = config.ESCALATION_ATTEMPTS if attempts is None else attempts
    interval = config.ESCALATION_INTERVAL if interval is None else interval

    for attempt in range(1, attempts + 1):
        process.reap_nowait()
        if not process.group_exists():
            log.debug(f"Process group {process.pgid} is gone after {attempt} check(s).")
            return False
        log.debug(f"Process group {process.pgid} still alive (check {attempt}/{attempts}).")
        time.sleep(interval)

    log.info(f"Process group {process.pgid} did not terminate gracefully. Forcing shutdown...")
    killed = process.signal_group(config.FORCEFUL_SIGNAL)
    if killed:
        # SIGKILL lands asynchronously; collect the leader before returning.
        try:
            process.wait(timeout=config.KILL_REAP_TIMEOUT)
        except psutil.TimeoutExpired:
            log.error(f"Child {process.pid} was not reaped after {config.FORCEFUL_SIGNAL.name}.")
    return killed


def run_fallback_command(command: str) -> None:
    """
    Runs the user's fallback command through the shell after a timeout.
    Its exit status is logged and otherwise discarded.

    :param command: The shell command line to run.
    """
    log.info(f"Running fallback command: {command}")
    try:
        result = subprocess.run(command, shell=True, check=False)
        log.debug(f"Fallback command exited with {result.returncode}.")
    except OSError as e:
        log.error(f"Failed to run fallback command '{command}': {e}")
