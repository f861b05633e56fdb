import os
import signal
import psutil
import logging
from typing import List, Optional, Union

log = logging.getLogger(__name__)

# psutil.Process.wait() returns None when there is no child left to reap.
NO_CHILD = None


#* --- Process Group Status ---
def group_exists(pgid: int) -> bool:
    """Checks whether any process is still a member of the process group."""
    try:
        os.killpg(pgid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Someone in the group is alive but not ours to signal.
        return True
    return True

def signal_group(pgid: int, sig: Union[int, signal.Signals]) -> bool:
    """
    Sends a signal to every member of a process group.

    :param pgid: The process group id (the group leader's pid).
    :param sig: The signal to deliver.
    :return: True if the signal was delivered, False if the group is already gone.
    """
    try:
        os.killpg(pgid, sig)
    except ProcessLookupError:
        log.debug(f"Process group {pgid} no longer exists, skipping {signal_name(sig)}.")
        return False
    except PermissionError as e:
        log.warning(f"Not permitted to send {signal_name(sig)} to process group {pgid}: {e}")
        return False
    log.info(f"Sent {signal_name(sig)} to process group {pgid}.")
    return True

def signal_name(sig: Union[int, signal.Signals]) -> str:
    try:
        return signal.Signals(sig).name
    except ValueError:
        return f"signal {int(sig)}"


#* --- Process Creation ---
class SupervisedProcess:
    """
    The single child owned by a supervision run.

    The child is started in a new session, so it leads its own process group
    and signals sent to that group never reach the supervisor itself.
    """

    def __init__(self, proc: psutil.Popen) -> None:
        self._proc = proc
        self.pid: int = proc.pid
        self.pgid: int = proc.pid
        self.reaped = False
        self.returncode: Optional[int] = None

    @classmethod
    def spawn(cls, argv: List[str]) -> "SupervisedProcess":
        """
        Launches the command with its exact argument vector, no shell involved.

        :param argv: The command and its arguments.
        :raises OSError: If the executable cannot be started.
        """
        if not argv:
            raise ValueError("Cannot spawn an empty command.")
        log.debug(f"Starting child: {argv!r}")
        proc = psutil.Popen(argv, start_new_session=True)
        log.info(f"Child started with PID: {proc.pid}")
        return cls(proc)

    def _record(self, returncode: Optional[int]) -> Optional[int]:
        self.reaped = True
        self.returncode = returncode
        if returncode is NO_CHILD:
            log.debug(f"No child left to wait for (PID: {self.pid}).")
        else:
            log.info(f"Child {self.pid} exited with returncode {int(returncode)}.")
        return returncode

    def wait(self, timeout: Optional[float] = None) -> Optional[int]:
        """
        Waits for the child to exit.

        :param timeout: Seconds to wait, 0 polls without blocking.
        :return: The returncode (negative for death by signal), or NO_CHILD.
        :raises psutil.TimeoutExpired: If the child is still running after `timeout`.
        """
        if self.reaped:
            return self.returncode
        return self._record(self._proc.wait(timeout=timeout))

    def reap_nowait(self) -> bool:
        """Collects the child's exit status if it has already exited. Returns True once reaped."""
        if self.reaped:
            return True
        try:
            self.wait(timeout=0)
        except psutil.TimeoutExpired:
            return False
        return True

    def group_exists(self) -> bool:
        return group_exists(self.pgid)

    def signal_group(self, sig: Union[int, signal.Signals]) -> bool:
        return signal_group(self.pgid, sig)
