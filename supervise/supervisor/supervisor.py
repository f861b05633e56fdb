import time
import psutil
import signal
import logging
import threading
from typing import Dict, List, Optional

from supervise.config import effective_settings as config
from supervise.supervisor import shutdown
from supervise.supervisor.deadline import Deadline
from supervise.supervisor.models import ExitOutcome, TerminationPolicy, status_from_returncode
from supervise.supervisor.process_utils import NO_CHILD, SupervisedProcess, signal_name

log = logging.getLogger(__name__)


class ProcessSupervisor:
    """
    Runs one command under a deadline and owns its process group.

    Signal handlers only record what arrived; the termination work itself is
    done by the supervision loop on the main thread, between short waits on
    the child.
    """

    def __init__(
        self,
        argv: List[str],
        deadline: Deadline,
        policy: Optional[TerminationPolicy] = None,
        poll_interval: Optional[float] = None,
        escalation_attempts: Optional[int] = None,
        escalation_interval: Optional[float] = None,
    ) -> None:
        if not argv:
            raise ValueError("A command to supervise is required.")

        self.argv = list(argv)
        self.deadline = deadline
        self.policy = policy or TerminationPolicy()
        self.poll_interval = poll_interval if poll_interval is not None else config.POLL_INTERVAL
        self.escalation_attempts = escalation_attempts if escalation_attempts is not None else config.ESCALATION_ATTEMPTS
        self.escalation_interval = escalation_interval if escalation_interval is not None else config.ESCALATION_INTERVAL

        self.process: Optional[SupervisedProcess] = None
        self.outcome: Optional[ExitOutcome] = None

        self.interrupt_received = threading.Event()
        self.interrupt_signal: Optional[int] = None
        self._interrupt_handled = False
        self._previous_handlers: Dict[int, object] = {}

    def run(self) -> ExitOutcome:
        """
        Spawns the child and supervises it until it exits or the deadline passes.

        :return: The outcome of the run, produced exactly once.
        """
        if self.outcome is not None:
            raise RuntimeError("A supervisor can only run once.")

        self._install_signal_handlers()
        try:
            try:
                self.process = SupervisedProcess.spawn(self.argv)
            except OSError as e:
                log.error(f"Failed to start '{self.argv[0]}': {e}")
                self.outcome = ExitOutcome.exited(_spawn_failure_status(e))
                return self.outcome

            expires = self.deadline.monotonic_expiry()
            if not self.deadline.disabled:
                log.debug(f"Deadline armed for {self.deadline.seconds:.0f}s.")
            try:
                self.outcome = self._supervision_loop(expires)
            except Exception as e:
                log.critical(f"Critical error while supervising PID {self.process.pid}: {e}", exc_info=True)
                self.process.signal_group(config.GRACEFUL_SIGNAL)
                self._escalate()
                raise
        finally:
            self._restore_signal_handlers()

        log.info(f"Supervision finished: {self.outcome.kind.value}, exit status {self.outcome.exit_status}.")
        return self.outcome

    def _supervision_loop(self, expires: float) -> ExitOutcome:
        """Waits for the child in short slices, reacting to interrupts and the deadline."""
        while True:
            if self.interrupt_received.is_set() and not self._interrupt_handled:
                self._handle_interrupt()

            remaining = expires - time.monotonic()
            if remaining <= 0:
                return self._handle_deadline()

            try:
                returncode = self.process.wait(timeout=min(remaining, self.poll_interval))
            except psutil.TimeoutExpired:
                continue

            if returncode is NO_CHILD:
                return ExitOutcome.no_child()
            return ExitOutcome.exited(status_from_returncode(returncode))

    def _handle_interrupt(self) -> None:
        """Forwards an interrupt/quit to the child's group and escalates to a kill."""
        self._interrupt_handled = True
        log.info(
            f"Received {signal_name(self.interrupt_signal)}, terminating process group {self.process.pgid}."
        )
        self.process.signal_group(config.GRACEFUL_SIGNAL)
        self._escalate()

    def _handle_deadline(self) -> ExitOutcome:
        """Applies the termination policy once the deadline has passed."""
        log.info(f"Deadline of {self.deadline.seconds:.0f}s reached for PID {self.process.pid}.")

        timeout_signal = self.policy.timeout_signal
        if timeout_signal is not None:
            self.process.signal_group(timeout_signal)
        if self.policy.escalates:
            self._escalate()
        if self.policy.fallback_command:
            shutdown.run_fallback_command(self.policy.fallback_command)

        self.process.reap_nowait()
        return ExitOutcome.timed_out(self.policy.force_success)

    def _escalate(self) -> bool:
        return shutdown.escalate_to_kill(
            self.process,
            attempts=self.escalation_attempts,
            interval=self.escalation_interval,
        )

    #* --- Signal Handling ---
    def _on_forwarded_signal(self, signum: int, frame) -> None:
        """Signal handler: records the signal for the supervision loop."""
        self.interrupt_signal = signum
        self.interrupt_received.set()

    def _install_signal_handlers(self) -> None:
        for sig in config.FORWARDED_SIGNALS:
            self._previous_handlers[sig] = signal.signal(sig, self._on_forwarded_signal)

    def _restore_signal_handlers(self) -> None:
        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler)
        self._previous_handlers.clear()


def _spawn_failure_status(error: OSError) -> int:
    """Maps an exec failure to the status a shell would report for it."""
    if isinstance(error, FileNotFoundError):
        return config.COMMAND_NOT_FOUND_EXIT_CODE
    return config.COMMAND_NOT_EXECUTABLE_EXIT_CODE
