"""
Plain value types shared by the supervisor modules: the termination policy
applied on deadline expiry and the outcome of a supervision run.
"""
from signal import Signals
from enum import Enum
from dataclasses import dataclass
from typing import Optional

from supervise.config import effective_settings as config


class PolicyKind(Enum):
    DEFAULT = "default"  # graceful signal, then forceful escalation
    SIGNAL = "signal"    # a single explicitly chosen signal
    NONE = "none"        # no signal, fallback command only


@dataclass(frozen=True)
class TerminationPolicy:
    """What to do with the child's process group once the deadline passes."""
    kind: PolicyKind = PolicyKind.DEFAULT
    signal: Optional[Signals] = None
    fallback_command: Optional[str] = None
    force_success: bool = False

    def __post_init__(self):
        if self.kind is PolicyKind.SIGNAL and self.signal is None:
            raise ValueError("An explicit-signal policy needs a signal.")
        if self.kind is not PolicyKind.SIGNAL and self.signal is not None:
            raise ValueError(f"A '{self.kind.value}' policy cannot carry an explicit signal.")

    @property
    def timeout_signal(self) -> Optional[Signals]:
        """The signal sent to the process group when the deadline expires, if any."""
        if self.kind is PolicyKind.DEFAULT:
            return config.GRACEFUL_SIGNAL
        return self.signal

    @property
    def escalates(self) -> bool:
        return self.kind is PolicyKind.DEFAULT


class OutcomeKind(Enum):
    EXITED = "exited"
    TIMED_OUT = "timed_out"
    NO_CHILD = "no_child"


@dataclass(frozen=True)
class ExitOutcome:
    """The single externally observable result of a supervision run."""
    kind: OutcomeKind
    exit_status: int

    @classmethod
    def exited(cls, status: int) -> "ExitOutcome":
        return cls(OutcomeKind.EXITED, status)

    @classmethod
    def timed_out(cls, force_success: bool = False) -> "ExitOutcome":
        return cls(OutcomeKind.TIMED_OUT, 0 if force_success else config.TIMEOUT_EXIT_CODE)

    @classmethod
    def no_child(cls) -> "ExitOutcome":
        return cls(OutcomeKind.NO_CHILD, config.NO_CHILD_EXIT_CODE)


def status_from_returncode(returncode: int) -> int:
    """Maps a returncode (negative for death by signal) to a shell-style exit status."""
    if returncode < 0:
        return 128 + (-returncode)
    return returncode
