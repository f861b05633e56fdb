"""
The Supervisor package.
Runs a single command under a deadline.

This package contains the central ProcessSupervisor class and its helper modules,
which together handle spawning the child in its own process group, resolving the
deadline, and escalating from a graceful to a forceful termination.
"""
from .errors import LogSetupError, SupervisorError, UsageError
from .deadline import Deadline, DateCommandResolver, resolve_deadline
from .models import ExitOutcome, OutcomeKind, PolicyKind, TerminationPolicy
from .supervisor import ProcessSupervisor

__all__ = [
    'ProcessSupervisor',
    'Deadline', 'DateCommandResolver', 'resolve_deadline',
    'ExitOutcome', 'OutcomeKind', 'PolicyKind', 'TerminationPolicy',
    'SupervisorError', 'UsageError', 'LogSetupError',
]
