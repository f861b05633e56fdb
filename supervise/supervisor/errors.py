class SupervisorError(Exception):
    """Base class for failures that stop the supervisor before a child is spawned."""


class UsageError(SupervisorError):
    """Bad or conflicting command-line arguments, or a timeout that cannot be honoured."""


class LogSetupError(SupervisorError):
    """The requested diagnostic log could not be opened."""
