import sys
from typing import TextIO

from supervise.config import effective_settings as config

USAGE = """\
Usage: supervise [options] TIMEOUT COMMAND ARGS...

Runs COMMAND in its own process group and terminates the whole group once
TIMEOUT passes. TIMEOUT is a number of seconds (0 waits forever) or an
absolute time understood by `date -d`, e.g. 'tomorrow 03:00'.

Options:
  -h, --help             Show this help and exit.
  -N, -SIGNAME           Send signal N (or SIGNAME) on timeout instead of the
                         default TERM-then-KILL escalation.
  -c, --command=CMD      Run CMD through the shell after the timeout.
  -n, --no-signals       Send no signals on timeout, only run --command.
  -v, --verbose          Print more diagnostics (repeatable).
  -z, --zero             Exit 0 even when the timeout fired.
  -l, --log=FILE         Append diagnostics to FILE.

Exit status is the child's own, {timeout_code} on timeout, 0 if there was no
child to wait for, {usage_code} on usage errors.
"""


def print_usage(stream: TextIO = None) -> None:
    """Prints the usage text, by default to stderr."""
    stream = stream or sys.stderr
    stream.write(USAGE.format(timeout_code=config.TIMEOUT_EXIT_CODE, usage_code=config.USAGE_EXIT_CODE))
