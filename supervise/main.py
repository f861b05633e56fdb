import sys
import logging
import setproctitle
from typing import List, Optional

from supervise.config import effective_settings as config
from supervise.console import parse_arguments, print_usage
from supervise.log.setup import setup_logging
from supervise.supervisor import ProcessSupervisor, SupervisorError, UsageError, resolve_deadline

log = logging.getLogger("supervise")


def main(argv: Optional[List[str]] = None) -> int:
    """
    The main entry point for the supervise command.

    :param argv: Command-line arguments without the program name, defaults to sys.argv[1:].
    :return int: The exit status for the process.
    """
    argv = sys.argv[1:] if argv is None else argv

    # Everything up to the spawn is fail-fast: no child exists yet.
    try:
        options = parse_arguments(argv)
        if options.show_help:
            print_usage(sys.stdout)
            return config.USAGE_EXIT_CODE

        setup_logging(options.verbosity, options.log_file)
        deadline = resolve_deadline(options.timeout)
    except UsageError as e:
        print(f"supervise: {e}", file=sys.stderr)
        print_usage(sys.stderr)
        return config.USAGE_EXIT_CODE
    except SupervisorError as e:
        print(f"supervise: {e}", file=sys.stderr)
        return config.USAGE_EXIT_CODE

    setproctitle.setproctitle(f"{config.PROCESS_TITLE_PREFIX}: {' '.join(options.command)}")
    log.debug(f"Supervising {options.command!r} with policy {options.policy()}.")

    supervisor = ProcessSupervisor(options.command, deadline, options.policy())
    outcome = supervisor.run()
    return outcome.exit_status


if __name__ == "__main__":
    sys.exit(main())
