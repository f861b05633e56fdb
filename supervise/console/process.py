from signal import Signals
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Optional

from supervise.supervisor.errors import UsageError
from supervise.supervisor.models import PolicyKind, TerminationPolicy

log = logging.getLogger(__name__)

FLAG_LETTERS = {"h": "show_help", "n": "no_signals", "z": "zero"}
VALUE_LETTERS = {"c": "fallback_command", "l": "log_file"}
LONG_FLAGS = {"help": "show_help", "no-signals": "no_signals", "zero": "zero"}
LONG_VALUES = {"command": "fallback_command", "log": "log_file", "signal": "signal"}


@dataclass
class CommandLine:
    """Everything parsed from `supervise [options] TIMEOUT COMMAND ARGS...`."""
    timeout: Optional[str] = None
    command: List[str] = field(default_factory=list)
    signals: List[Signals] = field(default_factory=list)
    no_signals: bool = False
    fallback_command: Optional[str] = None
    verbosity: int = 0
    zero: bool = False
    log_file: Optional[Path] = None
    show_help: bool = False

    @property
    def signal(self) -> Optional[Signals]:
        return self.signals[0] if self.signals else None

    def policy(self) -> TerminationPolicy:
        """Builds the termination policy the options describe."""
        if self.signal is not None:
            kind = PolicyKind.SIGNAL
        elif self.no_signals:
            kind = PolicyKind.NONE
        else:
            kind = PolicyKind.DEFAULT
        return TerminationPolicy(
            kind=kind,
            signal=self.signal,
            fallback_command=self.fallback_command,
            force_success=self.zero,
        )


def parse_signal(text: str) -> Signals:
    """
    Parses a signal given as a number or a name, with or without the SIG prefix.

    :param text: e.g. '9', 'KILL' or 'SIGKILL'.
    :return: The matching signal.
    :raises UsageError: If no such signal exists.
    """
    if text.isdigit():
        try:
            return Signals(int(text))
        except ValueError:
            raise UsageError(f"unknown signal number '{text}'.") from None

    name = text.upper()
    if not name.startswith("SIG"):
        name = "SIG" + name
    try:
        return Signals[name]
    except KeyError:
        raise UsageError(f"unknown signal '{text}'.") from None


def _set_option(options: CommandLine, attr: str, value: Optional[str] = None) -> None:
    if attr == "signal":
        options.signals.append(parse_signal(value))
    elif attr == "log_file":
        options.log_file = Path(value)
    elif value is not None:
        setattr(options, attr, value)
    else:
        setattr(options, attr, True)


def _take_value(args: List[str], index: int, option: str) -> str:
    if index >= len(args):
        raise UsageError(f"option '{option}' requires an argument.")
    return args[index]


def _parse_long_option(options: CommandLine, args: List[str], index: int) -> int:
    """Parses `--name` or `--name=value` at `index`. Returns the index of the next argument."""
    name, has_value, value = args[index][2:].partition("=")
    index += 1

    if name == "verbose":
        if has_value:
            raise UsageError("option '--verbose' does not take an argument.")
        options.verbosity += 1
    elif name in LONG_FLAGS:
        if has_value:
            raise UsageError(f"option '--{name}' does not take an argument.")
        _set_option(options, LONG_FLAGS[name])
    elif name in LONG_VALUES:
        if not has_value:
            value = _take_value(args, index, f"--{name}")
            index += 1
        _set_option(options, LONG_VALUES[name], value)
    else:
        raise UsageError(f"unknown option '--{name}'.")
    return index


def _parse_short_option(options: CommandLine, args: List[str], index: int) -> int:
    """
    Parses a short option cluster at `index`: `-9`, `-KILL`, `-vvz`, `-cCMD`, `-l FILE`.
    Returns the index of the next argument.
    """
    body = args[index][1:]
    index += 1

    # Signal options: a number, or an upper-case name such as HUP or SIGHUP.
    if body.isdigit() or body[0].isupper():
        options.signals.append(parse_signal(body))
        return index

    for position, letter in enumerate(body):
        if letter == "v":
            options.verbosity += 1
        elif letter in FLAG_LETTERS:
            _set_option(options, FLAG_LETTERS[letter])
        elif letter in VALUE_LETTERS:
            value = body[position + 1:]
            if not value:
                value = _take_value(args, index, f"-{letter}")
                index += 1
            _set_option(options, VALUE_LETTERS[letter], value)
            break
        else:
            raise UsageError(f"unknown option '-{letter}'.")
    return index


def parse_arguments(args: List[str]) -> CommandLine:
    """
    Parses the supervisor's command line.

    Options end at `--` or at the first positional argument (TIMEOUT); every
    argument after TIMEOUT belongs to the child, dashes included.

    :param args: The arguments, without the program name.
    :return: The parsed CommandLine.
    :raises UsageError: On unknown or conflicting options, or missing TIMEOUT/COMMAND.
    """
    options = CommandLine()
    index = 0
    while index < len(args):
        arg = args[index]
        if arg == "--":
            index += 1
            break
        if not arg.startswith("-") or arg == "-":
            break
        if arg.startswith("--"):
            index = _parse_long_option(options, args, index)
        else:
            index = _parse_short_option(options, args, index)

    log.debug(f"Parsed options: {options}")
    if options.show_help:
        return options

    if len(options.signals) > 1:
        raise UsageError("only one signal may be given.")
    if options.signals and options.no_signals:
        raise UsageError("an explicit signal cannot be combined with --no-signals.")

    positional = args[index:]
    if not positional:
        raise UsageError("missing TIMEOUT.")
    if len(positional) < 2:
        raise UsageError("missing COMMAND.")

    options.timeout = positional[0]
    options.command = positional[1:]
    return options
