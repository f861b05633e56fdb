"""
This module contains the configuration settings for the supervise tool.
It defines exit codes, escalation timings, the external date utility and
the location of the runtime overrides file.
It is used throughout the package to ensure consistent settings.
"""

import os
import signal
import pathlib
from dotenv import load_dotenv

# Load environment variables from a .env file, the real environment wins
load_dotenv()

#* --- Core Paths ---
CONFIG_DIR = pathlib.Path(
    os.getenv("XDG_CONFIG_HOME", pathlib.Path.home() / ".config")
) / "supervise"
OVERRIDES_JSON_PATH = pathlib.Path(
    os.getenv("SUPERVISE_OVERRIDES", CONFIG_DIR / "overrides.json")
)

#* --- Exit Codes ---
TIMEOUT_EXIT_CODE = 254
USAGE_EXIT_CODE = 1
NO_CHILD_EXIT_CODE = 0
COMMAND_NOT_FOUND_EXIT_CODE = 127
COMMAND_NOT_EXECUTABLE_EXIT_CODE = 126

#* --- Supervisor Settings ---
POLL_INTERVAL = float(os.getenv("SUPERVISE_POLL_INTERVAL", "0.1"))  # seconds between wait slices
ESCALATION_ATTEMPTS = int(os.getenv("SUPERVISE_ESCALATION_ATTEMPTS", "3"))
ESCALATION_INTERVAL = float(os.getenv("SUPERVISE_ESCALATION_INTERVAL", "1.0"))  # seconds before force-killing
KILL_REAP_TIMEOUT = 5.0  # seconds to wait for the leader after the forceful signal
GRACEFUL_SIGNAL = signal.SIGTERM
FORCEFUL_SIGNAL = signal.SIGKILL
FORWARDED_SIGNALS = (signal.SIGINT, signal.SIGQUIT)

#* --- Deadline Parsing ---
DATE_COMMAND = os.getenv("SUPERVISE_DATE_COMMAND", "date")
DATE_COMMAND_TIMEOUT = 5  # seconds

#* --- Logging ---
LOG_FORMAT = "%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s"
PROCESS_TITLE_PREFIX = "supervise"

#* --- MODIFIABLE SETTINGS (Changeable through the overrides file) ---
MODIFIABLE_SETTINGS = {
    "POLL_INTERVAL",
    "ESCALATION_ATTEMPTS",
    "ESCALATION_INTERVAL",
    "DATE_COMMAND",
    "DATE_COMMAND_TIMEOUT",
    "TIMEOUT_EXIT_CODE",
    "LOG_FORMAT",
}
