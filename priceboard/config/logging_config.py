# priceboard/config/logging_config.py

"""Logging for the board, the admin editor and the price API.

Whichever of the three a launch runs, it writes one file under ``logs/``
named after the launch time (``logs/run_20261019_090000.log``).  The
Textual screen owns the terminal, so only warnings reach stderr.  When
``--serve`` runs the API, uvicorn is started without its own logging
config and its ``uvicorn.*`` records (startup, access lines, tracebacks)
go to the same run file as the ``priceboard.*`` ones.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from priceboard.config.settings import Settings

PROJECT_LOGGER = "priceboard"
SERVER_LOGGER = "uvicorn"

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | "
    "%(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _run_log_path(target_dir: Path) -> Path:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return target_dir / f"run_{timestamp}.log"


def setup_logging(logs_dir: Path | None = None) -> Path:
    """Attach the run-file and stderr handlers for this launch.

    Safe to call more than once: later calls keep the handlers of the
    first and return a fresh (unused) path.

    Returns:
        The :class:`~pathlib.Path` of the log file for this run.
    """
    target_dir: Path = logs_dir or Settings.LOGS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    log_file = _run_log_path(target_dir)

    project_logger = logging.getLogger(PROJECT_LOGGER)
    project_logger.setLevel(logging.DEBUG)

    if project_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    project_logger.addHandler(file_handler)
    project_logger.addHandler(console_handler)

    # API server records share the run file; they stop at "uvicorn"
    server_logger = logging.getLogger(SERVER_LOGGER)
    server_logger.setLevel(logging.INFO)
    server_logger.propagate = False
    server_logger.addHandler(file_handler)
    server_logger.addHandler(console_handler)

    project_logger.info("Logging initialised, log file: %s", log_file)

    return log_file
