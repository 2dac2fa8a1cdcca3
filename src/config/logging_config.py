# src/config/logging_config.py

"""Per-run logging for the lookup CLI and the HTTP server.

Every launch writes ``logs/run_YYYYMMDD_HHMMSS.log``. The file receives the
full ``product_lookup.*`` tree at DEBUG, so each provider attempt of a
cascade (``upcitemdb:0123...``, misses, swallowed tracebacks) can be
replayed after the fact. uvicorn's server and access loggers are attached
to the same file when serving.

The console only shows ``CONSOLE_LOG_LEVEL`` and above (WARNING unless
overridden), which keeps stdout clean for the CLI's JSON output.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | "
    "%(message)s"
)
_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers mirrored into the run file
_SERVER_LOGGERS = ("uvicorn.error", "uvicorn.access")
_SDK_LOGGERS = ("openai", "httpx")


def _console_level() -> int:
    """Resolve ``CONSOLE_LOG_LEVEL`` to a logging level, WARNING on junk."""
    level = logging.getLevelName(Settings.CONSOLE_LOG_LEVEL.upper())
    return level if isinstance(level, int) else logging.WARNING


def setup_logging() -> Path:
    """Attach the run file and console handlers, once per process.

    Returns:
        The path of the run log. Repeated calls (uvicorn's factory reload,
        tests) return the file already in use instead of opening another.
    """
    root_logger = logging.getLogger("product_lookup")
    for handler in root_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)

    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"run_{timestamp}.log"

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(_console_level())
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    for name in _SERVER_LOGGERS:
        logging.getLogger(name).addHandler(file_handler)

    # SDK request chatter stays out of the run file below WARNING
    for name in _SDK_LOGGERS:
        sdk_logger = logging.getLogger(name)
        sdk_logger.setLevel(logging.WARNING)
        sdk_logger.addHandler(file_handler)

    root_logger.info("Logging initialised, log file: %s", log_file)
    return log_file
