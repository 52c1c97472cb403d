import logging
import sys
from pathlib import Path
from typing import Literal

LOGGER_NAME = "rdp_launcher"
DEFAULT_LOGFILE = "./output.log"
LOG_FORMAT = "level=%(levelname)s name=%(name)s msg=%(message)s"

LogOut = Literal["stdout", "stderr", "file"]

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
}


def configure_logging(
    *,
    out: LogOut = "file",
    logfile: Path | str = DEFAULT_LOGFILE,
    level: str = "info",
) -> logging.Logger:
    """
    Configure the `rdp_launcher` logger with a single handler and return it.

    Args:
        out: Where to write log records: `stdout`, `stderr` or `file`. Defaults to `file`.
        logfile: The file to append to when `out="file"`. Defaults to `./output.log`.
        level: One of `debug`, `info`, `warn`, `error`, `fatal` or `panic`. Defaults to `info`.

    Raises:
        ValueError: If `out` or `level` is unknown.
        OSError: If `logfile` cannot be opened.
    """

    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}, expected one of {list(LOG_LEVELS)}")

    match out:
        case "stdout":
            handler = logging.StreamHandler(sys.stdout)
        case "stderr":
            handler = logging.StreamHandler(sys.stderr)
        case "file":
            handler = logging.FileHandler(Path(logfile), mode="a", encoding="utf-8")
        case _:
            raise ValueError(f"Unknown log output {out!r}, expected one of stdout, stderr, file")

    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    # replace any handler from a previous call
    logger = logging.getLogger(LOGGER_NAME)
    for old_handler in list(logger.handlers):
        logger.removeHandler(old_handler)
        old_handler.close()

    logger.addHandler(handler)
    logger.setLevel(LOG_LEVELS[level])
    logger.propagate = False

    return logger
