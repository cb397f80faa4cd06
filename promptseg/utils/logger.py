import datetime
import logging
import os
import sys
from pathlib import Path

import termcolor

__appname__ = "promptseg"


def resolve_path(path: Path | str) -> Path:
    return Path(path).expanduser().resolve()


def resolve_logs_dir() -> Path:
    env_dir = os.environ.get("PROMPTSEG_LOG_DIR", "").strip()
    if env_dir:
        return resolve_path(env_dir)
    return resolve_path(Path.home() / f"{__appname__}_logs")


if os.name == "nt":  # Windows
    import colorama
    colorama.init()


COLORS = {
    "WARNING": "yellow",
    "INFO": "white",
    "DEBUG": "blue",
    "CRITICAL": "red",
    "ERROR": "red",
}


class ColoredFormatter(logging.Formatter):
    def __init__(self, fmt, use_color=True):
        logging.Formatter.__init__(self, fmt)
        self.use_color = use_color

    def format(self, record):
        levelname = record.levelname
        if self.use_color and levelname in COLORS:

            def colored(text):
                return termcolor.colored(
                    text,
                    color=COLORS[levelname],
                    attrs={"bold": True},
                )

            record.levelname2 = colored("{:<7}".format(record.levelname))
            record.message2 = colored(record.getMessage())

            asctime2 = datetime.datetime.fromtimestamp(record.created)
            record.asctime2 = termcolor.colored(asctime2, color="green")

            record.module2 = termcolor.colored(record.module, color="cyan")
            record.funcName2 = termcolor.colored(record.funcName, color="cyan")
            record.lineno2 = termcolor.colored(record.lineno, color="cyan")
        else:
            record.levelname2 = "{:<7}".format(record.levelname)
            record.message2 = record.getMessage()
            record.module2 = record.module
            record.funcName2 = record.funcName
            record.lineno2 = record.lineno
        return logging.Formatter.format(self, record)


def _add_file_handler(target: logging.Logger) -> None:
    # File logging is optional; an unwritable home must not break import.
    logs_dir = resolve_logs_dir()
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        current_date = datetime.datetime.now().strftime("%Y-%m-%d")
        log_file = logs_dir / f"{__appname__}_{current_date}.log"
        file_handler = logging.FileHandler(log_file)
    except OSError as exc:
        target.debug("File logging disabled (%s)", exc)
        return
    file_format = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(module)s:%(funcName)s:%(lineno)d - %(message)s"
    )
    file_handler.setFormatter(file_format)
    target.addHandler(file_handler)


logger = logging.getLogger(__appname__)
logger.setLevel(logging.INFO)

if not logger.handlers:
    # Configure logging to write to stderr
    stream_handler = logging.StreamHandler(sys.stderr)
    handler_format = ColoredFormatter(
        "%(asctime)s [%(levelname2)s] %(module2)s:%(funcName2)s:%(lineno2)s"
        "- %(message2)s",
        use_color=sys.stderr.isatty(),
    )
    stream_handler.setFormatter(handler_format)
    logger.addHandler(stream_handler)
    _add_file_handler(logger)
