import re
import sys
from logging import WARNING, getLogger

import loguru
from loguru import logger

from baromods.utils.app_info import AppInfo

# urllib3 logs full request urls at debug level
getLogger("urllib3").setLevel(WARNING)

_WINDOWS_HOME = re.compile(r"([A-Za-z]:\\Users\\)[^\\]+\\")
_POSIX_HOME = re.compile(r"(/home/|/Users/)[^/]+/")


def anonymize_path(message: str) -> str:
    """
    Hide the user name in any home directory path of a message.
    The drive letter and the rest of the path are kept.
    """
    message = _WINDOWS_HOME.sub(r"\1...\\", message)
    return _POSIX_HOME.sub(r"\1.../", message)


def formatter(record: "loguru.Record") -> str:
    """Custom formatter for loguru logger"""
    format_string = (
        "[{level}]"
        "[{time:YYYY-MM-DD HH:mm:ss}]"
        "[{process.id}]"
        "[{thread.name}]"
        "[{module}]"
        "[{function}][{line}]"
        " : "
    )

    record["extra"]["anonymized_message"] = anonymize_path(record["message"])
    return format_string + "{extra[anonymized_message]}\n{exception}"


def rotate_log_file() -> None:
    """
    Keep the log of the previous run as <app>.old.log, the current run
    writes a fresh <app>.log.
    """
    log_file = AppInfo().user_log_folder / (AppInfo().app_name + ".log")
    old_log_file = AppInfo().user_log_folder / (AppInfo().app_name + ".old.log")
    if old_log_file.is_file():
        old_log_file.unlink()
    if log_file.is_file():
        log_file.rename(old_log_file)


def setup_logging(debug: bool = False, level: str = "INFO") -> None:
    """
    Replace the default loguru sink with a log file in the user log folder and
    a WARNING or higher stderr sink.

    :param debug: force DEBUG level in the log file
    :param level: log file level when not in debug mode
    """
    if AppInfo().debug_file.is_file():
        debug = True

    rotate_log_file()
    log_file = AppInfo().user_log_folder / (AppInfo().app_name + ".log")

    logger.remove()
    logger.add(
        log_file,
        level="DEBUG" if debug else level,
        format=formatter,
        encoding="utf-8",
    )
    logger.add(
        sys.stderr,
        level="WARNING",
        format=formatter,
        colorize=False,
    )
    logger.debug(
        f"Logging to {log_file}, {AppInfo().app_name} {AppInfo().app_version}"
    )
