import os
from pathlib import Path
from time import localtime, strftime
from typing import Any, Generator

from loguru import logger


def chunks(_list: list[Any], limit: int) -> Generator[list[Any], None, None]:
    """
    Split list into chunks no larger than the configured limit

    :param list: a list to break into chunks
    :param limit: maximum size of the returned list
    """
    for i in range(0, len(_list), limit):
        yield _list[i : i + limit]


def directories(mods_path: Path | str) -> list[Path]:
    """
    Return the immediate child directories of the given path.
    A path that cannot be listed yields an empty list.

    :param mods_path: directory to list
    :return: child directories, in directory entry order
    """
    try:
        with os.scandir(mods_path) as it:
            return [Path(entry.path) for entry in it if entry.is_dir()]
    except OSError as e:
        logger.warning(f"Unable to list directory {mods_path}: {e}")
        return []


def format_file_size(size_in_bytes: int) -> str:
    """Format bytes to a human-readable string."""
    if size_in_bytes < 1024:
        return f"{size_in_bytes} B"
    elif size_in_bytes < 1024 * 1024:
        return f"{size_in_bytes / 1024:.1f} KB"
    elif size_in_bytes < 1024 * 1024 * 1024:
        return f"{size_in_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_in_bytes / (1024 * 1024 * 1024):.2f} GB"


def format_time_display(timestamp: int | None) -> str:
    """
    Format a unix timestamp for display.

    :param timestamp: Unix timestamp to format, or None if unknown.
    :return: "YYYY-MM-DD HH:MM:SS", "Unknown" or "Invalid timestamp"
    """
    if timestamp is None:
        return "Unknown"

    try:
        return strftime("%Y-%m-%d %H:%M:%S", localtime(timestamp))
    except (ValueError, TypeError, OSError, OverflowError):
        return "Invalid timestamp"
