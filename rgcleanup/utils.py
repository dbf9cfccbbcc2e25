"""
Utility helpers for rg-cleanup.
"""

import io
import logging
import sys
from typing import Iterable

from packaging.version import InvalidVersion, Version
from rich.cells import cell_len
from rich.console import Console
from rich.table import Table

from rgcleanup.config import LOG_DATE_FORMAT, LOG_FORMAT, LOG_LEVEL

_HANDLER_TAG = "_rgcleanup_handler"


def setup_logging(log_file: str, level: str = LOG_LEVEL) -> logging.Logger:
    """Send the rgcleanup logger tree to stdout and append it to log_file.

    Safe to call more than once: handlers installed by a previous call
    are replaced, not duplicated.
    """
    logger = logging.getLogger("rgcleanup")
    logger.setLevel(level.upper())
    logger.propagate = False

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    stream_handler = logging.StreamHandler(sys.stdout)
    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    for handler in (stream_handler, file_handler):
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_TAG, True)
        logger.addHandler(handler)

    return logger


def version_at_least(current: str, required: str) -> bool:
    """True if `current` sorts at or above `required` as a version.

    Unparseable versions never satisfy the requirement.
    """
    try:
        return Version(current) >= Version(required)
    except InvalidVersion:
        return False


def render_resource_table(resources: Iterable) -> list[str]:
    """Render (Name, Type, Location) rows as plain-text table lines.

    The console is sized to the widest row so long names and types are
    never truncated.
    """
    headers = ("Name", "Type", "Location")
    rows = [(r.name, r.type, r.location) for r in resources]

    table = Table(box=None, show_edge=False, pad_edge=False)
    for header in headers:
        table.add_column(header, overflow="fold")
    for row in rows:
        table.add_row(*row)

    widths = [
        max([cell_len(header)] + [cell_len(row[i]) for row in rows])
        for i, header in enumerate(headers)
    ]
    # one cell of padding either side of every column
    width = sum(widths) + 2 * len(headers) + 1

    console = Console(file=io.StringIO(), width=max(width, 80), color_system=None)
    console.print(table)
    text = console.file.getvalue()
    return [line.rstrip() for line in text.splitlines() if line.strip()]


def log_lines(logger: logging.Logger, lines: Iterable[str], level: int = logging.INFO) -> None:
    for line in lines:
        logger.log(level, line)
