# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Logging setup: coloured [+]/[!]/[-] console lines through click, plus an
optional plain log file.
"""
import logging
import os
from pathlib import Path
from typing import Optional

import click

_PREFIXES = {
    logging.DEBUG: ("[*]", {"dim": True}),
    logging.INFO: ("[+]", {"fg": "green"}),
    logging.WARNING: ("[!]", {"fg": "yellow"}),
    logging.ERROR: ("[-]", {"fg": "red"}),
    logging.CRITICAL: ("[-]", {"fg": "red", "bold": True}),
}


class ClickHandler(logging.Handler):
    """
    Writes records through click.echo. Errors go to stderr; click strips the
    colour codes when the stream is not a terminal.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            prefix, style = _PREFIXES.get(record.levelno, _PREFIXES[logging.INFO])
            click.echo(f"{click.style(prefix, **style)} {self.format(record)}",
                       err=record.levelno >= logging.ERROR)
        except Exception:
            self.handleError(record)


class PlainFormatter(logging.Formatter):
    """Drops ANSI styling so the log file stays readable."""

    def format(self, record: logging.LogRecord) -> str:
        return click.unstyle(super().format(record))


def highlight(value: object) -> str:
    """Renders a value in blue, the way paths and names are shown on the console."""
    return click.style(str(value), fg="blue")


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configures the package logger. The console handler is installed once;
    later calls adjust the level and may add a log file.

    Args:
        level (str): Level name, e.g. "INFO" or "DEBUG".
        log_file (Optional[str]): Also append plain records to this file.
    """
    logger = logging.getLogger("lxctb")
    numeric = logging.getLevelName(str(level).upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logger.setLevel(numeric)

    if not getattr(logger, "_lxctb_configured", False):
        console = ClickHandler()
        console.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(console)
        setattr(logger, "_lxctb_configured", True)

    if log_file and getattr(logger, "_lxctb_log_file", None) != log_file:
        Path(os.path.dirname(log_file) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(PlainFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        ))
        logger.addHandler(file_handler)
        setattr(logger, "_lxctb_log_file", log_file)
