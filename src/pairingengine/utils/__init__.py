"""Logging and timestamp utilities."""

# Pairing Engine
# Copyright (C) 2025  Pairing Engine developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

from dateutil import parser as date_parser

# the logger format used
LOG_FMT = "LVL: %(levelname)s | FILE PATH: %(pathname)s | FUN: %(funcName)s | msg: %(message)s | ln#:%(lineno)d"

# directory for the rotating log file, unset means console only
LOG_DIR_ENV = "PAIRINGENGINE_LOG_DIR"
LOG_FILE_NAME = "pairing-engine.log"


# --- Logging Setup ---
def setup_logger(logger_name: str) -> logging.Logger:
    """Set up logger for a python module.

    Sets up console handler, and a rotating file handler when the
    ``PAIRINGENGINE_LOG_DIR`` environment variable names a directory.

    Parameters
    ----------
    logger_name : str
        The name for the logger, __name__ is idiomatic

    Returns
    -------
    logging.Logger
        the created logger
    """
    lgr = logging.getLogger(name=logger_name)
    lgr.setLevel(logging.INFO)
    # Remove any existing handlers on this logger to avoid duplicates
    for _h in list(lgr.handlers):
        lgr.removeHandler(_h)
    log_formatter = logging.Formatter(LOG_FMT)

    file_handler = None
    log_folder = os.environ.get(LOG_DIR_ENV)
    if log_folder:
        try:
            os.makedirs(log_folder, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(log_folder, LOG_FILE_NAME),
                maxBytes=5 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setFormatter(log_formatter)
        except OSError as err:
            # fall back to console logging only
            print(f"Warning: could not open log file in {log_folder}: {err}")
            file_handler = None

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    console_handler.setLevel(logging.INFO)
    lgr.addHandler(console_handler)
    if file_handler:
        lgr.addHandler(file_handler)
    lgr.debug("logger %s initialized", logger_name)
    return lgr


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a timestamp column coming from the persistence layer.

    The store emits ISO-8601 strings with a variable number of fractional
    digits and a UTC offset, which ``datetime.fromisoformat`` rejects on
    older interpreters.

    Args:
        value: ISO-8601 string, datetime, or None

    Returns:
        The parsed datetime, or None when no timestamp was stored
    """
    if value is None or isinstance(value, datetime):
        return value
    if not value.strip():
        return None
    return date_parser.isoparse(value)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Serialize a timestamp for the persistence layer."""
    return value.isoformat() if value is not None else None
