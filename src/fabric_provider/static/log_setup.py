# SPDX-FileCopyrightText: 2025-present Raki Rahman <mdrakiburrahman@gmail.com>
#
# SPDX-License-Identifier: MIT

import logging
import os
from datetime import datetime

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"


def setup_logging(log_to_file: bool = False) -> str | None:
    """
    Configure root logging from the LOG_LEVEL environment variable.

    Args:
        log_to_file: Also write to a timestamp-named file in the working directory

    Returns:
        str | None: The log filename that was created, if any.
    """
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_filename = None
    if log_to_file:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")  # noqa: DTZ005
        log_filename = f"fabric_provider_{timestamp}.log"
        handlers.append(logging.FileHandler(log_filename))

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    return log_filename
