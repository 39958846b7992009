# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Logging setup for the command line entry points."""

import logging

from rich.console import Console
from rich.logging import RichHandler

_LOG_FORMAT = "%(message)s"
_DATE_FORMAT = "[%X]"


def setup_rich_logging(level: str = "INFO", console: Console | None = None) -> None:
    """Route all log records through a single RichHandler.

    Logs go to stderr so the report tables on stdout stay clean. Calling this
    more than once replaces the previously installed handler.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        log_time_format=_DATE_FORMAT,
    )
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
