# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Command line entry point."""

import sys
from typing import Annotated

from cyclopts import App, Parameter

from rtcload import __version__
from rtcload.common.config import LoadTestConfig

app = App(name="rtcload", help="Load test a real-time media server.", version=__version__)


@app.command
def run(
    *, config: Annotated[LoadTestConfig | None, Parameter(name="*")] = None
) -> None:
    """Spawn publishers and subscribers into one room and report per-track stats."""
    from rtcload.cli_runner import run_load_test

    sys.exit(run_load_test(config or LoadTestConfig()))


@app.command
def suite(
    *, config: Annotated[LoadTestConfig | None, Parameter(name="*")] = None
) -> None:
    """Run the fixed matrix of publisher and subscriber counts and compare packet loss."""
    from rtcload.cli_runner import run_suite

    sys.exit(run_suite(config or LoadTestConfig()))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
