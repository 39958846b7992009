# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Streaming comparison table for suite runs."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console

from rtcload.stats.formatting import format_loss_percent

if TYPE_CHECKING:
    from rtcload.orchestrator.suite import SuiteCaseResult

COLUMNS = ("Pubs", "Subs", "Tracks", "Audio", "Video", "Packet loss", "Errors")
WIDTHS = (6, 6, 8, 6, 6, 12, 7)


class SuiteTableExporter:
    """Prints the suite header once, then one row as each case completes.

    Rows are printed immediately rather than collected into a rich Table so
    that long suites show progress case by case.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self._header_printed = False

    def __call__(self, row: SuiteCaseResult) -> None:
        self.add_row(row)

    def print_header(self) -> None:
        if self._header_printed:
            return
        self._header_printed = True
        self.console.print(_format_line(COLUMNS), markup=False, highlight=False)

    def add_row(self, row: SuiteCaseResult) -> None:
        self.print_header()
        cells = (
            str(row.case.publishers),
            str(row.case.subscribers),
            str(row.tracks),
            "Yes",
            "Yes" if row.case.video else "No",
            format_loss_percent(row.packets, row.dropped),
            str(row.err_count),
        )
        self.console.print(_format_line(cells), markup=False, highlight=False)


def _format_line(cells: tuple[str, ...]) -> str:
    return "| ".join(cell.ljust(width) for cell, width in zip(cells, WIDTHS)).rstrip()
