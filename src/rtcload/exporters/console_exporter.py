# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Rich console tables for a single load test run."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.table import Table

from rtcload.stats.formatting import format_bitrate, format_loss_pair

if TYPE_CHECKING:
    from rtcload.orchestrator.models import LoadTestResult, ParticipantRun


class ConsoleReportExporter:
    """Prints one track table per participant, then the summary table.

    Participants are ordered by display name as plain strings ("Sub 10"
    sorts before "Sub 2"), and tracks by their assigned label, so identical
    inputs always print identically.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def __call__(self, result: LoadTestResult) -> None:
        self.export(result)

    def export(self, result: LoadTestResult) -> None:
        if not result.runs:
            return
        for run in sorted(result.runs, key=lambda r: r.name):
            self.console.print(self._track_table(run, result))
        self.console.print(self._summary_table(result))

    def _track_table(self, run: ParticipantRun, result: LoadTestResult) -> Table:
        table = _new_table(run.name, "Track", "Kind", "Pkts", "Bitrate", "Dropped")
        end = run.finished_at if run.finished_at is not None else time.monotonic()
        tracks = sorted(
            run.stats.track_stats.values(), key=lambda t: result.track_label(t.track_id)
        )
        for track in tracks:
            label = result.track_label(track.track_id)
            table.add_row(
                "",
                f"{label} {track.track_id}".strip(),
                track.kind.value,
                str(track.packets),
                format_bitrate(track.bytes, end - track.started_at),
                format_loss_pair(track.packets, track.dropped),
            )
        return table

    def _summary_table(self, result: LoadTestResult) -> Table:
        table = _new_table("Summary", "Tester", "Tracks", "Bitrate", "Total Dropped", "Error")
        for name, s in result.summaries.items():
            table.add_row(
                "",
                name,
                f"{s.tracks}/{s.expected}",
                format_bitrate(s.bytes, s.elapsed),
                format_loss_pair(s.packets, s.dropped),
                s.err_string,
            )

        total = result.total
        # bitrate is what subscribers received, averaged per subscriber
        subs = result.subscriber_total
        avg_bytes = subs.bytes // max(subs.participants, 1)
        table.add_row(
            "",
            "Total",
            f"{total.tracks}/{total.expected}",
            f"{format_bitrate(subs.bytes, subs.elapsed)} "
            f"({format_bitrate(avg_bytes, subs.elapsed)} avg)",
            format_loss_pair(total.packets, total.dropped),
            str(total.err_count),
        )
        return table


def _new_table(*columns: str) -> Table:
    table = Table(box=box.SIMPLE_HEAD, show_edge=False, pad_edge=False)
    for column in columns:
        table.add_column(column, overflow="fold")
    return table
