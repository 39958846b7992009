# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Derived per-participant and per-run summaries."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from rtcload.stats.formatting import loss_ratio

if TYPE_CHECKING:
    from rtcload.orchestrator.models import ParticipantRun

__all__ = [
    "SuiteSummary",
    "Summary",
    "suite_summary",
    "tester_summary",
]


class Summary(BaseModel):
    """Aggregate over one participant's tracks.

    Attributes:
        name: Display name of the participant (e.g. "Sub 3")
        tracks: Number of tracks the participant observed
        expected: Number of tracks it was expected to observe
        bytes: Total payload bytes received
        elapsed: Seconds between the participant's start and its teardown
        packets: Total packets received
        dropped: Total packets lost
        err_string: Terminal error message, empty on success
    """

    name: str = ""
    tracks: int = 0
    expected: int = 0
    bytes: int = 0
    elapsed: float = 0.0
    packets: int = 0
    dropped: int = 0
    err_string: str = ""

    @property
    def loss_ratio(self) -> float:
        return loss_ratio(self.packets, self.dropped)


class SuiteSummary(BaseModel):
    """Sum of every participant summary in one run."""

    tracks: int = 0
    expected: int = 0
    bytes: int = 0
    elapsed: float = 0.0
    packets: int = 0
    dropped: int = 0
    err_count: int = 0
    participants: int = Field(default=0, description="Number of summaries summed")

    @property
    def loss_ratio(self) -> float:
        return loss_ratio(self.packets, self.dropped)


def tester_summary(run: ParticipantRun) -> Summary:
    """Reduce one participant's track counters into a Summary."""
    summary = Summary(
        name=run.name,
        expected=run.expected_tracks,
        elapsed=run.elapsed,
        err_string=str(run.error) if run.error is not None else "",
    )
    for track in run.stats.track_stats.values():
        summary.tracks += 1
        summary.bytes += track.bytes
        summary.packets += track.packets
        summary.dropped += track.dropped
    return summary


def suite_summary(summaries: Iterable[Summary]) -> SuiteSummary:
    """Sum every field across ``summaries``; count the ones that errored."""
    total = SuiteSummary()
    for s in summaries:
        total.participants += 1
        total.tracks += s.tracks
        total.expected += s.expected
        total.bytes += s.bytes
        total.elapsed += s.elapsed
        total.packets += s.packets
        total.dropped += s.dropped
        if s.err_string:
            total.err_count += 1
    return total
