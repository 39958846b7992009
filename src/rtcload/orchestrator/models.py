# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Data models for load test orchestration."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum, Flag, auto

from pydantic import BaseModel, ConfigDict, Field

from rtcload.session.protocols import ParticipantSession
from rtcload.stats.summary import SuiteSummary, Summary, suite_summary, tester_summary
from rtcload.stats.track_stats import TesterStats

MIN_NUM_PER_SECOND = 1.0
MAX_NUM_PER_SECOND = 10.0
DEFAULT_NUM_PER_SECOND = 5.0


def clamp_num_per_second(value: float) -> float:
    """Clamp a requested ramp-up rate into [1, 10]; non-positive means 5."""
    if value <= 0:
        return DEFAULT_NUM_PER_SECOND
    return min(max(value, MIN_NUM_PER_SECOND), MAX_NUM_PER_SECOND)


class LoadTestState(str, Enum):
    """Lifecycle of a single load test run."""

    CONFIGURING = "configuring"
    SPAWNING = "spawning"
    RUNNING = "running"
    DRAINING = "draining"
    REPORTING = "reporting"
    DONE = "done"


class ParticipantRole(Flag):
    """What a participant does in the room. Publishers never subscribe."""

    NONE = 0
    VIDEO_PUBLISHER = auto()
    AUDIO_PUBLISHER = auto()
    SUBSCRIBER = auto()

    @property
    def is_publisher(self) -> bool:
        return bool(self & (ParticipantRole.VIDEO_PUBLISHER | ParticipantRole.AUDIO_PUBLISHER))

    @property
    def label(self) -> str:
        return "|".join(m.name for m in type(self) if m.value and m in self) or "NONE"

    @classmethod
    def for_index(
        cls, index: int, video_publishers: int, audio_publishers: int
    ) -> ParticipantRole:
        role = cls.NONE
        if index < video_publishers:
            role |= cls.VIDEO_PUBLISHER
        if index < audio_publishers:
            role |= cls.AUDIO_PUBLISHER
        if not role:
            role = cls.SUBSCRIBER
        return role


class RunParameters(BaseModel):
    """Resolved, immutable parameters of one run.

    Attributes:
        video_publishers: Participants publishing a video track
        audio_publishers: Participants publishing an audio track
        subscribers: Participants subscribing to every published track
        video_resolution: Resolution label handed to the session
        video_codec: Codec name handed to the session
        duration_sec: How long to hold the room open; 0 waits for cancellation
        num_per_second: Participants admitted per second
        simulcast: Publish video as simulcast
        simulate_speakers: Rotate the active speaker among publishers
        room: Room name; generated when empty
        identity_prefix: Prefix for participant identities; generated per run
    """

    model_config = ConfigDict(frozen=True)

    video_publishers: int = Field(default=0, ge=0)
    audio_publishers: int = Field(default=0, ge=0)
    subscribers: int = Field(default=0, ge=0)
    video_resolution: str = "high"
    video_codec: str = "h264"
    duration_sec: float = Field(default=0.0, ge=0)
    num_per_second: float = DEFAULT_NUM_PER_SECOND
    simulcast: bool = True
    simulate_speakers: bool = False
    room: str = ""
    identity_prefix: str = ""
    url: str = "http://localhost:7880"
    api_key: str | None = None
    api_secret: str | None = None

    @property
    def max_publishers(self) -> int:
        return max(self.video_publishers, self.audio_publishers)

    @property
    def num_participants(self) -> int:
        return self.max_publishers + self.subscribers

    @property
    def expected_tracks(self) -> int:
        return self.video_publishers + self.audio_publishers

    def role_for(self, index: int) -> ParticipantRole:
        return ParticipantRole.for_index(index, self.video_publishers, self.audio_publishers)

    def expected_tracks_for(self, index: int) -> int:
        # publishers do not receive their own tracks
        return 0 if self.role_for(index).is_publisher else self.expected_tracks

    def display_name_for(self, index: int) -> str:
        if self.role_for(index).is_publisher:
            return f"Pub {index}"
        return f"Sub {index - self.video_publishers}"


@dataclass(eq=False)
class ParticipantRun:
    """One spawned participant and what it observed."""

    name: str
    sequence: int
    role: ParticipantRole
    expected_tracks: int
    session: ParticipantSession | None = None
    stats: TesterStats = field(default_factory=TesterStats)
    error: BaseException | None = None
    started_at: float = field(default_factory=time.monotonic)
    finished_at: float | None = None

    @property
    def elapsed(self) -> float:
        end = self.finished_at if self.finished_at is not None else time.monotonic()
        return max(end - self.started_at, 0.0)

    def finalize(self, stats: TesterStats, error: BaseException | None) -> None:
        """Freeze the participant's counters and record its terminal error."""
        self.finished_at = time.monotonic()
        self.stats = stats
        if error is not None:
            self.error = error
        elif stats.error is not None:
            self.error = stats.error


@dataclass
class LoadTestResult:
    """Everything a finished run produced.

    ``summaries`` and the totals are computed once, after every participant
    has been drained, so they never change afterwards. ``subscriber_total``
    sums only the subscribers, the participants that receive media.
    """

    params: RunParameters
    runs: list[ParticipantRun]
    track_names: dict[str, str] = field(default_factory=dict)
    summaries: dict[str, Summary] = field(default_factory=dict)
    total: SuiteSummary = field(default_factory=SuiteSummary)
    subscriber_total: SuiteSummary = field(default_factory=SuiteSummary)

    @classmethod
    def build(
        cls,
        params: RunParameters,
        runs: list[ParticipantRun],
        track_names: dict[str, str] | None = None,
    ) -> LoadTestResult:
        ordered = sorted(runs, key=lambda r: r.name)
        summaries = {run.name: tester_summary(run) for run in ordered}
        return cls(
            params=params,
            runs=ordered,
            track_names=dict(track_names or {}),
            summaries=summaries,
            total=suite_summary(summaries.values()),
            subscriber_total=suite_summary(
                summaries[run.name] for run in ordered if not run.role.is_publisher
            ),
        )

    def track_label(self, track_id: str) -> str:
        return self.track_names.get(track_id, "")
