# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Interface of a simulated participant's session with the media service."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rtcload.stats.track_stats import TesterStats


@dataclass(frozen=True, slots=True)
class SessionParams:
    """Everything a session needs to join the room as one participant."""

    url: str
    room: str
    identity: str
    name: str
    sequence: int
    subscribe: bool = False
    expected_tracks: int = 0
    api_key: str | None = None
    api_secret: str | None = None


@runtime_checkable
class ParticipantSession(Protocol):
    """One participant's connection, as seen by the orchestrator.

    Every method raises on failure; the orchestrator records the exception
    against the participant and carries on with the others.
    """

    async def start(self) -> None: ...

    async def publish_audio_track(self, label: str) -> str: ...

    async def publish_video_track(self, label: str, resolution: str, codec: str) -> str: ...

    async def publish_simulcast_track(
        self, label: str, resolution: str, codec: str
    ) -> str: ...

    async def set_speaking(self, speaking: bool) -> None: ...

    async def stop(self) -> None: ...

    def get_stats(self) -> TesterStats: ...


SessionFactory = Callable[[SessionParams], ParticipantSession]
