# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Shared fakes for the orchestrator, suite and exporter tests."""

import asyncio
import io
from collections.abc import Callable

import pytest
from rich.console import Console

from rtcload.common.exceptions import AdmissionCancelled
from rtcload.session.protocols import SessionParams
from rtcload.stats.track_stats import TesterStats, TrackKind


class FakeSession:
    """Participant session that never touches the network.

    Subscribers receive ``packets_per_track`` packets (and ``dropped_per_track``
    losses) for each expected track as soon as they start.
    """

    def __init__(
        self,
        params: SessionParams,
        start_error: Exception | None = None,
        publish_error: Exception | None = None,
        speaking_error: Exception | None = None,
        stop_error: Exception | None = None,
        packets_per_track: int = 10,
        dropped_per_track: int = 0,
        packet_size: int = 100,
    ) -> None:
        self.params = params
        self.start_error = start_error
        self.publish_error = publish_error
        self.speaking_error = speaking_error
        self.stop_error = stop_error
        self.packets_per_track = packets_per_track
        self.dropped_per_track = dropped_per_track
        self.packet_size = packet_size
        self.started = False
        self.stopped = False
        self.published: list[tuple[str, str]] = []
        self.speaking_calls: list[bool] = []
        self._stats = TesterStats()

    async def start(self) -> None:
        await asyncio.sleep(0)
        if self.start_error is not None:
            raise self.start_error
        self.started = True
        if self.params.subscribe:
            for n in range(self.params.expected_tracks):
                track_id = f"TR_{self.params.room}_{n}"
                for _ in range(self.packets_per_track):
                    self._stats.record_packet(track_id, TrackKind.AUDIO, self.packet_size)
                for _ in range(self.dropped_per_track):
                    self._stats.record_packet(
                        track_id, TrackKind.AUDIO, self.packet_size, dropped=True
                    )

    async def publish_audio_track(self, label: str) -> str:
        return self._publish("audio", label, "A")

    async def publish_video_track(self, label: str, resolution: str, codec: str) -> str:
        return self._publish("video", label, "V")

    async def publish_simulcast_track(self, label: str, resolution: str, codec: str) -> str:
        return self._publish("simulcast", label, "V")

    async def set_speaking(self, speaking: bool) -> None:
        if self.speaking_error is not None:
            raise self.speaking_error
        self.speaking_calls.append(speaking)

    async def stop(self) -> None:
        self.stopped = True
        if self.stop_error is not None:
            raise self.stop_error

    def get_stats(self) -> TesterStats:
        return self._stats

    def _publish(self, kind: str, label: str, suffix: str) -> str:
        if self.publish_error is not None:
            raise self.publish_error
        self.published.append((kind, label))
        return f"TR_{suffix}{self.params.sequence}"


class FakeSessionFactory:
    """Builds FakeSessions, with per-name overrides keyed by display name."""

    def __init__(self, overrides: dict[str, dict] | None = None, **defaults) -> None:
        self.overrides = overrides or {}
        self.defaults = defaults
        self.sessions: dict[str, FakeSession] = {}

    def __call__(self, params: SessionParams) -> FakeSession:
        kwargs = {**self.defaults, **self.overrides.get(params.name, {})}
        session = FakeSession(params, **kwargs)
        self.sessions[params.name] = session
        return session


class InstantPacer:
    """Pacer that admits without waiting, optionally firing cancel after N admits."""

    def __init__(self, rate: float, cancel_after: int | None = None) -> None:
        self.rate = rate
        self.cancel_after = cancel_after
        self.admitted = 0

    async def admit(self, cancel_event: asyncio.Event) -> None:
        if self.cancel_after is not None and self.admitted >= self.cancel_after:
            cancel_event.set()
        if cancel_event.is_set():
            raise AdmissionCancelled()
        self.admitted += 1
        await asyncio.sleep(0)


def instant_pacer_factory(cancel_after: int | None = None) -> Callable[[float], InstantPacer]:
    def factory(rate: float) -> InstantPacer:
        return InstantPacer(rate, cancel_after=cancel_after)

    return factory


@pytest.fixture
def session_factory() -> FakeSessionFactory:
    return FakeSessionFactory()


@pytest.fixture
def recording_console() -> Console:
    """A wide console that records output instead of writing to the terminal."""
    return Console(record=True, width=200, file=io.StringIO(), color_system=None)


@pytest.fixture
def make_session_factory() -> Callable[..., FakeSessionFactory]:
    """Build a FakeSessionFactory with per-participant overrides."""
    return FakeSessionFactory


@pytest.fixture
def make_pacer_factory() -> Callable[..., Callable[[float], InstantPacer]]:
    return instant_pacer_factory
