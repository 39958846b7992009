# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""In-process stand-in for a media server.

Lets the orchestrator be exercised end to end without a real deployment:
publishers register tracks with a shared ``LoopbackServer``, and every
subscriber in the same room receives synthetic packets for each of them.
"""

from __future__ import annotations

import asyncio
import contextlib
import itertools
import logging
import random
from dataclasses import dataclass

from rtcload.session.protocols import SessionParams
from rtcload.stats.track_stats import TesterStats, TrackKind

logger = logging.getLogger(__name__)

__all__ = [
    "LoopbackServer",
    "LoopbackSession",
    "LoopbackSessionFactory",
]

DELIVERY_INTERVAL_SEC = 0.1

# (packet size in bytes, packets per second)
AUDIO_PROFILE = (160, 50)
SILENCE_PACKET_SIZE = 20
VIDEO_PROFILES: dict[str, tuple[int, int]] = {
    "high": (1200, 250),
    "medium": (1000, 100),
    "low": (800, 40),
}


@dataclass(slots=True)
class PublishedTrack:
    track_id: str
    kind: TrackKind
    owner: LoopbackSession
    packet_size: int
    packets_per_second: int


class LoopbackRoom:
    """Membership and published tracks of one room."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.tracks: dict[str, PublishedTrack] = {}
        self.subscribers: set[LoopbackSession] = set()

    def publish(self, track: PublishedTrack) -> None:
        self.tracks[track.track_id] = track
        for subscriber in list(self.subscribers):
            subscriber.on_track_published(track)

    def unpublish_all(self, owner: LoopbackSession) -> None:
        for track_id in [t.track_id for t in self.tracks.values() if t.owner is owner]:
            del self.tracks[track_id]
            for subscriber in list(self.subscribers):
                subscriber.on_track_unpublished(track_id)


class LoopbackServer:
    """Registry of loopback rooms shared by every session of a factory.

    Args:
        drop_rate: Probability that any one synthetic packet is lost
        connect_failure_rate: Probability that ``start()`` raises
        rng: Source of randomness, seed it for reproducible runs
    """

    def __init__(
        self,
        drop_rate: float = 0.0,
        connect_failure_rate: float = 0.0,
        rng: random.Random | None = None,
    ) -> None:
        if not 0.0 <= drop_rate <= 1.0:
            raise ValueError(f"drop_rate must be within [0, 1], got {drop_rate}")
        if not 0.0 <= connect_failure_rate <= 1.0:
            raise ValueError(
                f"connect_failure_rate must be within [0, 1], got {connect_failure_rate}"
            )
        self.drop_rate = drop_rate
        self.connect_failure_rate = connect_failure_rate
        self.rng = rng or random.Random()
        self.rooms: dict[str, LoopbackRoom] = {}
        self._track_ids = itertools.count(1)

    def room(self, name: str) -> LoopbackRoom:
        if name not in self.rooms:
            self.rooms[name] = LoopbackRoom(name)
        return self.rooms[name]

    def next_track_id(self, kind: TrackKind) -> str:
        prefix = "TR_A" if kind is TrackKind.AUDIO else "TR_V"
        return f"{prefix}{next(self._track_ids):06d}"


class LoopbackSession:
    """A participant connected to a ``LoopbackServer`` room."""

    def __init__(self, params: SessionParams, server: LoopbackServer) -> None:
        self.params = params
        self._server = server
        self._room: LoopbackRoom | None = None
        self._stats = TesterStats()
        self._deliveries: dict[str, asyncio.Task] = {}
        self.speaking = False

    async def start(self) -> None:
        if self._server.rng.random() < self._server.connect_failure_rate:
            raise ConnectionError(f"could not join room {self.params.room}")
        # yield once, as a real connect would
        await asyncio.sleep(0)
        self._room = self._server.room(self.params.room)
        if self.params.subscribe:
            self._room.subscribers.add(self)
            for track in list(self._room.tracks.values()):
                self.on_track_published(track)
        logger.debug(f"{self.params.identity} joined {self.params.room}")

    async def publish_audio_track(self, label: str) -> str:
        size, rate = AUDIO_PROFILE
        return self._publish(TrackKind.AUDIO, size, rate)

    async def publish_video_track(self, label: str, resolution: str, codec: str) -> str:
        size, rate = self._video_profile(resolution)
        return self._publish(TrackKind.VIDEO, size, rate)

    async def publish_simulcast_track(self, label: str, resolution: str, codec: str) -> str:
        # subscribers receive the top layer
        size, rate = self._video_profile(resolution)
        return self._publish(TrackKind.VIDEO, size, rate)

    async def set_speaking(self, speaking: bool) -> None:
        self._require_room()
        self.speaking = speaking

    async def stop(self) -> None:
        tasks = list(self._deliveries.values())
        self._deliveries.clear()
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if self._room is not None:
            self._room.subscribers.discard(self)
            self._room.unpublish_all(self)
            self._room = None

    def get_stats(self) -> TesterStats:
        return self._stats

    def on_track_published(self, track: PublishedTrack) -> None:
        if track.owner is self or track.track_id in self._deliveries:
            return
        self._deliveries[track.track_id] = asyncio.get_running_loop().create_task(
            self._deliver(track), name=f"deliver-{self.params.identity}-{track.track_id}"
        )

    def on_track_unpublished(self, track_id: str) -> None:
        task = self._deliveries.pop(track_id, None)
        if task is not None:
            task.cancel()

    def _publish(self, kind: TrackKind, size: int, rate: int) -> str:
        room = self._require_room()
        track_id = self._server.next_track_id(kind)
        room.publish(PublishedTrack(track_id, kind, self, size, rate))
        return track_id

    def _require_room(self) -> LoopbackRoom:
        if self._room is None:
            raise RuntimeError(f"{self.params.identity} is not connected")
        return self._room

    @staticmethod
    def _video_profile(resolution: str) -> tuple[int, int]:
        try:
            return VIDEO_PROFILES[resolution]
        except KeyError:
            raise ValueError(f"unknown video resolution {resolution!r}") from None

    async def _deliver(self, track: PublishedTrack) -> None:
        rng = self._server.rng
        per_tick = max(1, round(track.packets_per_second * DELIVERY_INTERVAL_SEC))
        while True:
            await asyncio.sleep(DELIVERY_INTERVAL_SEC)
            size = track.packet_size
            if track.kind is TrackKind.AUDIO and not track.owner.speaking:
                size = SILENCE_PACKET_SIZE
            for _ in range(per_tick):
                dropped = rng.random() < self._server.drop_rate
                self._stats.record_packet(track.track_id, track.kind, size, dropped=dropped)


class LoopbackSessionFactory:
    """``SessionFactory`` producing sessions that share one ``LoopbackServer``."""

    def __init__(self, server: LoopbackServer | None = None) -> None:
        self.server = server or LoopbackServer()

    def __call__(self, params: SessionParams) -> LoopbackSession:
        return LoopbackSession(params, self.server)
