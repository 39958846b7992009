# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Tests for the in-process loopback session."""

import asyncio
import random

import pytest

from rtcload.common.identity import IdentityGenerator
from rtcload.orchestrator.models import RunParameters
from rtcload.orchestrator.orchestrator import LoadTestOrchestrator
from rtcload.session.loopback import (
    SILENCE_PACKET_SIZE,
    LoopbackServer,
    LoopbackSession,
    LoopbackSessionFactory,
)
from rtcload.session.protocols import ParticipantSession, SessionParams
from rtcload.stats.track_stats import TrackKind


def _params(name: str, sequence: int, subscribe: bool = False) -> SessionParams:
    return SessionParams(
        url="ws://localhost:7880",
        room="room",
        identity=f"abcde_{sequence}",
        name=name,
        sequence=sequence,
        subscribe=subscribe,
    )


class TestLoopbackServer:
    @pytest.mark.parametrize("kwargs", [{"drop_rate": 1.5}, {"connect_failure_rate": -0.1}])
    def test_rates_validated(self, kwargs):
        with pytest.raises(ValueError):
            LoopbackServer(**kwargs)

    def test_track_ids_are_unique_and_typed(self):
        server = LoopbackServer()
        assert server.next_track_id(TrackKind.AUDIO) == "TR_A000001"
        assert server.next_track_id(TrackKind.VIDEO) == "TR_V000002"


class TestLoopbackSession:
    def test_satisfies_protocol(self):
        session = LoopbackSessionFactory()(_params("Pub 0", 0))
        assert isinstance(session, ParticipantSession)

    @pytest.mark.asyncio
    async def test_subscriber_receives_published_tracks(self):
        factory = LoopbackSessionFactory(LoopbackServer(rng=random.Random(0)))
        publisher = factory(_params("Pub 0", 0))
        subscriber = factory(_params("Sub 0", 1, subscribe=True))

        await publisher.start()
        await subscriber.start()
        audio_id = await publisher.publish_audio_track("audio")
        video_id = await publisher.publish_video_track("video", "low", "vp8")
        await asyncio.sleep(0.35)
        await subscriber.stop()
        await publisher.stop()

        tracks = subscriber.get_stats().track_stats
        assert set(tracks) == {audio_id, video_id}
        assert tracks[video_id].kind is TrackKind.VIDEO
        assert tracks[video_id].packets > 0
        assert tracks[audio_id].bytes == tracks[audio_id].packets * SILENCE_PACKET_SIZE
        assert publisher.get_stats().track_stats == {}

    @pytest.mark.asyncio
    async def test_late_subscriber_sees_existing_tracks(self):
        factory = LoopbackSessionFactory()
        publisher = factory(_params("Pub 0", 0))
        await publisher.start()
        track_id = await publisher.publish_simulcast_track("video-simulcast", "high", "h264")

        subscriber = factory(_params("Sub 0", 1, subscribe=True))
        await subscriber.start()
        await asyncio.sleep(0.15)
        await subscriber.stop()
        await publisher.stop()

        assert track_id in subscriber.get_stats().track_stats

    @pytest.mark.asyncio
    async def test_full_drop_rate_drops_everything(self):
        factory = LoopbackSessionFactory(LoopbackServer(drop_rate=1.0))
        publisher = factory(_params("Pub 0", 0))
        subscriber = factory(_params("Sub 0", 1, subscribe=True))
        await publisher.start()
        await subscriber.start()
        await publisher.publish_audio_track("audio")
        await asyncio.sleep(0.25)
        await subscriber.stop()
        await publisher.stop()

        [track] = subscriber.get_stats().track_stats.values()
        assert track.packets == 0
        assert track.dropped > 0

    @pytest.mark.asyncio
    async def test_connect_failure(self):
        session = LoopbackSessionFactory(LoopbackServer(connect_failure_rate=1.0))(
            _params("Sub 0", 0, subscribe=True)
        )
        with pytest.raises(ConnectionError):
            await session.start()

    @pytest.mark.asyncio
    async def test_unknown_resolution(self):
        session = LoopbackSession(_params("Pub 0", 0), LoopbackServer())
        await session.start()
        with pytest.raises(ValueError, match="unknown video resolution"):
            await session.publish_video_track("video", "8k", "h264")
        await session.stop()

    @pytest.mark.asyncio
    async def test_set_speaking_requires_connection(self):
        session = LoopbackSession(_params("Pub 0", 0), LoopbackServer())
        with pytest.raises(RuntimeError, match="not connected"):
            await session.set_speaking(True)

        await session.start()
        await session.set_speaking(True)
        assert session.speaking
        await session.stop()


@pytest.mark.integration
class TestLoopbackEndToEnd:
    @pytest.mark.asyncio
    async def test_orchestrated_run(self):
        factory = LoopbackSessionFactory(LoopbackServer(rng=random.Random(1)))
        orchestrator = LoadTestOrchestrator(
            factory, identity_generator=IdentityGenerator(random.Random(1))
        )

        result = await orchestrator.run(
            RunParameters(
                video_publishers=1,
                audio_publishers=1,
                subscribers=2,
                num_per_second=10,
                duration_sec=0.3,
            )
        )

        assert result.total.err_count == 0
        assert result.summaries["Sub 0"].tracks == 2
        assert result.summaries["Sub 1"].expected == 2
        assert result.summaries["Sub 1"].packets > 0
        assert sorted(result.track_names.values()) == ["0A", "0V"]
