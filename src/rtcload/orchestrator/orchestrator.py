# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Single-run load test orchestrator."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from urllib.parse import urlsplit

from rtcload.common.exceptions import AdmissionCancelled, ParticipantError, SetupError
from rtcload.common.identity import IdentityGenerator
from rtcload.orchestrator.models import (
    LoadTestResult,
    LoadTestState,
    ParticipantRole,
    ParticipantRun,
    RunParameters,
    clamp_num_per_second,
)
from rtcload.orchestrator.pacer import AdmissionPacer
from rtcload.orchestrator.speaker import DEFAULT_SPEAKER_INTERVAL_SEC, SpeakerSimulator
from rtcload.session.protocols import SessionFactory, SessionParams

logger = logging.getLogger(__name__)

__all__ = [
    "MANAGED_HOST_SUFFIX",
    "MAX_MANAGED_HOST_PARTICIPANTS",
    "LoadTestOrchestrator",
    "check_target",
]

MANAGED_HOST_SUFFIX = ".livekit.cloud"
MAX_MANAGED_HOST_PARTICIPANTS = 50


def check_target(params: RunParameters) -> None:
    """Reject unusable URLs and oversized tests against the managed service.

    Raises:
        SetupError: If the URL has no host, or any participant count exceeds
            the managed service limit
    """
    try:
        hostname = urlsplit(params.url).hostname
    except ValueError as e:
        raise SetupError(f"Invalid URL {params.url!r}: {e}") from e
    if not hostname:
        raise SetupError(f"Invalid URL {params.url!r}: no host")

    if hostname.endswith(MANAGED_HOST_SUFFIX) and (
        params.video_publishers > MAX_MANAGED_HOST_PARTICIPANTS
        or params.audio_publishers > MAX_MANAGED_HOST_PARTICIPANTS
        or params.subscribers > MAX_MANAGED_HOST_PARTICIPANTS
    ):
        raise SetupError(
            f"Unable to load test {hostname}: at most {MAX_MANAGED_HOST_PARTICIPANTS} "
            "participants of each kind are allowed against the managed service."
        )


class LoadTestOrchestrator:
    """Runs one load test from configuration through to the report.

    The run moves through ``LoadTestState``: participants are admitted one at
    a time by the ``AdmissionPacer`` and each connects in its own task. A
    participant whose session cannot be created, or that fails to connect or
    publish, is recorded and left out; it never stops the others. Once
    everyone is connected the room is held open for the configured duration
    (or until ``cancel_event`` fires), then every session is stopped and its
    counters are summarised.

    Args:
        session_factory: Creates the session for each participant
        identity_generator: Source of room names and identity prefixes
        pacer_factory: Builds the pacer from the clamped ramp-up rate
        speaker_interval_sec: Seconds between active speaker rotations
        reporter: Called with the finished result, e.g. to print tables
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        identity_generator: IdentityGenerator | None = None,
        pacer_factory: Callable[[float], AdmissionPacer] = AdmissionPacer,
        speaker_interval_sec: float = DEFAULT_SPEAKER_INTERVAL_SEC,
        reporter: Callable[[LoadTestResult], None] | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.identity_generator = identity_generator or IdentityGenerator()
        self.pacer_factory = pacer_factory
        self.speaker_interval_sec = speaker_interval_sec
        self.reporter = reporter
        self.state = LoadTestState.CONFIGURING
        self._track_names: dict[str, str] = {}
        self._errors: dict[str, BaseException] = {}
        self._lock = asyncio.Lock()

    def configure(self, params: RunParameters) -> RunParameters:
        """Fill in the generated and clamped parts of ``params``."""
        check_target(params)
        updates: dict = {
            "identity_prefix": self.identity_generator.identity_prefix(),
            "num_per_second": clamp_num_per_second(params.num_per_second),
        }
        if not params.room:
            updates["room"] = self.identity_generator.room_name()
        return params.model_copy(update=updates)

    async def run(
        self, params: RunParameters, cancel_event: asyncio.Event | None = None
    ) -> LoadTestResult:
        """Execute one load test.

        Cancellation while the room is held open just ends the test early.
        Cancellation while participants are still being admitted stops the
        spawn loop, drains whoever already joined, and raises.

        Raises:
            SetupError: If the parameters are unusable
            AdmissionCancelled: If ``cancel_event`` fired during spawning
        """
        cancel_event = cancel_event or asyncio.Event()
        self.state = LoadTestState.CONFIGURING
        self._track_names = {}
        self._errors = {}

        params = self.configure(params)
        self._log_banner(params)

        self.state = LoadTestState.SPAWNING
        runs: list[ParticipantRun] = []
        tasks: list[asyncio.Task] = []
        try:
            await self._spawn(params, cancel_event, runs, tasks)
        except AdmissionCancelled as e:
            logger.warning(
                f"Cancelled after admitting {len(runs)} of {params.num_participants} participants"
            )
            await self._drain(runs, tasks, speaker=None)
            raise AdmissionCancelled(
                str(e), runs=runs, result=await self._build_result(params, runs)
            ) from e
        except (asyncio.CancelledError, Exception):
            await self._drain(runs, tasks, speaker=None)
            raise

        speaker: SpeakerSimulator | None = None
        try:
            self.state = LoadTestState.RUNNING
            await self._wait_for_connections(tasks, cancel_event)
            publishers = [
                run for run in runs if run.role.is_publisher and run.session is not None
            ]
            if publishers and params.simulate_speakers:
                speaker = SpeakerSimulator(publishers, interval_sec=self.speaker_interval_sec)
                speaker.start()
            await self._hold(params, cancel_event)
        finally:
            await self._drain(runs, tasks, speaker)

        self.state = LoadTestState.REPORTING
        result = await self._build_result(params, runs)
        if self.reporter is not None:
            self.reporter(result)

        self.state = LoadTestState.DONE
        return result

    async def _build_result(
        self, params: RunParameters, runs: list[ParticipantRun]
    ) -> LoadTestResult:
        async with self._lock:
            track_names = dict(self._track_names)
        return LoadTestResult.build(params, runs, track_names)

    async def _spawn(
        self,
        params: RunParameters,
        cancel_event: asyncio.Event,
        runs: list[ParticipantRun],
        tasks: list[asyncio.Task],
    ) -> None:
        pacer = self.pacer_factory(params.num_per_second)
        for index in range(params.num_participants):
            await pacer.admit(cancel_event)
            run = self._create_run(params, index)
            runs.append(run)
            if run.session is None:
                continue
            tasks.append(
                asyncio.create_task(self._connect(run, params), name=f"connect-{run.name}")
            )

    def _create_run(self, params: RunParameters, index: int) -> ParticipantRun:
        role = params.role_for(index)
        name = params.display_name_for(index)
        prefix = params.identity_prefix
        if role.is_publisher:
            prefix += "_pub"
        run = ParticipantRun(
            name=name,
            sequence=index,
            role=role,
            expected_tracks=params.expected_tracks_for(index),
        )
        try:
            run.session = self.session_factory(
                SessionParams(
                    url=params.url,
                    room=params.room,
                    identity=f"{prefix}_{index}",
                    name=name,
                    sequence=index,
                    subscribe=not role.is_publisher,
                    expected_tracks=run.expected_tracks,
                    api_key=params.api_key,
                    api_secret=params.api_secret,
                )
            )
        except Exception as e:
            logger.error(f"could not create session for {name}: {e!r}")
            run.error = ParticipantError(name, f"could not create session: {e}")
        return run

    async def _connect(self, run: ParticipantRun, params: RunParameters) -> None:
        session = run.session
        try:
            await session.start()
        except Exception as e:
            logger.error(f"could not connect {run.name}: {e!r}")
            await self._record_error(run.name, ParticipantError(run.name, f"could not connect: {e}"))
            return

        try:
            if ParticipantRole.AUDIO_PUBLISHER in run.role:
                track_id = await session.publish_audio_track("audio")
                await self._name_track(track_id, f"{run.sequence}A")
            if ParticipantRole.VIDEO_PUBLISHER in run.role:
                if params.simulcast:
                    track_id = await session.publish_simulcast_track(
                        "video-simulcast", params.video_resolution, params.video_codec
                    )
                else:
                    track_id = await session.publish_video_track(
                        "video", params.video_resolution, params.video_codec
                    )
                await self._name_track(track_id, f"{run.sequence}V")
        except Exception as e:
            logger.error(f"{run.name} could not publish: {e!r}")
            await self._record_error(run.name, ParticipantError(run.name, f"could not publish: {e}"))

    async def _name_track(self, track_id: str, label: str) -> None:
        async with self._lock:
            self._track_names[track_id] = label

    async def _record_error(self, name: str, error: BaseException) -> None:
        async with self._lock:
            self._errors[name] = error

    async def _wait_for_connections(
        self, tasks: list[asyncio.Task], cancel_event: asyncio.Event
    ) -> None:
        if not tasks:
            return
        connected = asyncio.gather(*tasks, return_exceptions=True)
        cancelled = asyncio.create_task(cancel_event.wait())
        try:
            await asyncio.wait({connected, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancelled.cancel()

    async def _hold(self, params: RunParameters, cancel_event: asyncio.Event) -> None:
        if cancel_event.is_set():
            return
        if params.duration_sec:
            logger.info(f"Finished connecting to room, waiting {params.duration_sec:g}s")
        else:
            logger.info("Finished connecting to room, waiting until cancelled")
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=params.duration_sec or None)
        except asyncio.TimeoutError:
            return

    async def _drain(
        self,
        runs: list[ParticipantRun],
        tasks: list[asyncio.Task],
        speaker: SpeakerSimulator | None,
    ) -> None:
        self.state = LoadTestState.DRAINING
        if speaker is not None:
            await speaker.stop()

        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        live = [run for run in runs if run.session is not None]
        logger.info(f"Stopping {len(live)} participants")
        stopped = await asyncio.gather(
            *(run.session.stop() for run in live), return_exceptions=True
        )
        async with self._lock:
            errors = dict(self._errors)
        for run, outcome in zip(live, stopped):
            if isinstance(outcome, BaseException):
                logger.warning(f"Error stopping {run.name}: {outcome!r}")
            run.finalize(run.session.get_stats(), errors.get(run.name))
        # sessions that were never created keep their empty counters
        for run in runs:
            if run.session is None:
                run.finalize(run.stats, run.error)

    def _log_banner(self, params: RunParameters) -> None:
        parts = []
        if params.video_publishers:
            parts.append(f"{params.video_publishers} video publishers")
        if params.audio_publishers:
            parts.append(f"{params.audio_publishers} audio publishers")
        if params.subscribers:
            parts.append(f"{params.subscribers} subscribers")
        logger.info(f"Starting load test with {', '.join(parts)}, room: {params.room}")
