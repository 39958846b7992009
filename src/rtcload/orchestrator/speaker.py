# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Background rotation of the active speaker among publishers."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Sequence

from rtcload.orchestrator.models import ParticipantRun

logger = logging.getLogger(__name__)

__all__ = ["SpeakerSimulator"]

DEFAULT_SPEAKER_INTERVAL_SEC = 5.0


class SpeakerSimulator:
    """Periodically hands the "active speaker" role to another publisher.

    Each tick the current speaker is silenced and a randomly chosen publisher
    starts speaking. A publisher whose session refuses the toggle is logged
    and skipped; rotation continues with the others.

    Args:
        publishers: Publisher runs to rotate among
        interval_sec: Seconds each speaker holds the floor
        rng: Source of randomness for picking the next speaker
    """

    def __init__(
        self,
        publishers: Sequence[ParticipantRun],
        interval_sec: float = DEFAULT_SPEAKER_INTERVAL_SEC,
        rng: random.Random | None = None,
    ) -> None:
        if interval_sec <= 0:
            raise ValueError(f"interval_sec must be positive, got {interval_sec}")
        self._publishers = list(publishers)
        self._interval_sec = interval_sec
        self._rng = rng or random.Random()
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None
        self.current: ParticipantRun | None = None
        self.rotations = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start rotating in a background task. No-op if already running."""
        if self.is_running or not self._publishers:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run(), name="speaker-simulator")

    async def stop(self) -> None:
        """Stop rotating and wait for the in-flight iteration to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        self._stop_event.set()
        await task
        if self.current is not None:
            await self._set_speaking(self.current, False)
            self.current = None

    async def _run(self) -> None:
        while True:
            await self._rotate()
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval_sec)
            except asyncio.TimeoutError:
                continue
            return

    async def _rotate(self) -> None:
        previous = self.current
        candidates = [p for p in self._publishers if p is not previous] or self._publishers
        nxt = self._rng.choice(candidates)
        if previous is not None:
            await self._set_speaking(previous, False)
        if await self._set_speaking(nxt, True):
            self.current = nxt
            self.rotations += 1
            logger.debug(f"{nxt.name} is now speaking")
        else:
            self.current = None

    async def _set_speaking(self, run: ParticipantRun, speaking: bool) -> bool:
        try:
            await run.session.set_speaking(speaking)
        except Exception as e:
            logger.warning(f"Could not set speaking={speaking} on {run.name}: {e!r}")
            return False
        return True
