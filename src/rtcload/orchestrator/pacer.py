# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Token bucket that paces how fast participants join the room."""

import asyncio
import logging
import time
from collections.abc import Callable

from rtcload.common.exceptions import AdmissionCancelled
from rtcload.orchestrator.models import clamp_num_per_second

logger = logging.getLogger(__name__)

__all__ = ["AdmissionPacer"]


class AdmissionPacer:
    """Admits at most ``rate`` participants per second.

    The bucket holds a single token: the first admission is immediate and
    every later one waits until ``1 / rate`` seconds after the previous
    token was handed out. There is no backlog, so a slow caller never earns
    a burst.

    Args:
        rate: Requested admissions per second, clamped into [1, 10]
        clock: Monotonic clock in seconds
    """

    def __init__(self, rate: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.rate = clamp_num_per_second(rate)
        self.interval = 1.0 / self.rate
        self._clock = clock
        self._next_token_at: float | None = None

    async def admit(self, cancel_event: asyncio.Event) -> None:
        """Block until a token is available.

        Raises:
            AdmissionCancelled: If ``cancel_event`` is set before or while waiting
        """
        if cancel_event.is_set():
            raise AdmissionCancelled()

        now = self._clock()
        if self._next_token_at is None or self._next_token_at <= now:
            self._next_token_at = now + self.interval
            return

        delay = self._next_token_at - now
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            self._next_token_at += self.interval
            return
        raise AdmissionCancelled()
