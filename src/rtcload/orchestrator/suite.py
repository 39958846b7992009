# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Fixed matrix of load tests run back to back for comparison."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from rtcload.common.exceptions import SuiteCaseError
from rtcload.orchestrator.models import LoadTestResult, RunParameters
from rtcload.orchestrator.orchestrator import LoadTestOrchestrator
from rtcload.stats.formatting import loss_ratio

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_SUITE_CASES",
    "DEFAULT_SUITE_DURATION_SEC",
    "SuiteCase",
    "SuiteCaseResult",
    "SuiteRunner",
]

DEFAULT_SUITE_DURATION_SEC = 15.0


@dataclass(frozen=True, slots=True)
class SuiteCase:
    """One row of the comparison matrix."""

    publishers: int
    subscribers: int
    video: bool

    @property
    def label(self) -> str:
        return f"{self.publishers} pub, {self.subscribers} sub, video: {'Yes' if self.video else 'No'}"

    def apply(self, base: RunParameters) -> RunParameters:
        """Derive this case's parameters from the user's base parameters."""
        return base.model_copy(
            update={
                "video_publishers": self.publishers if self.video else 0,
                "audio_publishers": 0 if self.video else self.publishers,
                "subscribers": self.subscribers,
                "simulcast": True,
                "duration_sec": base.duration_sec or DEFAULT_SUITE_DURATION_SEC,
            }
        )


DEFAULT_SUITE_CASES: tuple[SuiteCase, ...] = (
    SuiteCase(publishers=10, subscribers=10, video=False),
    SuiteCase(publishers=10, subscribers=100, video=False),
    SuiteCase(publishers=10, subscribers=500, video=False),
    SuiteCase(publishers=10, subscribers=1000, video=False),
    SuiteCase(publishers=50, subscribers=50, video=False),
    SuiteCase(publishers=100, subscribers=50, video=False),
    SuiteCase(publishers=10, subscribers=10, video=True),
    SuiteCase(publishers=10, subscribers=100, video=True),
    SuiteCase(publishers=10, subscribers=500, video=True),
    SuiteCase(publishers=1, subscribers=100, video=True),
    SuiteCase(publishers=1, subscribers=1000, video=True),
)


@dataclass(frozen=True, slots=True)
class SuiteCaseResult:
    """Totals of one case's run, across all of its participants."""

    case: SuiteCase
    tracks: int
    packets: int
    dropped: int
    err_count: int

    @property
    def loss_ratio(self) -> float:
        return loss_ratio(self.packets, self.dropped)

    @classmethod
    def from_result(cls, case: SuiteCase, result: LoadTestResult) -> SuiteCaseResult:
        return cls(
            case=case,
            tracks=result.total.tracks,
            packets=result.total.packets,
            dropped=result.total.dropped,
            err_count=result.total.err_count,
        )


class SuiteRunner:
    """Runs every case in order; the first failing case aborts the suite.

    Args:
        orchestrator: Runs each case's load test
        cases: Ordered cases to run
        on_case_complete: Called with each case's row as soon as it finishes
    """

    def __init__(
        self,
        orchestrator: LoadTestOrchestrator,
        cases: Sequence[SuiteCase] = DEFAULT_SUITE_CASES,
        on_case_complete: Callable[[SuiteCaseResult], None] | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.cases = list(cases)
        self.on_case_complete = on_case_complete

    async def run(
        self, base_params: RunParameters, cancel_event: asyncio.Event | None = None
    ) -> list[SuiteCaseResult]:
        """Run the suite.

        Raises:
            SuiteCaseError: If any case's run fails
        """
        cancel_event = cancel_event or asyncio.Event()
        results: list[SuiteCaseResult] = []

        for index, case in enumerate(self.cases):
            if cancel_event.is_set():
                break
            logger.info(f"[{index + 1}/{len(self.cases)}] Running test: {case.label}")
            try:
                result = await self.orchestrator.run(case.apply(base_params), cancel_event)
            except Exception as e:
                logger.error(f"[{index + 1}/{len(self.cases)}] {case.label} failed: {e}")
                raise SuiteCaseError(case.label, str(e)) from e

            # a case cut short by cancellation gets no row
            if cancel_event.is_set():
                logger.warning(f"{case.label} interrupted, no row recorded")
                break

            row = SuiteCaseResult.from_result(case, result)
            results.append(row)
            if self.on_case_complete is not None:
                self.on_case_complete(row)

        if len(results) < len(self.cases):
            logger.warning(f"Suite cancelled after {len(results)}/{len(self.cases)} cases")
        return results
