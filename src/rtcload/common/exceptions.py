# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Exception hierarchy for rtcload."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rtcload.orchestrator.models import LoadTestResult, ParticipantRun

__all__ = [
    "AdmissionCancelled",
    "ParticipantError",
    "RtcLoadError",
    "SetupError",
    "SuiteCaseError",
]


class RtcLoadError(Exception):
    """Base class for all rtcload errors."""


class SetupError(RtcLoadError):
    """Invalid configuration detected before any participant was spawned."""


class AdmissionCancelled(RtcLoadError):
    """Spawning was aborted because the cancellation signal fired.

    The participants admitted before the cancellation are still drained, and
    are available on ``runs``. ``result`` holds their summaries so that
    callers can render a partial report.
    """

    def __init__(
        self,
        message: str = "admission cancelled",
        runs: list[ParticipantRun] | None = None,
        result: LoadTestResult | None = None,
    ) -> None:
        super().__init__(message)
        self.runs: list[ParticipantRun] = runs or []
        self.result = result


class ParticipantError(RtcLoadError):
    """A single participant failed to get a session, connect or publish.

    Never propagated out of a run: it is captured into that participant's
    summary instead.
    """

    def __init__(self, name: str, message: str) -> None:
        super().__init__(message)
        self.name = name


class SuiteCaseError(RtcLoadError):
    """A run-level failure inside one suite case; aborts the whole suite."""

    def __init__(self, case: str, message: str) -> None:
        super().__init__(f"suite case {case} failed: {message}")
        self.case = case
