# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Load test orchestration: pacing, speaker simulation, runs and suites."""

from rtcload.orchestrator.models import (
    LoadTestResult,
    LoadTestState,
    ParticipantRole,
    ParticipantRun,
    RunParameters,
    clamp_num_per_second,
)
from rtcload.orchestrator.orchestrator import LoadTestOrchestrator, check_target
from rtcload.orchestrator.pacer import AdmissionPacer
from rtcload.orchestrator.speaker import SpeakerSimulator
from rtcload.orchestrator.suite import (
    DEFAULT_SUITE_CASES,
    SuiteCase,
    SuiteCaseResult,
    SuiteRunner,
)

__all__ = [
    "DEFAULT_SUITE_CASES",
    "AdmissionPacer",
    "LoadTestOrchestrator",
    "LoadTestResult",
    "LoadTestState",
    "ParticipantRole",
    "ParticipantRun",
    "RunParameters",
    "SpeakerSimulator",
    "SuiteCase",
    "SuiteCaseResult",
    "SuiteRunner",
    "check_target",
    "clamp_num_per_second",
]
