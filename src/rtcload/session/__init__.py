# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Participant sessions consumed by the orchestrator."""

from rtcload.session.loopback import (
    LoopbackServer,
    LoopbackSession,
    LoopbackSessionFactory,
)
from rtcload.session.protocols import (
    ParticipantSession,
    SessionFactory,
    SessionParams,
)

__all__ = [
    "LoopbackServer",
    "LoopbackSession",
    "LoopbackSessionFactory",
    "ParticipantSession",
    "SessionFactory",
    "SessionParams",
]
