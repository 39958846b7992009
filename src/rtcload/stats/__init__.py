# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Packet counters, summaries and their text renderings."""

from rtcload.stats.formatting import (
    format_bitrate,
    format_loss_pair,
    format_loss_percent,
    loss_ratio,
)
from rtcload.stats.summary import (
    SuiteSummary,
    Summary,
    suite_summary,
    tester_summary,
)
from rtcload.stats.track_stats import TesterStats, TrackKind, TrackStats

__all__ = [
    "SuiteSummary",
    "Summary",
    "TesterStats",
    "TrackKind",
    "TrackStats",
    "format_bitrate",
    "format_loss_pair",
    "format_loss_percent",
    "loss_ratio",
    "suite_summary",
    "tester_summary",
]
