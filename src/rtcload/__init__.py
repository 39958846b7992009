# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""rtcload - load tester for real-time multi-party rooms."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("rtcload")
except PackageNotFoundError:
    __version__ = "unknown"
