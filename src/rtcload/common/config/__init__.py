# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from rtcload.common.config.groups import Groups
from rtcload.common.config.load_test_config import (
    DEFAULT_URL,
    LOOPBACK_SESSION_FACTORY,
    LoadTestConfig,
)

__all__ = [
    "DEFAULT_URL",
    "LOOPBACK_SESSION_FACTORY",
    "Groups",
    "LoadTestConfig",
]
