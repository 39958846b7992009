# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Report exporters for runs and suites."""

from rtcload.exporters.console_exporter import ConsoleReportExporter
from rtcload.exporters.json_exporter import JsonReportExporter
from rtcload.exporters.suite_exporter import SuiteTableExporter

__all__ = [
    "ConsoleReportExporter",
    "JsonReportExporter",
    "SuiteTableExporter",
]
