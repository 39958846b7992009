# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""JSON export of a run's summaries."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import orjson

if TYPE_CHECKING:
    from rtcload.orchestrator.models import LoadTestResult

logger = logging.getLogger(__name__)


class JsonReportExporter:
    """Writes per-participant summaries, per-track counters and the totals.

    Output structure:
    {
        "room": "testroom42",
        "parameters": {...},
        "participants": {"Sub 0": {..., "tracks_detail": [...]}, ...},
        "total": {...},
        "subscriber_total": {...}
    }

    Args:
        result: Finished run to export
        output_path: File to write, or a directory to write the default name into
    """

    FILE_NAME = "rtcload_report.json"

    def __init__(self, result: LoadTestResult, output_path: Path) -> None:
        self._result = result
        self._output_path = Path(output_path)

    def get_file_path(self) -> Path:
        if self._output_path.suffix.lower() == ".json":
            return self._output_path
        return self._output_path / self.FILE_NAME

    def _generate_content(self) -> bytes:
        result = self._result
        participants = {}
        for run in result.runs:
            summary = result.summaries[run.name].model_dump(mode="json")
            summary["role"] = run.role.label
            summary["tracks_detail"] = [
                {
                    "track_id": track.track_id,
                    "label": result.track_label(track.track_id),
                    "kind": track.kind.value,
                    "packets": track.packets,
                    "dropped": track.dropped,
                    "bytes": track.bytes,
                }
                for track in sorted(
                    run.stats.track_stats.values(),
                    key=lambda t: result.track_label(t.track_id),
                )
            ]
            participants[run.name] = summary

        output = {
            "room": result.params.room,
            "parameters": result.params.model_dump(
                mode="json", exclude={"api_key", "api_secret"}
            ),
            "participants": participants,
            "total": result.total.model_dump(mode="json")
            | {"loss_ratio": result.total.loss_ratio},
            "subscriber_total": result.subscriber_total.model_dump(mode="json"),
        }
        return orjson.dumps(output, option=orjson.OPT_INDENT_2)

    async def export(self) -> Path:
        """Write the report and return the path written."""
        path = self.get_file_path()
        content = self._generate_content()
        await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(path.write_bytes, content)
        logger.info(f"JSON report written to: {path}")
        return path
