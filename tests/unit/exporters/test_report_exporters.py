# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Tests for the console, suite and JSON report exporters."""

from unittest.mock import Mock

import orjson
import pytest

from rtcload.common.exceptions import ParticipantError
from rtcload.exporters import ConsoleReportExporter, JsonReportExporter, SuiteTableExporter
from rtcload.orchestrator.models import LoadTestResult, ParticipantRun, RunParameters
from rtcload.orchestrator.suite import SuiteCase, SuiteCaseResult
from rtcload.stats.track_stats import TesterStats, TrackKind


@pytest.fixture
def result() -> LoadTestResult:
    """One publisher with two tracks and eleven subscribers, one of which failed."""
    params = RunParameters(
        video_publishers=1,
        audio_publishers=1,
        subscribers=11,
        room="testroom7",
        api_key="key",
        api_secret="secret",
    )
    runs = []
    for index in range(params.num_participants):
        stats = TesterStats(clock=lambda: 0.0)
        name = params.display_name_for(index)
        if not params.role_for(index).is_publisher and name != "Sub 3":
            for _ in range(99):
                stats.record_packet("TR_V000002", TrackKind.VIDEO, 1000)
                stats.record_packet("TR_A000001", TrackKind.AUDIO, 100)
            stats.record_packet("TR_V000002", TrackKind.VIDEO, 1000, dropped=True)
        run = ParticipantRun(
            name=name,
            sequence=index,
            role=params.role_for(index),
            expected_tracks=params.expected_tracks_for(index),
            session=Mock(),
            stats=stats,
            started_at=0.0,
        )
        run.finished_at = 10.0
        if name == "Sub 3":
            run.error = ParticipantError(name, "could not connect: refused")
        runs.append(run)
    return LoadTestResult.build(params, runs, {"TR_A000001": "0A", "TR_V000002": "0V"})


class TestConsoleReportExporter:
    def test_prints_participants_in_name_order(self, result, recording_console):
        ConsoleReportExporter(recording_console).export(result)
        text = recording_console.export_text()

        positions = [text.index(f"{name} ") for name in ("Pub 0", "Sub 0", "Sub 1", "Sub 10", "Sub 2")]
        assert positions == sorted(positions)

    def test_track_rows(self, result, recording_console):
        ConsoleReportExporter(recording_console).export(result)
        text = recording_console.export_text()

        assert "0A TR_A000001" in text
        assert "0V TR_V000002" in text
        # 99 packets of 1000 bytes over 10 seconds
        assert "79.2 Kbps" in text
        assert "1/100" in text

    def test_summary_and_total(self, result, recording_console):
        ConsoleReportExporter(recording_console).export(result)
        text = recording_console.export_text()

        assert "Summary" in text
        assert "could not connect: refused" in text
        assert "0/2" in text
        assert "20/22" in text
        assert "10/1990" in text

    def test_total_bitrate_counts_subscribers_only(self, result, recording_console):
        ConsoleReportExporter(recording_console).export(result)
        text = recording_console.export_text()

        # 1,089,000 bytes over 11 subscribers at 10s each; the publisher is left out
        assert "79.2 Kbps (7.2 Kbps avg)" in text

    def test_empty_result_prints_nothing(self, recording_console):
        ConsoleReportExporter(recording_console).export(
            LoadTestResult.build(RunParameters(), [])
        )
        assert recording_console.export_text() == ""

    def test_callable_as_reporter(self, result, recording_console):
        ConsoleReportExporter(recording_console)(result)
        assert "Total" in recording_console.export_text()


class TestSuiteTableExporter:
    def test_header_printed_once(self, recording_console):
        exporter = SuiteTableExporter(recording_console)
        row = SuiteCaseResult(SuiteCase(10, 100, False), tracks=1000, packets=999, dropped=1, err_count=0)

        exporter.print_header()
        exporter(row)
        exporter(row)

        lines = recording_console.export_text().splitlines()
        assert len(lines) == 3
        assert lines[0].startswith("Pubs  | Subs  | Tracks")
        assert "Packet loss" in lines[0]

    def test_row_cells(self, recording_console):
        exporter = SuiteTableExporter(recording_console)
        exporter.add_row(
            SuiteCaseResult(SuiteCase(1, 100, True), tracks=100, packets=90, dropped=10, err_count=2)
        )

        row = recording_console.export_text().splitlines()[1]
        cells = [c.strip() for c in row.split("|")]
        assert cells == ["1", "100", "100", "Yes", "Yes", "10.000%", "2"]


class TestJsonReportExporter:
    def test_file_path(self, result, tmp_path):
        assert JsonReportExporter(result, tmp_path).get_file_path() == tmp_path / "rtcload_report.json"
        assert JsonReportExporter(result, tmp_path / "x.json").get_file_path() == tmp_path / "x.json"

    @pytest.mark.asyncio
    async def test_export(self, result, tmp_path):
        path = await JsonReportExporter(result, tmp_path / "out").export()

        data = orjson.loads(path.read_bytes())
        assert data["room"] == "testroom7"
        assert "api_key" not in data["parameters"]
        assert "api_secret" not in data["parameters"]
        assert data["parameters"]["subscribers"] == 11
        assert list(data["participants"])[:3] == ["Pub 0", "Sub 0", "Sub 1"]

        sub = data["participants"]["Sub 0"]
        assert sub["role"] == "SUBSCRIBER"
        assert sub["tracks"] == 2
        assert [t["label"] for t in sub["tracks_detail"]] == ["0A", "0V"]
        assert sub["tracks_detail"][1]["dropped"] == 1

        assert data["participants"]["Sub 3"]["err_string"] == "could not connect: refused"
        assert data["participants"]["Pub 0"]["role"] == "VIDEO_PUBLISHER|AUDIO_PUBLISHER"
        assert data["total"]["err_count"] == 1
        assert data["total"]["loss_ratio"] == pytest.approx(10 / 1990)
        assert data["subscriber_total"]["participants"] == 11
        assert data["subscriber_total"]["bytes"] == data["total"]["bytes"] == 1_089_000
