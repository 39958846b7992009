# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import os
from pathlib import Path
from typing import Annotated, Literal

from cyclopts import Parameter
from pydantic import BaseModel, Field, field_validator, model_validator

from rtcload.common.config.groups import Groups
from rtcload.orchestrator.models import RunParameters, clamp_num_per_second

DEFAULT_URL = "http://localhost:7880"
LOOPBACK_SESSION_FACTORY = "loopback"


class LoadTestConfig(BaseModel):
    """User-facing configuration of a load test or suite."""

    url: Annotated[
        str,
        Field(
            default_factory=lambda: os.environ.get("LIVEKIT_URL", DEFAULT_URL),
            description="URL of the media server. Defaults to $LIVEKIT_URL.",
        ),
        Parameter(name=("--url",), group=Groups.CONNECTION),
    ]

    api_key: Annotated[
        str | None,
        Field(
            default_factory=lambda: os.environ.get("LIVEKIT_API_KEY"),
            description="API key handed to each session. Defaults to $LIVEKIT_API_KEY.",
        ),
        Parameter(name=("--api-key",), group=Groups.CONNECTION),
    ]

    api_secret: Annotated[
        str | None,
        Field(
            default_factory=lambda: os.environ.get("LIVEKIT_API_SECRET"),
            description="API secret handed to each session. Defaults to $LIVEKIT_API_SECRET.",
            repr=False,
        ),
        Parameter(name=("--api-secret",), group=Groups.CONNECTION),
    ]

    room: Annotated[
        str,
        Field(description="Room to join. A random room name is used when empty."),
        Parameter(name=("--room",), group=Groups.CONNECTION),
    ] = ""

    video_publishers: Annotated[
        int,
        Field(ge=0, description="Number of participants publishing video."),
        Parameter(name=("--video-publishers", "--publishers"), group=Groups.PARTICIPANTS),
    ] = 0

    audio_publishers: Annotated[
        int,
        Field(ge=0, description="Number of participants publishing audio."),
        Parameter(name=("--audio-publishers",), group=Groups.PARTICIPANTS),
    ] = 0

    subscribers: Annotated[
        int,
        Field(ge=0, description="Number of participants subscribing to every track."),
        Parameter(name=("--subscribers",), group=Groups.PARTICIPANTS),
    ] = 0

    video_resolution: Annotated[
        Literal["high", "medium", "low"],
        Field(description="Resolution of published video."),
        Parameter(name=("--video-resolution",), group=Groups.MEDIA),
    ] = "high"

    video_codec: Annotated[
        Literal["h264", "vp8"],
        Field(description="Codec of published video."),
        Parameter(name=("--video-codec",), group=Groups.MEDIA),
    ] = "h264"

    simulcast: Annotated[
        bool,
        Field(description="Publish video as simulcast."),
        Parameter(name=("--simulcast",), group=Groups.MEDIA),
    ] = True

    duration: Annotated[
        float,
        Field(
            ge=0,
            description="Seconds to keep the room open once everyone has joined. "
            "0 runs until interrupted.",
        ),
        Parameter(name=("--duration",), group=Groups.LOAD),
    ] = 0.0

    num_per_second: Annotated[
        float,
        Field(
            description="Participants to start per second. Clamped to [1, 10]; "
            "0 or less uses 5.",
        ),
        Parameter(name=("--num-per-second",), group=Groups.LOAD),
    ] = 5.0

    simulate_speakers: Annotated[
        bool,
        Field(description="Rotate the active speaker among publishers."),
        Parameter(name=("--simulate-speakers",), group=Groups.LOAD),
    ] = False

    session_factory: Annotated[
        str,
        Field(
            description="Participant session implementation: 'loopback' for the "
            "in-process simulator, or 'module:attribute' naming a session factory.",
        ),
        Parameter(name=("--session-factory",), group=Groups.SESSION),
    ] = LOOPBACK_SESSION_FACTORY

    loopback_drop_rate: Annotated[
        float,
        Field(ge=0, le=1, description="Packet loss probability of the loopback session."),
        Parameter(name=("--loopback-drop-rate",), group=Groups.SESSION),
    ] = 0.0

    loopback_failure_rate: Annotated[
        float,
        Field(ge=0, le=1, description="Connect failure probability of the loopback session."),
        Parameter(name=("--loopback-failure-rate",), group=Groups.SESSION),
    ] = 0.0

    output_json: Annotated[
        Path | None,
        Field(description="Also write the run report as JSON to this file or directory."),
        Parameter(name=("--output-json",), group=Groups.OUTPUT),
    ] = None

    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR"],
        Field(description="Logging level."),
        Parameter(name=("--log-level",), group=Groups.OUTPUT),
    ] = "INFO"

    @field_validator("num_per_second", mode="after")
    @classmethod
    def clamp_rate(cls, v: float) -> float:
        """Keep the ramp-up rate within what the server can absorb."""
        return clamp_num_per_second(v)

    @model_validator(mode="after")
    def default_participants(self) -> "LoadTestConfig":
        """With no participants requested, run one video publisher and one subscriber."""
        if self.video_publishers == 0 and self.audio_publishers == 0 and self.subscribers == 0:
            self.video_publishers = 1
            self.subscribers = 1
        return self

    def to_run_parameters(self) -> RunParameters:
        return RunParameters(
            video_publishers=self.video_publishers,
            audio_publishers=self.audio_publishers,
            subscribers=self.subscribers,
            video_resolution=self.video_resolution,
            video_codec=self.video_codec,
            duration_sec=self.duration,
            num_per_second=self.num_per_second,
            simulcast=self.simulcast,
            simulate_speakers=self.simulate_speakers,
            room=self.room,
            url=self.url,
            api_key=self.api_key,
            api_secret=self.api_secret,
        )
