# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Per-track and per-participant packet counters.

Counters are written by a session's delivery path, which may run on a
different thread than the event loop (native media callbacks), so every
mutation goes through the owning object's lock.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from enum import Enum

__all__ = [
    "TesterStats",
    "TrackKind",
    "TrackStats",
]


class TrackKind(str, Enum):
    """Media kind of a track."""

    AUDIO = "audio"
    VIDEO = "video"


class TrackStats:
    """Monotonic counters for one subscribed track."""

    __slots__ = ("track_id", "kind", "started_at", "_packets", "_dropped", "_bytes", "_lock")

    def __init__(self, track_id: str, kind: TrackKind, started_at: float) -> None:
        self.track_id = track_id
        self.kind = kind
        self.started_at = started_at
        self._packets = 0
        self._dropped = 0
        self._bytes = 0
        self._lock = threading.Lock()

    def add_packet(self, size: int) -> None:
        with self._lock:
            self._packets += 1
            self._bytes += size

    def add_dropped(self, count: int = 1) -> None:
        if count < 0:
            raise ValueError(f"dropped count must be non-negative, got {count}")
        with self._lock:
            self._dropped += count

    @property
    def packets(self) -> int:
        return self._packets

    @property
    def dropped(self) -> int:
        return self._dropped

    @property
    def bytes(self) -> int:
        return self._bytes

    def __repr__(self) -> str:
        return (
            f"TrackStats(track_id={self.track_id!r}, kind={self.kind.value}, "
            f"packets={self._packets}, dropped={self._dropped}, bytes={self._bytes})"
        )


class TesterStats:
    """All track counters observed by one participant, plus its terminal error."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._tracks: dict[str, TrackStats] = {}
        self._lock = threading.Lock()
        self.error: BaseException | None = None

    def track(self, track_id: str, kind: TrackKind) -> TrackStats:
        """Return the counters for ``track_id``, creating them on first sight."""
        with self._lock:
            stats = self._tracks.get(track_id)
            if stats is None:
                stats = TrackStats(track_id, kind, started_at=self._clock())
                self._tracks[track_id] = stats
            return stats

    def record_packet(
        self, track_id: str, kind: TrackKind, size: int, dropped: bool = False
    ) -> None:
        """Count one received (or lost) packet for ``track_id``."""
        stats = self.track(track_id, kind)
        if dropped:
            stats.add_dropped()
        else:
            stats.add_packet(size)

    @property
    def track_stats(self) -> dict[str, TrackStats]:
        """A point-in-time copy of the track table."""
        with self._lock:
            return dict(self._tracks)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tracks)
