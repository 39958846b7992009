# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Human readable renderings of bitrate and packet loss."""

__all__ = [
    "format_bitrate",
    "format_loss_pair",
    "format_loss_percent",
    "loss_ratio",
]


def loss_ratio(packets: int, dropped: int) -> float:
    """Fraction of packets lost; 0.0 when nothing was observed at all."""
    total = packets + dropped
    if total == 0:
        return 0.0
    return dropped / total


def format_bitrate(num_bytes: int, elapsed_sec: float) -> str:
    """Render ``num_bytes`` over ``elapsed_sec`` as bps, Kbps or Mbps."""
    if elapsed_sec <= 0:
        return "0 bps"
    bps = num_bytes * 8 / elapsed_sec
    if bps < 1_000:
        return f"{int(bps)} bps"
    if bps < 1_000_000:
        return f"{bps / 1_000:.1f} Kbps"
    return f"{bps / 1_000_000:.1f} Mbps"


def format_loss_pair(packets: int, dropped: int) -> str:
    """Render loss as ``"<dropped>/<total>"`` rather than a percentage."""
    return f"{dropped}/{dropped + packets}"


def format_loss_percent(packets: int, dropped: int) -> str:
    return f"{100 * loss_ratio(packets, dropped):.3f}%"
