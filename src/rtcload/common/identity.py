# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Room name and identity prefix generation."""

import random
import string

_LETTERS = string.ascii_letters


class IdentityGenerator:
    """Generates room names and per-run identity prefixes.

    Pass a seeded ``random.Random`` to get reproducible names.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def room_name(self) -> str:
        return f"testroom{self._rng.randrange(1000)}"

    def identity_prefix(self, length: int = 5) -> str:
        return "".join(self._rng.choice(_LETTERS) for _ in range(length))
