# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from cyclopts import Group


class Groups:
    """Help panels of the command line, in display order."""

    CONNECTION = Group.create_ordered("Connection")
    PARTICIPANTS = Group.create_ordered("Participants")
    MEDIA = Group.create_ordered("Media")
    LOAD = Group.create_ordered("Load")
    SESSION = Group.create_ordered("Session")
    OUTPUT = Group.create_ordered("Output")
