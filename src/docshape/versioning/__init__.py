# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Revision tracking for optimistic concurrency."""

from docshape.versioning.controller import VersioningController, VersionState

__all__ = [
    "VersionState",
    "VersioningController",
]
