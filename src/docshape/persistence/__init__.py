# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Model registration, the save operation, and document stores."""

from docshape.persistence.model import Model
from docshape.persistence.save import Clock, build_update, compress_paths, save_document, shard_key_filter
from docshape.persistence.store import DocumentStore, DuplicateKeyError, MemoryStore, StoreError

__all__ = [
    "Model",
    # Save
    "Clock",
    "build_update",
    "compress_paths",
    "save_document",
    "shard_key_filter",
    # Stores
    "DocumentStore",
    "DuplicateKeyError",
    "MemoryStore",
    "StoreError",
]
