# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Secondary-index declarations collected from a schema."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ###############
# Public Interface
# ###############

# Key values are a sort direction (1 / -1) or an index kind such as "2dsphere".
IndexKey = int | str


class IndexOptions(BaseModel):
    """Option bag attached to one index directive."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    unique: bool | None = None
    sparse: bool | None = None
    background: bool | None = None
    expire_after_seconds: int | None = Field(None, alias="expireAfterSeconds")

    def to_store(self) -> dict[str, Any]:
        """Return the options as handed to the store, dropping unset entries."""
        return self.model_dump(by_alias=True, exclude_none=True)


class IndexDirective(BaseModel):
    """An ordered key specification plus its options."""

    model_config = ConfigDict(frozen=True)

    keys: dict[str, IndexKey]
    options: IndexOptions = Field(default_factory=IndexOptions)
