# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Schema-level option records.

Every option is accepted under its camelCase name (``typeKey``,
``validateBeforeSave``, ...) as well as its Python attribute name.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from docshape.errors import SchemaError

# ###############
# Public Interface
# ###############


class ExportOptions(BaseModel):
    """Options governing one export mode (``toObject`` or ``toJSON``).

    ``minimize`` left unset falls back to the schema-level ``minimize`` option.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    getters: bool = False
    virtuals: bool = False
    minimize: bool | None = None
    version_key: bool = Field(True, alias="versionKey")

    def overlay(self, other: ExportOptions | None) -> ExportOptions:
        """Return a copy where every field explicitly set on *other* wins."""
        if other is None:
            return self
        return self.model_copy(update={name: getattr(other, name) for name in other.model_fields_set})


class TimestampsOption(BaseModel):
    """Field names for the automatic creation and update timestamps; ``False`` disables one."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    created_at: str | Literal[False] = Field("createdAt", alias="createdAt")
    updated_at: str | Literal[False] = Field("updatedAt", alias="updatedAt")


class CappedOption(BaseModel):
    """Fixed-size collection settings passed through to the store."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    size: int | None = None
    max: int | None = None
    auto_index_id: bool | None = Field(None, alias="autoIndexId")


class SchemaOptions(BaseModel):
    """Flat record of every schema-level toggle."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    auto_index: bool = Field(True, alias="autoIndex")
    buffer_commands: bool = Field(True, alias="bufferCommands")
    capped: CappedOption | None = None
    collection: str | None = None
    emit_index_errors: bool = Field(False, alias="emitIndexErrors")
    id: bool = True
    auto_id: bool = Field(True, alias="_id")
    minimize: bool = True
    read: str | None = None
    safe: bool | dict[str, Any] | None = None
    write_concern: dict[str, Any] | None = Field(None, alias="writeConcern")
    shard_key: dict[str, int] | None = Field(None, alias="shardKey")
    strict: bool | Literal["throw"] = True
    to_json: ExportOptions | None = Field(None, alias="toJSON")
    to_object: ExportOptions | None = Field(None, alias="toObject")
    type_key: str = Field("type", alias="typeKey")
    validate_before_save: bool = Field(True, alias="validateBeforeSave")
    version_key: str | Literal[False] = Field("__v", alias="versionKey")
    skip_versioning: tuple[str, ...] = Field((), alias="skipVersioning")
    timestamps: TimestampsOption | None = None

    @field_validator("capped", mode="before")
    @classmethod
    def _expand_capped(cls, value: Any) -> Any:
        if value is False:
            return None
        if value is True:
            return {}
        if isinstance(value, int):
            return {"size": value}
        return value

    @field_validator("skip_versioning", mode="before")
    @classmethod
    def _expand_skip_versioning(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, Mapping):
            return tuple(path for path, enabled in value.items() if enabled)
        return value

    @field_validator("timestamps", mode="before")
    @classmethod
    def _expand_timestamps(cls, value: Any) -> Any:
        if value is True:
            return {}
        if value is False:
            return None
        return value

    @property
    def version_key_name(self) -> str | None:
        """The revision field name, or ``None`` when versioning is disabled."""
        return self.version_key or None

    @property
    def created_at_key(self) -> str | None:
        return self.timestamps.created_at or None if self.timestamps else None

    @property
    def updated_at_key(self) -> str | None:
        return self.timestamps.updated_at or None if self.timestamps else None

    def resolved_write_concern(self) -> dict[str, Any] | None:
        """Merge ``safe`` and ``writeConcern`` into the mapping handed to the store."""
        if self.write_concern is not None:
            return dict(self.write_concern)
        if isinstance(self.safe, dict):
            return dict(self.safe)
        if self.safe is True:
            return {"w": 1}
        if self.safe is False:
            return {"w": 0}
        return None

    def skips_versioning(self, path: str) -> bool:
        """Return True if mutating *path* must not bump the revision."""
        return any(path == skip or path.startswith(skip + ".") for skip in self.skip_versioning)

    def child_options(self) -> SchemaOptions:
        """Options for a sub-schema: inherited toggles, no identifier, revision, or timestamps."""
        return self.model_copy(update={"auto_id": False, "version_key": False, "timestamps": None})

    def with_option(self, name: str, value: Any) -> SchemaOptions:
        """Return a re-validated copy with one option replaced.

        Raises:
            SchemaError: If *name* is not a known option or *value* is invalid.
        """
        field_name = option_field_name(name)
        data = self.model_dump(by_alias=True)
        alias = SchemaOptions.model_fields[field_name].alias or field_name
        data[alias] = value
        return parse_options(data)


def option_field_name(name: str) -> str:
    """Map an option name or its camelCase alias to the attribute name.

    Raises:
        SchemaError: If *name* matches no option.
    """
    for field_name, info in SchemaOptions.model_fields.items():
        if name in (field_name, info.alias):
            return field_name
    raise SchemaError(f"Unknown schema option '{name}'")


def parse_options(options: SchemaOptions | Mapping[str, Any] | None) -> SchemaOptions:
    """Validate a raw option mapping into a :class:`SchemaOptions` record.

    Raises:
        SchemaError: If the mapping holds unknown options or invalid values.
    """
    if options is None:
        return SchemaOptions()
    if isinstance(options, SchemaOptions):
        return options
    try:
        return SchemaOptions.model_validate(dict(options))
    except ValidationError as exc:
        raise SchemaError(f"Invalid schema options: {exc}") from exc
