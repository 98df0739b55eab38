# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the schema option records."""

import pytest

from docshape.errors import SchemaError
from docshape.model import ExportOptions, SchemaOptions, option_field_name, parse_options

# ###############
# Parsing
# ###############


class TestParseOptions:
    def test_defaults(self) -> None:
        options = parse_options(None)
        assert options.auto_index is True
        assert options.version_key_name == "__v"
        assert options.strict is True
        assert options.type_key == "type"
        assert options.timestamps is None
        assert options.resolved_write_concern() is None

    def test_aliases_and_attribute_names(self) -> None:
        assert parse_options({"typeKey": "$type"}).type_key == "$type"
        assert parse_options({"type_key": "$type"}).type_key == "$type"

    def test_existing_record_is_returned(self) -> None:
        options = SchemaOptions(minimize=False)
        assert parse_options(options) is options

    def test_unknown_option(self) -> None:
        with pytest.raises(SchemaError, match="Invalid schema options"):
            parse_options({"autoIndexes": True})

    def test_records_are_frozen(self) -> None:
        with pytest.raises(ValueError):
            parse_options(None).minimize = False  # type: ignore[misc]


class TestOptionExpansion:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (1024, {"size": 1024}),
            (True, {}),
            ({"size": 10, "max": 2, "autoIndexId": False}, {"size": 10, "max": 2, "autoIndexId": False}),
        ],
    )
    def test_capped(self, value: object, expected: dict[str, object]) -> None:
        capped = parse_options({"capped": value}).capped
        assert capped is not None
        assert capped.model_dump(by_alias=True, exclude_none=True) == expected

    def test_capped_false(self) -> None:
        assert parse_options({"capped": False}).capped is None

    def test_skip_versioning_mapping(self) -> None:
        options = parse_options({"skipVersioning": {"views": True, "meta.votes": True, "tags": False}})
        assert options.skip_versioning == ("views", "meta.votes")
        assert options.skips_versioning("meta.votes")
        assert options.skips_versioning("views.daily")
        assert not options.skips_versioning("viewsTotal")
        assert not options.skips_versioning("tags")

    def test_timestamps(self) -> None:
        options = parse_options({"timestamps": True})
        assert (options.created_at_key, options.updated_at_key) == ("createdAt", "updatedAt")
        options = parse_options({"timestamps": {"createdAt": "born", "updatedAt": False}})
        assert (options.created_at_key, options.updated_at_key) == ("born", None)
        assert parse_options({"timestamps": False}).created_at_key is None

    def test_version_key_disabled(self) -> None:
        assert parse_options({"versionKey": False}).version_key_name is None

    @pytest.mark.parametrize(
        ("options", "expected"),
        [
            ({"safe": True}, {"w": 1}),
            ({"safe": False}, {"w": 0}),
            ({"safe": {"w": 2}}, {"w": 2}),
            ({"safe": False, "writeConcern": {"w": 3}}, {"w": 3}),
        ],
    )
    def test_write_concern(self, options: dict[str, object], expected: dict[str, object]) -> None:
        assert parse_options(options).resolved_write_concern() == expected


# ###############
# Derived Records
# ###############


class TestDerivedOptions:
    def test_with_option_replaces_one_value(self) -> None:
        options = parse_options({"collection": "posts"})
        updated = options.with_option("versionKey", "rev")
        assert updated.version_key_name == "rev"
        assert updated.collection == "posts"
        assert options.version_key_name == "__v"

    def test_with_option_revalidates(self) -> None:
        assert parse_options(None).with_option("capped", 10).capped is not None
        with pytest.raises(SchemaError):
            parse_options(None).with_option("minimize", [1])

    def test_child_options_drop_root_fields(self) -> None:
        child = parse_options({"timestamps": True, "strict": "throw"}).child_options()
        assert child.auto_id is False
        assert child.version_key_name is None
        assert child.timestamps is None
        assert child.strict == "throw"

    def test_option_field_name(self) -> None:
        assert option_field_name("validateBeforeSave") == "validate_before_save"
        assert option_field_name("minimize") == "minimize"
        assert option_field_name("_id") == "auto_id"
        with pytest.raises(SchemaError, match="Unknown schema option 'nope'"):
            option_field_name("nope")


class TestExportOverlay:
    def test_only_explicit_fields_win(self) -> None:
        base = ExportOptions(getters=True, minimize=False)
        merged = base.overlay(ExportOptions(virtuals=True))
        assert (merged.getters, merged.virtuals, merged.minimize) == (True, True, False)

    def test_overlay_none(self) -> None:
        base = ExportOptions(getters=True)
        assert base.overlay(None) is base

    def test_version_key_alias(self) -> None:
        assert ExportOptions.model_validate({"versionKey": False}).version_key is False
