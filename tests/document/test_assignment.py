# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for path resolution, casting, and strict mode."""

from datetime import datetime, timezone
from typing import Any

import pytest
from bson import ObjectId

from docshape.compiler import Schema
from docshape.document import Document
from docshape.errors import CastError, UnknownPathError

# ###############
# Test Helpers
# ###############


def _blog_schema(**options: Any) -> Schema:
    return Schema(
        {
            "title": str,
            "published": datetime,
            "meta": {"votes": int, "favs": int},
            "tags": [str],
            "comments": [{"body": str, "votes": int}],
            "extra": {},
        },
        options or None,
    )


def _error_paths(document: Document) -> list[str]:
    return [error.path for error in document.cast_errors]


# ###############
# Casting
# ###############


class TestCasting:
    def test_values_are_cast_to_declared_types(self) -> None:
        doc = Document(
            _blog_schema(),
            {"title": 42, "published": "2024-05-01T00:00:00Z", "meta": {"votes": "7"}, "tags": ["a", 1]},
        )
        assert doc["title"] == "42"
        assert doc["published"] == datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert doc["meta.votes"] == 7
        assert doc["tags"] == ["a", "1"]
        assert doc.cast_errors == ()

    @pytest.mark.parametrize(
        ("path", "value"),
        [
            ("title", "Hobbits"),
            ("published", datetime(2024, 1, 1, tzinfo=timezone.utc)),
            ("meta.votes", 12),
            ("tags", ["one", "two"]),
            ("comments", [{"body": "nice", "votes": 2}]),
            ("extra", {"free": ["form"]}),
        ],
    )
    def test_assigned_value_round_trips(self, path: str, value: Any) -> None:
        doc = Document(_blog_schema())
        doc.set(path, value)
        assert doc.get(path) == value
        exported = doc.to_object()
        for segment in path.split("."):
            exported = exported[segment]
        assert exported == value

    def test_document_array_items_are_cast(self) -> None:
        doc = Document(_blog_schema(), {"comments": [{"body": 5, "votes": "3"}]})
        assert doc["comments"] == [{"body": "5", "votes": 3}]

    def test_array_index_assignment(self) -> None:
        doc = Document(_blog_schema(), {"tags": ["a"]})
        doc.set("tags.2", 7)
        assert doc["tags"] == ["a", None, "7"]

    def test_document_array_item_field_assignment(self) -> None:
        doc = Document(_blog_schema(), {"comments": [{"body": "x", "votes": 1}]})
        doc.set("comments.0.votes", "9")
        assert doc["comments.0.votes"] == 9
        assert doc.is_modified("comments.0.votes")

    def test_embedded_subdocument(self) -> None:
        address = Schema({"city": str, "zip": int})
        doc = Document(Schema({"address": address}), {"address": {"city": "Bree", "zip": "123"}})
        assert doc["address"] == {"city": "Bree", "zip": 123}
        doc.set("address.zip", "456")
        assert doc["address.zip"] == 456

    def test_mixed_values_accept_deep_writes(self) -> None:
        doc = Document(_blog_schema(), {"extra": {"a": 1}})
        doc.set("extra.b.c", 2)
        assert doc["extra"] == {"a": 1, "b": {"c": 2}}

    def test_setters_run_before_casting(self) -> None:
        schema = Schema(
            {
                "name": {"type": str, "trim": True, "lowercase": True},
                "code": {"type": str, "uppercase": True},
            }
        )
        doc = Document(schema, {"name": "  Frodo  ", "code": "ab"})
        assert doc["name"] == "frodo"
        assert doc["code"] == "AB"

    def test_custom_setter_receives_document(self) -> None:
        schema = Schema({"first": str, "slug": {"type": str, "set": lambda v, doc: f"{doc['first']}-{v}"}})
        doc = Document(schema, {"first": "sam", "slug": "gamgee"})
        assert doc["slug"] == "sam-gamgee"


# ###############
# Cast Errors
# ###############


class TestCastErrors:
    def test_failures_are_collected_not_raised(self) -> None:
        doc = Document(_blog_schema(), {"meta": {"votes": "many"}, "published": "someday", "title": "ok"})
        assert _error_paths(doc) == ["meta.votes", "published"]
        assert doc["title"] == "ok"
        error = doc.cast_errors[0]
        assert isinstance(error, CastError)
        assert error.expected == "Number"
        assert error.value == "many"

    def test_failed_value_is_not_stored(self) -> None:
        doc = Document(_blog_schema(), {"meta": {"votes": 3}})
        doc.set("meta.votes", "many")
        assert doc["meta.votes"] == 3

    def test_successful_assignment_clears_pending_error(self) -> None:
        doc = Document(_blog_schema(), {"meta": {"votes": "many"}})
        doc.set("meta.votes", 4)
        assert doc.cast_errors == ()

    def test_repeated_failure_keeps_first_seen_position(self) -> None:
        doc = Document(_blog_schema())
        doc.set({"published": "never", "meta.votes": "x"})
        doc.set("published", "still never")
        assert _error_paths(doc) == ["published", "meta.votes"]
        assert doc.cast_errors[0].value == "still never"

    def test_array_element_failure_rejects_whole_array(self) -> None:
        doc = Document(_blog_schema(), {"comments": [{"body": "a", "votes": 1}]})
        doc.set("comments", [{"body": "b", "votes": "x"}])
        assert _error_paths(doc) == ["comments.0.votes"]
        assert doc["comments"] == [{"body": "a", "votes": 1}]

    def test_reassigning_array_clears_element_errors(self) -> None:
        doc = Document(_blog_schema(), {"comments": [{"body": "b", "votes": "x"}]})
        doc.set("comments", [{"body": "b", "votes": 2}])
        assert doc.cast_errors == ()

    def test_nested_path_requires_mapping(self) -> None:
        doc = Document(_blog_schema())
        doc.set("meta", 5)
        assert _error_paths(doc) == ["meta"]
        assert doc.cast_errors[0].expected == "Object"

    def test_invalid_identifier(self) -> None:
        doc = Document(Schema({"owner": ObjectId}), {"owner": "not-an-id"})
        assert _error_paths(doc) == ["owner"]


# ###############
# Strict Mode
# ###############


class TestStrictMode:
    def test_strict_true_drops_unknown_paths(self) -> None:
        doc = Document(_blog_schema(), {"title": "t", "rating": 5})
        assert "rating" not in doc.to_object()
        assert not doc.is_modified("rating")

    def test_strict_false_stores_unknown_paths_untyped(self) -> None:
        doc = Document(_blog_schema(strict=False), {"title": "t", "rating": "5"})
        assert doc.to_object()["rating"] == "5"
        assert doc.to_json()["rating"] == "5"

    def test_strict_throw_fails_the_assignment(self) -> None:
        with pytest.raises(UnknownPathError, match='Path "rating" is not in schema'):
            Document(_blog_schema(strict="throw"), {"rating": 5})

    def test_instance_override(self) -> None:
        doc = Document(_blog_schema(), {"rating": 5}, strict=False)
        assert doc.strict is False
        assert doc["rating"] == 5

    def test_per_call_override(self) -> None:
        doc = Document(_blog_schema())
        with pytest.raises(UnknownPathError):
            doc.set("rating", 1, strict="throw")
        doc.set("rating", 1, strict=False)
        assert doc["rating"] == 1

    def test_unknown_field_inside_subdocument(self) -> None:
        doc = Document(_blog_schema(strict="throw"))
        with pytest.raises(UnknownPathError) as exc_info:
            doc.set("comments", [{"body": "x", "mood": "happy"}])
        assert exc_info.value.path == "comments.0.mood"

    def test_unknown_field_under_nested_object(self) -> None:
        doc = Document(_blog_schema(), {"meta": {"votes": 1, "views": 10}})
        assert doc["meta"] == {"votes": 1}

    def test_hydrated_documents_keep_undeclared_fields(self) -> None:
        doc = Document(_blog_schema(strict="throw"), {"title": "t", "legacy": True}, is_new=False)
        assert doc["legacy"] is True
