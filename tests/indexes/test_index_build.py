# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the sequential index build."""

import asyncio
from typing import Any

import pytest

from docshape.errors import IndexBuildError
from docshape.indexes import IndexBuild, IndexBuildResult
from docshape.model import IndexDirective, IndexOptions

# ###############
# Test Helpers
# ###############


class _RecordingStore:
    """Store stand-in that records index calls and fails on chosen key paths."""

    def __init__(self, failing: set[str] | None = None) -> None:
        self.calls: list[tuple[str, dict[str, Any], dict[str, Any]]] = []
        self._failing = failing or set()

    async def create_index(self, collection: str, keys: dict[str, Any], options: dict[str, Any]) -> str:
        self.calls.append((collection, keys, options))
        if self._failing & set(keys):
            raise ValueError(f"cannot index {', '.join(keys)}")
        return "_".join(f"{path}_{direction}" for path, direction in keys.items())


def _directive(path: str, **options: Any) -> IndexDirective:
    return IndexDirective(keys={path: 1}, options=IndexOptions.model_validate(options))


def _directives() -> list[IndexDirective]:
    return [_directive("email", unique=True), _directive("name"), _directive("age")]


# ###############
# Index Build
# ###############


class TestIndexBuild:
    def test_directives_are_issued_in_order(self) -> None:
        store = _RecordingStore()
        result = asyncio.run(IndexBuild("users", _directives()).run(store))
        assert [keys for _, keys, _ in store.calls] == [{"email": 1}, {"name": 1}, {"age": 1}]
        assert store.calls[0] == ("users", {"email": 1}, {"unique": True})
        assert result.created == ("email_1", "name_1", "age_1")
        assert result.succeeded

    def test_single_terminal_signal_on_success(self) -> None:
        results: list[IndexBuildResult] = []
        build = IndexBuild("users", _directives()).on_complete(results.append)
        asyncio.run(build.run(_RecordingStore()))
        assert len(results) == 1
        assert results[0].collection == "users"

    def test_failure_does_not_stop_remaining_directives(self) -> None:
        store = _RecordingStore(failing={"name"})
        results: list[IndexBuildResult] = []
        build = IndexBuild("users", _directives()).on_complete(results.append)
        result = asyncio.run(build.run(store))
        assert len(store.calls) == 3
        assert result.created == ("email_1", "age_1")
        assert not result.succeeded
        assert len(result.errors) == 1
        assert result.errors[0].directive.keys == {"name": 1}
        assert isinstance(result.errors[0].cause, ValueError)
        assert results == [result]

    def test_errors_are_not_signalled_individually_by_default(self) -> None:
        seen: list[IndexBuildError] = []
        build = IndexBuild("users", _directives()).on_error(seen.append)
        asyncio.run(build.run(_RecordingStore(failing={"name", "age"})))
        assert seen == []

    def test_errors_are_signalled_when_enabled(self) -> None:
        seen: list[IndexBuildError] = []
        build = IndexBuild("users", _directives(), emit_index_errors=True).on_error(seen.append)
        result = asyncio.run(build.run(_RecordingStore(failing={"name", "age"})))
        assert [error.directive.keys for error in seen] == [{"name": 1}, {"age": 1}]
        assert list(result.errors) == seen

    def test_empty_build_completes(self) -> None:
        results: list[IndexBuildResult] = []
        result = asyncio.run(IndexBuild("users", []).on_complete(results.append).run(_RecordingStore()))
        assert result.created == ()
        assert results == [result]

    def test_build_runs_once(self) -> None:
        build = IndexBuild("users", _directives())
        store = _RecordingStore()
        asyncio.run(build.run(store))
        with pytest.raises(RuntimeError, match="already run"):
            asyncio.run(build.run(store))
        assert len(store.calls) == 3
