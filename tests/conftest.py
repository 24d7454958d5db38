"""Shared pytest fixtures for the sbforge test suite.

Provides reusable fixtures for:
- A sample ``base.json`` specification (MyBlog / BlogEntry)
- A workspace directory holding that specification
- A small throw-away template tree for resolver/renderer tests
- A recording fake for the build invoker
- Mock subprocess helpers
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from sbforge.builder import BuildResult
from sbforge.parser import ProjectSpec


# ---------------------------------------------------------------------------
# Specification
# ---------------------------------------------------------------------------

@pytest.fixture
def blog_spec_data() -> dict[str, Any]:
    """Raw ``base.json`` content for the MyBlog sample project."""
    return {
        "projectName": "MyBlog",
        "packageName": "com.example.blog",
        "platformVersion": "7.0",
        "applications": [
            {
                "model": "BlogEntry",
                "title": "Blog Entry",
                "fields": [
                    {"name": "headline", "type": "String"},
                    {"name": "body", "type": "String", "label": "Content"},
                    {"name": "publishDate", "type": "Date"},
                ],
                "assetCategories": True,
            },
        ],
    }


@pytest.fixture
def blog_spec(blog_spec_data: dict[str, Any]) -> ProjectSpec:
    return ProjectSpec.model_validate(blog_spec_data)


@pytest.fixture
def workspace(tmp_path: Path, blog_spec_data: dict[str, Any]) -> Path:
    """Destination root containing ``base.json``."""
    root = tmp_path / "workspace"
    root.mkdir()
    (root / "base.json").write_text(json.dumps(blog_spec_data, indent=2), encoding="utf-8")
    yield root


# ---------------------------------------------------------------------------
# Template trees
# ---------------------------------------------------------------------------

@pytest.fixture
def template_tree(tmp_path: Path) -> Path:
    """A minimal template root with one platform version (``1.0``).

    Contains two prefixed templates (deliberately created out of order), a
    nested prefixed template, a macro library and a project-level template.
    """
    root = tmp_path / "templates"
    version = root / "1.0"
    (version / "nested").mkdir(parents=True)

    files = {
        "Portlet_b.txt.j2": (
            '{% set target_path = "out/" ~ application.model ~ "-b.txt" %}'
            "B for {{ application.model }}\n"
        ),
        "Portlet_a.txt.j2": (
            '{% import "_lib.j2" as lib %}'
            '{% set target_path = "out/" ~ application.model ~ "-a.txt" %}'
            "{{ lib.shout(application.model) }}\n"
        ),
        "nested/Portlet_c.txt.j2": (
            '{% set target_path = "out/" ~ (application.model | dash_case) ~ "-c.txt" %}'
            "C\n"
        ),
        "_lib.j2": "{% macro shout(value) %}{{ value | upper }}!{% endmacro %}",
        "project.txt.j2": "{{ project.project_name }} by {{ author or 'nobody' }}\n",
        "broken.txt.j2": "{% if %}\n",
        "needs_missing.txt.j2": "{{ not_a_binding }}\n",
        "undeclared.txt.j2": "no target path here\n",
        "field_names.txt.j2": (
            "{% for field in application.fields %}{{ field.name | pascal_case }}\n{% endfor %}"
        ),
        "zero.txt.j2": "{{ application.fields | length // 0 }}\n",
    }
    for name, body in files.items():
        (version / name).write_text(body, encoding="utf-8")
    yield root


# ---------------------------------------------------------------------------
# Fake build invoker
# ---------------------------------------------------------------------------

class FakeBuilder:
    """Records build invocations and returns scripted results.

    ``outcomes`` is consumed one entry per call: ``True`` succeeds, ``False``
    fails with exit code 1, ``"timeout"`` reports a timed-out build.
    """

    def __init__(self, events: list[tuple], outcomes: list[Any] | None = None) -> None:
        self.events = events
        self.outcomes = list(outcomes or [])
        self.calls: list[tuple[Path, str]] = []

    async def invoke(self, artifact_path: Path, task: str) -> BuildResult:
        self.calls.append((Path(artifact_path), task))
        self.events.append(("build", Path(artifact_path), task))
        outcome = self.outcomes.pop(0) if self.outcomes else True
        if outcome == "timeout":
            return BuildResult(
                success=False, task=task, artifact=Path(artifact_path), timed_out=True,
                errors=["Build timed out after 1s"],
            )
        return BuildResult(
            success=bool(outcome),
            task=task,
            artifact=Path(artifact_path),
            exit_code=0 if outcome else 1,
            errors=[] if outcome else ["FAILURE: Build failed with an exception."],
        )


@pytest.fixture
def events() -> list[tuple]:
    """Shared, ordered log that instrumented collaborators append to."""
    return []


@pytest.fixture
def make_builder(events: list[tuple]):
    """Factory for ``FakeBuilder`` instances sharing the ``events`` log.

    Usage:
        builder = make_builder([True, "timeout"])
    """
    def factory(outcomes: list[Any] | None = None) -> FakeBuilder:
        return FakeBuilder(events, outcomes)

    return factory


# ---------------------------------------------------------------------------
# Mock Subprocess (generic)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Factory for mock asyncio subprocess instances.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
