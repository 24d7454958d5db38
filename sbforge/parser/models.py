"""Pydantic v2 models for the project specification (``base.json``).

The document is parsed once per run and frozen afterwards.  Application
entries are mostly opaque to the pipeline: unknown keys are kept so that
templates can read whatever the template set expects.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from sbforge.naming import NamingError, camel_to_dash

_PACKAGE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


class Application(BaseModel):
    """One generated feature/module, typically one service entity."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow", frozen=True
    )

    model: str = Field(..., min_length=1, description="Entity name, e.g. 'BlogEntry'")
    title: str = Field(default="", description="Human-readable title for the UI")
    fields: tuple[dict[str, Any], ...] = Field(default_factory=tuple)

    @field_validator("model")
    @classmethod
    def _model_is_identifier(cls, value: str) -> str:
        try:
            camel_to_dash(value)
        except NamingError as exc:
            raise ValueError(str(exc)) from exc
        return value

    def extra(self, key: str, default: Any = None) -> Any:
        """Return a pass-through field that is not part of the declared model."""
        return (self.model_extra or {}).get(key, default)


class ProjectSpec(BaseModel):
    """Root of the specification document."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow", frozen=True
    )

    project_name: str = Field(..., description="Camel-case project name, e.g. 'MyBlog'")
    package_name: str = Field(..., description="Dotted namespace, e.g. 'com.example.blog'")
    platform_version: str = Field(default="7.0", description="Template set to use")
    applications: tuple[Application, ...] = Field(default_factory=tuple)

    @field_validator("project_name")
    @classmethod
    def _project_name_is_path_safe(cls, value: str) -> str:
        try:
            camel_to_dash(value)
        except NamingError as exc:
            raise ValueError(str(exc)) from exc
        return value.strip()

    @field_validator("package_name")
    @classmethod
    def _package_name_is_namespace(cls, value: str) -> str:
        if not _PACKAGE_NAME.match(value):
            raise ValueError(f"'{value}' is not a valid dotted package name")
        return value

    @property
    def dash_case_name(self) -> str:
        """Filesystem-safe project name (``MyBlog`` -> ``my-blog``)."""
        return camel_to_dash(self.project_name)
