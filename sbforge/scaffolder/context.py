"""Template context construction.

Every render call receives a context built here, with the same fixed set of
keys.  Project-level templates (the service descriptor) get
``application=None``; per-application templates get the current entry.  There
is no shared "current application" slot.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from sbforge.naming import NamingConverter, camel_to_dash, package_to_path
from sbforge.parser.models import Application, ProjectSpec

# Keys present in every rendering context.
CONTEXT_KEYS = (
    "project",
    "naming",
    "templates",
    "application",
    "output_path",
    "destination_root",
    "author",
)

MODULE_SUFFIXES = ("api", "service", "web")


class TemplateToolkit:
    """Path helpers exposed to templates as ``templates``.

    Paths are relative to the destination root and point into the nested
    project directory, which is where skeleton, descriptor and scaffolding
    files live until reconciliation flattens the tree.
    """

    def __init__(self, spec: ProjectSpec) -> None:
        self._spec = spec

    @property
    def project_dir(self) -> str:
        return camel_to_dash(self._spec.project_name)

    def module_dir(self, suffix: str) -> str:
        """``module_dir("service")`` -> ``my-blog/my-blog-service``."""
        if suffix not in MODULE_SUFFIXES:
            raise ValueError(f"Unknown module suffix {suffix!r}; expected one of {MODULE_SUFFIXES}")
        return f"{self.project_dir}/{self.project_dir}-{suffix}"

    def java_source_dir(self, suffix: str) -> str:
        return f"{self.module_dir(suffix)}/src/main/java/{self.package_path}"

    def resources_dir(self, suffix: str) -> str:
        return f"{self.module_dir(suffix)}/src/main/resources"

    @property
    def package_path(self) -> str:
        return package_to_path(self._spec.package_name)

    @property
    def service_xml_path(self) -> str:
        return f"{self.module_dir('service')}/service.xml"


def service_descriptor_path(spec: ProjectSpec, destination_root: str | Path) -> Path:
    """Where the service descriptor is rendered for *spec*."""
    return Path(destination_root) / TemplateToolkit(spec).service_xml_path


def build_context(
    spec: ProjectSpec,
    application: Optional[Application] = None,
    output_path_override: Optional[str | Path] = None,
    *,
    author: str = "",
    destination_root: str | Path = ".",
) -> dict[str, Any]:
    """Assemble the bindings for one render call.  Pure; performs no I/O."""
    return {
        "project": spec,
        "naming": NamingConverter(),
        "templates": TemplateToolkit(spec),
        "application": application,
        "output_path": str(output_path_override) if output_path_override is not None else None,
        "destination_root": str(destination_root),
        "author": author,
    }
