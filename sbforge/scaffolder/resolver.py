"""Template discovery for a platform version.

Templates live under ``<templates_dir>/<platform_version>/``.  Only files
whose name starts with the configured prefix are rendered per application;
everything else (library macros, the service descriptor, skeleton files) is
reachable only by explicit name.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from sbforge.config import BUNDLED_TEMPLATES_DIR

TEMPLATE_SUFFIX = ".j2"


class OutputPolicy(str, Enum):
    """Where a rendered template is written."""

    EXPLICIT = "explicit"  # caller supplied the path
    DECLARED = "declared"  # template sets ``target_path`` itself


class TemplateResolutionError(Exception):
    """Raised when a template set cannot be located."""

    def __init__(self, message: str, platform_version: str = "") -> None:
        self.platform_version = platform_version
        super().__init__(message)


@dataclass(frozen=True)
class TemplateDescriptor:
    """A template (by loader name) plus its output-path policy."""

    name: str
    output_path: Optional[Path] = None

    @property
    def policy(self) -> OutputPolicy:
        return OutputPolicy.EXPLICIT if self.output_path is not None else OutputPolicy.DECLARED


def version_root(platform_version: str, templates_dir: str | Path | None = None) -> Path:
    """Return the template directory for *platform_version*.

    Raises:
        TemplateResolutionError: If no template set exists for the version.
    """
    base = Path(templates_dir) if templates_dir is not None else BUNDLED_TEMPLATES_DIR
    root = base / platform_version
    if not platform_version or not root.is_dir():
        available = sorted(p.name for p in base.iterdir() if p.is_dir()) if base.is_dir() else []
        raise TemplateResolutionError(
            f"No templates for platform version '{platform_version}' under {base} "
            f"(available: {', '.join(available) or 'none'})",
            platform_version=platform_version,
        )
    return root


def resolve_template_set(
    platform_version: str,
    name_prefix: str,
    templates_dir: str | Path | None = None,
) -> list[TemplateDescriptor]:
    """Return the per-application templates for a platform version.

    Matching is on the file name, sorted by path relative to the version
    root, so two resolutions over the same tree give the same sequence.
    Descriptors carry no explicit output path: each template declares its own.
    """
    root = version_root(platform_version, templates_dir)
    names = sorted(
        path.relative_to(root).as_posix()
        for path in root.rglob(f"*{TEMPLATE_SUFFIX}")
        if path.is_file() and path.name.startswith(name_prefix)
    )
    return [TemplateDescriptor(name=name) for name in names]
