"""Project skeleton generation.

Creates the nested ``<project>/`` tree holding the service/API tier
(``<project>-api``, ``<project>-service``) and the presentation tier
(``<project>-web``), and renders the static build files for each module from
``<version>/skeleton/`` templates.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from sbforge.parser.models import ProjectSpec
from sbforge.scaffolder.context import TemplateToolkit, build_context
from sbforge.scaffolder.resolver import TemplateDescriptor
from sbforge.scaffolder.templates import TemplateRenderer


class SkeletonError(Exception):
    """Raised when the destination cannot hold a skeleton."""


# (template, output relative to the nested project directory)
_ROOT_FILES = [
    ("skeleton/settings.gradle.j2", "settings.gradle"),
    ("skeleton/build.gradle.j2", "build.gradle"),
    ("skeleton/gradle.properties.j2", "gradle.properties"),
    ("skeleton/gradlew.j2", "gradlew"),
    ("skeleton/gradlew.bat.j2", "gradlew.bat"),
]

_MODULE_FILES = {
    "api": [
        ("skeleton/api/bnd.bnd.j2", "bnd.bnd"),
        ("skeleton/api/build.gradle.j2", "build.gradle"),
    ],
    "service": [
        ("skeleton/service/bnd.bnd.j2", "bnd.bnd"),
        ("skeleton/service/build.gradle.j2", "build.gradle"),
    ],
    "web": [
        ("skeleton/web/bnd.bnd.j2", "bnd.bnd"),
        ("skeleton/web/build.gradle.j2", "build.gradle"),
    ],
}


class SkeletonGenerator:
    """Creates module directories and renders their build files."""

    def __init__(self, renderer: TemplateRenderer, author: str = "") -> None:
        self.renderer = renderer
        self.author = author

    async def generate(self, spec: ProjectSpec, destination_root: str | Path) -> Path:
        """Generate the skeleton and return the nested project directory.

        Raises:
            SkeletonError: If *destination_root* is missing or not writable.
        """
        root = Path(destination_root)
        if not root.is_dir():
            raise SkeletonError(f"Destination root does not exist: {root}")
        if not os.access(root, os.W_OK):
            raise SkeletonError(f"Destination root is not writable: {root}")

        toolkit = TemplateToolkit(spec)
        await self._create_directory_structure(root, toolkit)

        ctx = build_context(spec, None, author=self.author, destination_root=root)
        project_dir = Path(toolkit.project_dir)
        for template_name, output_name in _ROOT_FILES:
            await self.renderer.render_to_file(
                TemplateDescriptor(template_name, project_dir / output_name), ctx
            )
        for suffix, files in _MODULE_FILES.items():
            module_dir = Path(toolkit.module_dir(suffix))
            for template_name, output_name in files:
                await self.renderer.render_to_file(
                    TemplateDescriptor(template_name, module_dir / output_name), ctx
                )

        return root / project_dir

    async def _create_directory_structure(self, root: Path, toolkit: TemplateToolkit) -> None:
        """Create the mandatory module directory tree."""
        dirs = [
            f"{toolkit.java_source_dir('api')}/service",
            f"{toolkit.java_source_dir('api')}/model",
            f"{toolkit.java_source_dir('service')}/service/impl",
            f"{toolkit.resources_dir('service')}/META-INF",
            f"{toolkit.java_source_dir('web')}/web/portlet",
            f"{toolkit.resources_dir('web')}/META-INF/resources",
        ]

        def _mkdirs() -> None:
            for d in dirs:
                (root / d).mkdir(parents=True, exist_ok=True)

        await asyncio.to_thread(_mkdirs)
