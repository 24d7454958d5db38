"""sbforge configuration.

Centralised, typed configuration for the generation pipeline.  All settings
use Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

BUNDLED_TEMPLATES_DIR = Path(__file__).parent / "templates"


class BuildConfig(BaseModel):
    """Settings for the external build tool invocation."""

    model_config = ConfigDict(validate_assignment=True)

    gradle_binary: str = Field(default="gradle", description="Gradle executable or wrapper path")
    task: str = Field(default="buildService", description="Task that generates the service tier")
    timeout: Optional[int] = Field(
        default=900,
        ge=1,
        description="Seconds to wait for one build; None waits indefinitely",
    )


class Config(BaseModel):
    """Global sbforge configuration.

    Instances are typically created once by the CLI entry point and then
    passed to ``Pipeline``.
    """

    model_config = ConfigDict(validate_assignment=True)

    destination_root: Path = Field(default=Path("."))
    spec_filename: str = Field(default="base.json")
    templates_dir: Optional[Path] = Field(
        default=None, description="Template root; defaults to the bundled templates"
    )
    template_prefix: str = Field(default="Portlet_")
    descriptor_template: str = Field(default="service.xml.j2")
    author: str = Field(default="")
    build: BuildConfig = Field(default_factory=BuildConfig)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def spec_path(self) -> Path:
        """Path to the project specification document."""
        return self.destination_root / self.spec_filename

    @property
    def resolved_templates_dir(self) -> Path:
        """Template root actually used for resolution and rendering."""
        return self.templates_dir or BUNDLED_TEMPLATES_DIR

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            SBFORGE_DESTINATION, SBFORGE_TEMPLATES_DIR, SBFORGE_TEMPLATE_PREFIX,
            SBFORGE_AUTHOR, SBFORGE_GRADLE, SBFORGE_BUILD_TASK,
            SBFORGE_BUILD_TIMEOUT.
        """
        build_kwargs: dict[str, Any] = {}
        if os.environ.get("SBFORGE_GRADLE"):
            build_kwargs["gradle_binary"] = os.environ["SBFORGE_GRADLE"]
        if os.environ.get("SBFORGE_BUILD_TASK"):
            build_kwargs["task"] = os.environ["SBFORGE_BUILD_TASK"]
        if os.environ.get("SBFORGE_BUILD_TIMEOUT"):
            build_kwargs["timeout"] = int(os.environ["SBFORGE_BUILD_TIMEOUT"])

        kwargs: dict[str, Any] = {}
        if os.environ.get("SBFORGE_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(os.environ["SBFORGE_TEMPLATES_DIR"])
        if os.environ.get("SBFORGE_TEMPLATE_PREFIX"):
            kwargs["template_prefix"] = os.environ["SBFORGE_TEMPLATE_PREFIX"]

        return cls(
            destination_root=Path(os.environ.get("SBFORGE_DESTINATION", ".")),
            author=os.environ.get("SBFORGE_AUTHOR", ""),
            build=BuildConfig(**build_kwargs),
            **kwargs,
        )
