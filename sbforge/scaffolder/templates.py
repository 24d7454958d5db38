"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which loads Jinja2 templates for one
platform version and renders them with a context from
:func:`sbforge.scaffolder.context.build_context`.

A template may choose its own destination by assigning ``target_path`` at
the top level::

    {% set target_path = templates.java_source_dir("service") ~ "/Foo.java" %}

The value is read from the template module after rendering.  An explicit
output path on the descriptor always wins over the declared one.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    TemplateSyntaxError,
    UndefinedError,
)

from sbforge.naming import JINJA_FILTERS
from sbforge.scaffolder.resolver import OutputPolicy, TemplateDescriptor, version_root

# Top-level template variable that declares the output path.
DECLARED_PATH_VAR = "target_path"


class RenderFailure(str, Enum):
    SYNTAX = "syntax"
    MISSING_BINDING = "missing-binding"
    TEMPLATE_NOT_FOUND = "template-not-found"
    RUNTIME = "runtime"
    OUTPUT_PATH = "output-path"
    IO = "io"


class RenderError(Exception):
    """Raised when a template cannot be rendered or written."""

    def __init__(self, template: str, cause: RenderFailure, message: str) -> None:
        self.template = template
        self.cause = cause
        super().__init__(f"{template}: {message}")


@dataclass
class RenderedTemplate:
    """Rendered body plus the path the template declared, if any."""

    text: str
    declared_path: Optional[str] = None


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders the Jinja2 templates of one platform version.

    Undefined names raise instead of rendering as empty strings, so a
    template that reads a binding absent from the context fails loudly.
    """

    def __init__(
        self,
        platform_version: str,
        templates_dir: str | Path | None = None,
        destination_root: str | Path = ".",
    ) -> None:
        self.template_dir = version_root(platform_version, templates_dir)
        self.destination_root = Path(destination_root)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters.update(JINJA_FILTERS)

    # -- Rendering ---------------------------------------------------------

    def render_text(self, descriptor: TemplateDescriptor, context: dict[str, Any]) -> RenderedTemplate:
        """Render *descriptor* and return its text and declared path.

        Raises:
            RenderError: On syntax errors, missing bindings, an unknown
                template name, or any exception raised while the template
                runs (a filter rejecting its input, for instance).
        """
        name = descriptor.name
        try:
            template = self.env.get_template(name)
            module = template.make_module(context)
            text = str(module)
        except TemplateNotFound as exc:
            raise RenderError(name, RenderFailure.TEMPLATE_NOT_FOUND, f"template not found ({exc})") from exc
        except TemplateSyntaxError as exc:
            raise RenderError(
                name, RenderFailure.SYNTAX, f"syntax error at line {exc.lineno}: {exc.message}"
            ) from exc
        except UndefinedError as exc:
            raise RenderError(name, RenderFailure.MISSING_BINDING, exc.message or str(exc)) from exc
        except Exception as exc:
            raise RenderError(
                name, RenderFailure.RUNTIME, f"{type(exc).__name__} while rendering: {exc}"
            ) from exc

        declared = getattr(module, DECLARED_PATH_VAR, None)
        return RenderedTemplate(text=text, declared_path=str(declared) if declared else None)

    def resolve_output_path(self, descriptor: TemplateDescriptor, rendered: RenderedTemplate) -> Path:
        """Pick the destination for a rendered template.

        Relative paths are anchored at the destination root.

        Raises:
            RenderError: If the policy is ``DECLARED`` and the template did
                not set ``target_path``.
        """
        if descriptor.policy is OutputPolicy.EXPLICIT:
            path = Path(descriptor.output_path)
        elif rendered.declared_path:
            path = Path(rendered.declared_path)
        else:
            raise RenderError(
                descriptor.name,
                RenderFailure.OUTPUT_PATH,
                f"no explicit output path and the template does not set '{DECLARED_PATH_VAR}'",
            )
        if not path.is_absolute():
            path = self.destination_root / path
        return path

    # -- File-based rendering (async) --------------------------------------

    async def render_to_file(self, descriptor: TemplateDescriptor, context: dict[str, Any]) -> Path:
        """Render a template and write it, overwriting any existing file.

        Parent directories are created automatically.  Returns the path
        written.
        """
        rendered = self.render_text(descriptor, context)
        out = self.resolve_output_path(descriptor, rendered)
        try:
            await asyncio.to_thread(_write_file, out, rendered.text)
        except OSError as exc:
            raise RenderError(descriptor.name, RenderFailure.IO, f"cannot write {out}: {exc}") from exc
        return out


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
