"""sbforge pipeline orchestrator.

Implements the staged generation flow:

Stage 1: SKELETON_GENERATED    -- create api/service/web module skeletons.
Stage 2: DESCRIPTOR_GENERATED  -- render service.xml from base.json.
Stage 3: FIRST_BUILD_DONE      -- run the build task to materialise the service tier.
Stage 4: TEMPLATES_RENDERED    -- render every template for every application.
Stage 5: SECOND_BUILD_DONE     -- run the build task again over the new files.
Stage 6: RECONCILED            -- flatten <root>/<project>/ into <root>.

Stages run strictly in order and the first failure ends the run.  Files
written before a failure are left in place; running again overwrites them.
Only one run may target a given destination root at a time; this is not
enforced here.

Usage::

    python -m sbforge create --destination ./workspace
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
import traceback
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import ValidationError
from rich.markup import escape
from rich.panel import Panel

from sbforge.builder import BuildInvoker, BuildRunnerError, GradleRunner
from sbforge.config import BuildConfig, Config
from sbforge.parser import ProjectSpec, SpecificationError, load_specification
from sbforge.scaffolder import (
    ReconcileError,
    RenderError,
    SkeletonError,
    SkeletonGenerator,
    TemplateDescriptor,
    TemplateRenderer,
    TemplateResolutionError,
    build_context,
    reconcile,
    resolve_template_set,
    service_descriptor_path,
)
from sbforge.utils import (
    console,
    format_duration,
    print_error,
    print_stage_header,
    print_success,
    print_summary_table,
    print_warning,
)

EXIT_OK = 0
EXIT_PROCESS_ERROR = 1
EXIT_UNEXPECTED_ERROR = 2


class Stage(str, Enum):
    START = "start"
    SKELETON_GENERATED = "skeleton-generated"
    DESCRIPTOR_GENERATED = "descriptor-generated"
    FIRST_BUILD_DONE = "first-build-done"
    TEMPLATES_RENDERED = "templates-rendered"
    SECOND_BUILD_DONE = "second-build-done"
    RECONCILED = "reconciled"
    DONE = "done"
    FAILED = "failed"


class FailureKind(str, Enum):
    PARSE = "parse"
    IO = "io"
    RENDER = "render"
    EXTERNAL_BUILD = "external-build"
    BUILD_TIMEOUT = "build-timeout"
    RECONCILE = "reconcile"


STAGE_NAMES: dict[Stage, str] = {
    Stage.START: "PREPARE",
    Stage.SKELETON_GENERATED: "SKELETON",
    Stage.DESCRIPTOR_GENERATED: "DESCRIPTOR",
    Stage.FIRST_BUILD_DONE: "BUILD #1",
    Stage.TEMPLATES_RENDERED: "TEMPLATES",
    Stage.SECOND_BUILD_DONE: "BUILD #2",
    Stage.RECONCILED: "RECONCILE",
}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class PipelineError(Exception):
    """An expected failure of one stage, reported without a traceback.

    ``stage`` is the stage being attempted; ``Stage.START`` means the run
    failed while loading the specification or resolving templates.
    """

    def __init__(self, stage: Stage, kind: FailureKind, message: str) -> None:
        self.stage = stage
        self.kind = kind
        super().__init__(f"{STAGE_NAMES.get(stage, stage.value)} ({kind.value}): {message}")


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------

TemplateResolver = Callable[[str, str, Optional[Path]], list[TemplateDescriptor]]
Reconciler = Callable[[Path, Path], Any]


class Pipeline:
    """Drives one generation run.

    Collaborators can be injected for testing; by default they are built
    from ``config`` once the specification has been loaded.

    Attributes:
        config: Global configuration.
        state: Accumulates progress and the final outcome of the run.
    """

    _STAGE_METHODS: list[tuple[Stage, str]] = [
        (Stage.SKELETON_GENERATED, "_generate_skeleton"),
        (Stage.DESCRIPTOR_GENERATED, "_generate_descriptor"),
        (Stage.FIRST_BUILD_DONE, "_first_build"),
        (Stage.TEMPLATES_RENDERED, "_render_templates"),
        (Stage.SECOND_BUILD_DONE, "_second_build"),
        (Stage.RECONCILED, "_reconcile"),
    ]

    def __init__(
        self,
        config: Config,
        *,
        renderer: Optional[TemplateRenderer] = None,
        builder: Optional[BuildInvoker] = None,
        skeleton: Optional[SkeletonGenerator] = None,
        template_resolver: TemplateResolver = resolve_template_set,
        reconciler: Reconciler = reconcile,
    ) -> None:
        self.config = config
        self.destination_root = Path(config.destination_root).resolve()
        self.renderer = renderer
        self.builder = builder
        self.skeleton = skeleton
        self.template_resolver = template_resolver
        self.reconciler = reconciler

        self.spec: Optional[ProjectSpec] = None
        self.templates: list[TemplateDescriptor] = []
        self.descriptor_path: Optional[Path] = None
        self.state: dict[str, Any] = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "stage": Stage.START.value,
            "stages_completed": [],
            "success": False,
        }

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def run(self) -> dict[str, Any]:
        """Execute every stage in order.

        Never raises; the outcome is in the returned state.  ``error_kind``
        is set for expected failures, ``unexpected`` for anything else.
        """
        pipeline_start = time.monotonic()
        console.print(
            Panel(
                f"[bold bright_cyan]sbforge[/bold bright_cyan]\n"
                f"Destination   : {self.destination_root}\n"
                f"Specification : {self.config.spec_path.name}",
                title="[bold]Started creating service scaffolding[/bold]",
                border_style="bright_cyan",
            )
        )

        current = Stage.START
        try:
            self._prepare()
            for number, (stage, method_name) in enumerate(self._STAGE_METHODS, start=1):
                current = stage
                print_stage_header(number, STAGE_NAMES[stage])
                stage_start = time.monotonic()
                await getattr(self, method_name)()
                self._advance(stage)
                print_success(
                    f"{STAGE_NAMES[stage]} completed in "
                    f"{format_duration(time.monotonic() - stage_start)}"
                )
            self._advance(Stage.DONE)
            self.state["success"] = True

        except PipelineError as exc:
            self._fail(exc.stage, str(exc), kind=exc.kind)
            print_error(escape(str(exc)))

        except Exception as exc:
            tb = traceback.format_exc()
            self._fail(current, tb, unexpected=True)
            print_error(escape(f"{STAGE_NAMES.get(current, current.value)} failed unexpectedly: {exc}"))
            console.print(f"[dim]{escape(tb)}[/dim]")

        total_elapsed = time.monotonic() - pipeline_start
        self.state["total_duration"] = format_duration(total_elapsed)
        self.state["finished_at"] = datetime.now(timezone.utc).isoformat()
        self._print_final_summary()
        return self.state

    def _advance(self, stage: Stage) -> None:
        self.state["stage"] = stage.value
        self.state["stages_completed"].append(stage.value)

    def _fail(
        self,
        stage: Stage,
        error: str,
        kind: Optional[FailureKind] = None,
        unexpected: bool = False,
    ) -> None:
        self.state["stage"] = Stage.FAILED.value
        self.state["failed_stage"] = stage.value
        self.state["error"] = error
        self.state["error_kind"] = kind.value if kind else None
        self.state["unexpected"] = unexpected

    # ------------------------------------------------------------------
    # Preparation: specification, templates, derived paths
    # ------------------------------------------------------------------

    def _prepare(self) -> None:
        console.print(f"  Fetching [bold]{self.config.spec_path.name}[/bold]")
        try:
            self.spec = load_specification(self.destination_root / self.config.spec_filename)
        except SpecificationError as exc:
            raise PipelineError(Stage.START, FailureKind.PARSE, str(exc)) from exc

        templates_dir = self.config.templates_dir
        try:
            if self.renderer is None:
                self.renderer = TemplateRenderer(
                    self.spec.platform_version,
                    templates_dir,
                    destination_root=self.destination_root,
                )
            self.templates = self.template_resolver(
                self.spec.platform_version, self.config.template_prefix, templates_dir
            )
        except TemplateResolutionError as exc:
            raise PipelineError(Stage.START, FailureKind.PARSE, str(exc)) from exc

        if self.skeleton is None:
            self.skeleton = SkeletonGenerator(self.renderer, author=self.config.author)
        if self.builder is None:
            self.builder = _default_builder(self.config.build, self.destination_root)

        self.descriptor_path = service_descriptor_path(self.spec, self.destination_root)
        self.state["project_name"] = self.spec.dash_case_name
        self.state["descriptor_path"] = str(self.descriptor_path)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _generate_skeleton(self) -> None:
        spec = self._require_spec()
        console.print(
            f"  Generating *-api, *-service, *-web skeletons for [bold]{spec.dash_case_name}[/bold]"
        )
        try:
            await self.skeleton.generate(spec, self.destination_root)
        except SkeletonError as exc:
            raise PipelineError(Stage.SKELETON_GENERATED, FailureKind.IO, str(exc)) from exc
        except RenderError as exc:
            raise PipelineError(Stage.SKELETON_GENERATED, FailureKind.RENDER, str(exc)) from exc
        except OSError as exc:
            raise PipelineError(Stage.SKELETON_GENERATED, FailureKind.IO, str(exc)) from exc

    async def _generate_descriptor(self) -> None:
        spec = self._require_spec()
        console.print(f"  Parsing [bold]{self.descriptor_path}[/bold]")
        ctx = build_context(
            spec,
            None,
            self.descriptor_path,
            author=self.config.author,
            destination_root=self.destination_root,
        )
        descriptor = TemplateDescriptor(self.config.descriptor_template, self.descriptor_path)
        try:
            await self.renderer.render_to_file(descriptor, ctx)
        except RenderError as exc:
            raise PipelineError(Stage.DESCRIPTOR_GENERATED, FailureKind.RENDER, str(exc)) from exc

    async def _first_build(self) -> None:
        console.print(
            f'  Running "{self.config.build.task}" to generate the service based on the parsed descriptor'
        )
        await self._run_build(Stage.FIRST_BUILD_DONE)

    async def _render_templates(self) -> None:
        spec = self._require_spec()
        if not spec.applications:
            print_warning("  No applications defined -- nothing to render.")
        if not self.templates:
            print_warning(f"  No templates match prefix '{self.config.template_prefix}'.")

        rendered: list[str] = []
        for app in spec.applications:
            console.print(f"  Parsing templates for [bold]{app.model}[/bold]", end="")
            for descriptor in self.templates:
                console.print(".", end="")
                ctx = build_context(
                    spec,
                    app,
                    None,
                    author=self.config.author,
                    destination_root=self.destination_root,
                )
                try:
                    path = await self.renderer.render_to_file(descriptor, ctx)
                except RenderError as exc:
                    console.print()
                    raise PipelineError(
                        Stage.TEMPLATES_RENDERED,
                        FailureKind.RENDER,
                        f"application '{app.model}': {exc}",
                    ) from exc
                rendered.append(str(path))
            console.print(".")

        self.state["rendered_files"] = rendered

    async def _second_build(self) -> None:
        console.print(
            f'  Running "{self.config.build.task}" to regenerate the service with scaffolding files'
        )
        await self._run_build(Stage.SECOND_BUILD_DONE)

    async def _reconcile(self) -> None:
        spec = self._require_spec()
        console.print("  Moving all module projects into the destination root")
        nested = self.destination_root / spec.dash_case_name
        try:
            self.reconciler(nested, self.destination_root)
        except ReconcileError as exc:
            raise PipelineError(Stage.RECONCILED, FailureKind.RECONCILE, str(exc)) from exc

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _run_build(self, stage: Stage) -> None:
        task = self.config.build.task
        try:
            result = await self.builder.invoke(self.descriptor_path, task)
        except BuildRunnerError as exc:
            raise PipelineError(stage, FailureKind.EXTERNAL_BUILD, str(exc)) from exc

        self.state.setdefault("builds", []).append(result.summary())
        if result.timed_out:
            raise PipelineError(stage, FailureKind.BUILD_TIMEOUT, result.summary())
        if not result.success:
            detail = "; ".join(result.errors[:3])
            message = result.summary() + (f" -- {detail}" if detail else "")
            raise PipelineError(stage, FailureKind.EXTERNAL_BUILD, message)

    def _require_spec(self) -> ProjectSpec:
        if self.spec is None:
            raise PipelineError(Stage.START, FailureKind.PARSE, "specification has not been loaded")
        return self.spec

    def _print_final_summary(self) -> None:
        """Print the final pipeline summary panel."""
        if self.state.get("success"):
            border_style = "bold green"
            status_text = "[bold green]DONE[/bold green]"
        else:
            border_style = "bold red"
            status_text = "[bold red]FAILED[/bold red]"

        detail_lines = [
            status_text,
            "",
            f"Duration  : {self.state.get('total_duration', '?')}",
            f"Completed : {', '.join(self.state['stages_completed']) or 'none'}",
        ]
        if self.state.get("failed_stage"):
            detail_lines.append(f"Failed at : {self.state['failed_stage']}")
            detail_lines.append(
                "Note      : files written before the failure were kept; re-running overwrites them."
            )

        console.print()
        console.print(
            Panel("\n".join(detail_lines), title="[bold]Pipeline Complete[/bold]", border_style=border_style)
        )


def _default_builder(build: BuildConfig, cwd: Path) -> GradleRunner:
    return GradleRunner(gradle_binary=build.gradle_binary, timeout_seconds=build.timeout, cwd=cwd)


def exit_code_for(state: dict[str, Any]) -> int:
    """Map a finished run to a process exit status."""
    if state.get("success"):
        return EXIT_OK
    if state.get("unexpected"):
        return EXIT_UNEXPECTED_ERROR
    return EXIT_PROCESS_ERROR


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _positive_int(value: str) -> int:
    """argparse type for a strictly positive integer."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``sbforge`` / ``python -m sbforge``."""
    parser = argparse.ArgumentParser(
        prog="sbforge",
        description="sbforge -- service-builder project scaffolding",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  sbforge create\n"
            "  sbforge create --destination ./workspace --author 'Jane Doe'\n"
            "  sbforge create --gradle ./gradlew --timeout 1800\n"
        ),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    create = subparsers.add_parser("create", help="Create the service according to base.json")
    create.add_argument(
        "--destination", "-d", default=None,
        help="Directory holding base.json; the project is generated here (default: .)",
    )
    create.add_argument("--templates-dir", default=None, help="Override the template root")
    create.add_argument("--author", default=None, help="Author name exposed to templates")
    create.add_argument("--gradle", default=None, help="Gradle executable (default: gradle)")
    create.add_argument(
        "--timeout", type=_positive_int, default=None,
        help="Seconds to wait for each build (default: 900)",
    )

    args = parser.parse_args(argv)

    try:
        config = Config.from_env()
        if args.destination:
            config.destination_root = Path(args.destination)
        if args.templates_dir:
            config.templates_dir = Path(args.templates_dir)
        if args.author is not None:
            config.author = args.author
        if args.gradle:
            config.build.gradle_binary = args.gradle
        if args.timeout is not None:
            config.build.timeout = args.timeout
    except (ValidationError, ValueError) as exc:
        print_error(f"Error: invalid configuration: {escape(str(exc))}")
        sys.exit(EXIT_PROCESS_ERROR)

    if not config.destination_root.is_dir():
        print_error(f"Error: destination directory not found: {escape(str(config.destination_root))}")
        sys.exit(EXIT_PROCESS_ERROR)

    state = asyncio.run(Pipeline(config).run())
    if state.get("success"):
        print_summary_table(
            {
                "Project": state.get("project_name", ""),
                "Descriptor": state.get("descriptor_path", ""),
                "Files rendered": str(len(state.get("rendered_files", []))),
            },
            title="Generated",
        )
    sys.exit(exit_code_for(state))


if __name__ == "__main__":
    main()
