"""Gradle process management for the service-tier build.

Runs ``gradle -p <module dir> <task>`` against a service descriptor.  The
build writes generated sources next to the descriptor; none of that is
modelled here.  The exit status is the only signal consumed.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

from rich.markup import escape
from rich.panel import Panel

from sbforge.utils import CommandResult, console, run_command


@dataclass
class BuildResult:
    """Structured result from one build invocation."""

    success: bool
    task: str
    artifact: Path
    exit_code: int = -1
    timed_out: bool = False
    duration_seconds: float = 0.0
    stdout: str = ""
    stderr: str = ""
    errors: list[str] = field(default_factory=list)

    def summary(self) -> str:
        """Return a human-readable one-line summary."""
        if self.timed_out:
            status = "TIMED OUT"
        else:
            status = "SUCCESS" if self.success else f"FAILED (exit {self.exit_code})"
        return f"{self.task} on {self.artifact}: {status} in {self.duration_seconds:.1f}s"


class BuildRunnerError(Exception):
    """Raised when the build tool cannot be started at all."""

    def __init__(self, message: str, result: BuildResult | None = None) -> None:
        self.result = result
        super().__init__(message)


class BuildInvoker(Protocol):
    """Anything that can run a build task against a working artifact."""

    async def invoke(self, artifact_path: Path, task: str) -> BuildResult: ...


def _extract_errors(stderr: str) -> list[str]:
    """Pick meaningful failure lines out of Gradle's stderr."""
    errors: list[str] = []
    for line in stderr.split("\n"):
        line = line.strip()
        if line and any(
            keyword in line.lower()
            for keyword in ("error", "failed", "failure", "exception", "what went wrong")
        ):
            errors.append(line)
    return errors


class GradleRunner:
    """Runs Gradle tasks against a service descriptor.

    The process is awaited to completion.  A timeout of ``None`` waits
    indefinitely; otherwise an expired build is killed and reported with
    ``timed_out=True``.
    """

    def __init__(
        self,
        gradle_binary: str = "gradle",
        timeout_seconds: Optional[float] = 900.0,
        cwd: str | Path | None = None,
    ) -> None:
        self.gradle_binary = gradle_binary
        self.timeout_seconds = timeout_seconds
        self.cwd = cwd

    def build_command(self, artifact_path: Path, task: str) -> list[str]:
        return [self.gradle_binary, "-p", str(Path(artifact_path).parent), task]

    async def invoke(self, artifact_path: Path, task: str) -> BuildResult:
        """Run *task* for the module that owns *artifact_path*.

        Raises:
            BuildRunnerError: If the artifact is missing or the Gradle
                binary cannot be executed.
        """
        artifact = Path(artifact_path)
        if not artifact.exists():
            raise BuildRunnerError(f"Build artifact not found: {artifact}")

        cmd = self.build_command(artifact, task)
        console.print(
            Panel(
                f"[cyan]Running {task}[/cyan]\n"
                f"  Artifact: {artifact}\n"
                f"  Command: {' '.join(cmd)}\n"
                f"  Timeout: {'none' if self.timeout_seconds is None else self.timeout_seconds}",
                title="Gradle",
                border_style="cyan",
            )
        )

        start_time = time.monotonic()
        try:
            outcome: CommandResult = await run_command(cmd, cwd=self.cwd, timeout=self.timeout_seconds)
        except FileNotFoundError:
            raise BuildRunnerError(
                f"Gradle binary not found: '{self.gradle_binary}'. "
                "Install Gradle or point the configuration at a wrapper script."
            )
        except PermissionError:
            raise BuildRunnerError(
                f"Permission denied executing: '{self.gradle_binary}'. Check file permissions."
            )
        elapsed = time.monotonic() - start_time

        if outcome.stderr:
            for line in outcome.stderr.split("\n")[-10:]:
                console.print(f"  [dim]{escape(line.strip())}[/dim]")

        errors = _extract_errors(outcome.stderr)
        if outcome.timed_out:
            errors.insert(0, f"Build timed out after {self.timeout_seconds}s")

        return BuildResult(
            success=outcome.ok,
            task=task,
            artifact=artifact,
            exit_code=outcome.returncode,
            timed_out=outcome.timed_out,
            duration_seconds=elapsed,
            stdout=outcome.stdout,
            stderr=outcome.stderr,
            errors=errors,
        )
