"""sbforge builder module.

Key classes:
    BuildInvoker     - Protocol for anything that runs a build task
    GradleRunner     - Gradle process spawning and monitoring
    BuildResult      - Structured outcome of one invocation
"""

from .gradle_runner import BuildInvoker, BuildResult, BuildRunnerError, GradleRunner

__all__ = [
    "BuildInvoker",
    "BuildResult",
    "BuildRunnerError",
    "GradleRunner",
]
