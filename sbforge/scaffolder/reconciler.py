"""Flatten the nested project tree into the destination root.

The skeleton and the build tool both work inside ``<root>/<project>/``
because the build tool will not overwrite an existing project in place.
Once generation is finished the nested tree is merged into the root and
removed.
"""

from __future__ import annotations

import shutil
import stat
from dataclasses import dataclass, field
from pathlib import Path

from sbforge.utils import print_warning

LAUNCHER_SCRIPTS = ("gradlew", "gradlew.bat")


class ReconcileError(Exception):
    """Raised when the nested tree cannot be merged or removed."""

    def __init__(self, message: str, source: Path | None = None) -> None:
        self.source = source
        super().__init__(message)


@dataclass
class ReconcileResult:
    merged: bool
    executables: list[Path] = field(default_factory=list)


def reconcile(nested_dir: str | Path, destination_root: str | Path) -> ReconcileResult:
    """Merge *nested_dir* into *destination_root*, then delete it.

    Files in the destination are overwritten on conflict.  Afterwards the
    launcher scripts at the destination root get their execute bit.  A missing
    launcher is skipped; one whose mode cannot be changed is reported as a
    warning and left out of ``executables``.  If *nested_dir* does not exist
    nothing is touched.

    Raises:
        ReconcileError: If copying or deleting fails.
    """
    source = Path(nested_dir)
    target = Path(destination_root)

    if not source.is_dir():
        return ReconcileResult(merged=False)

    try:
        shutil.copytree(source, target, dirs_exist_ok=True)
        shutil.rmtree(source)
    except OSError as exc:
        raise ReconcileError(f"Failed to move {source} into {target}: {exc}", source=source) from exc

    executables = []
    for name in LAUNCHER_SCRIPTS:
        launcher = target / name
        if not launcher.is_file():
            continue
        try:
            _make_executable(launcher)
        except OSError as exc:
            print_warning(f"Could not mark {launcher} executable: {exc}")
            continue
        executables.append(launcher)

    return ReconcileResult(merged=True, executables=executables)


def _make_executable(path: Path) -> None:
    """Set the executable bit on a file."""
    current = path.stat().st_mode
    path.chmod(current | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
