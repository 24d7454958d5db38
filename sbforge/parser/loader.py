"""Load ``base.json`` into a validated ``ProjectSpec``."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path

from pydantic import ValidationError

from sbforge.parser.models import ProjectSpec
from sbforge.utils import load_json


class SpecErrorKind(str, Enum):
    NOT_FOUND = "not-found"
    MALFORMED = "malformed"
    SCHEMA = "schema"


class SpecificationError(Exception):
    """Raised when the specification cannot be loaded.

    ``kind`` tells a missing file apart from bad JSON and from a document
    that parses but violates the schema.
    """

    def __init__(self, kind: SpecErrorKind, path: Path, message: str) -> None:
        self.kind = kind
        self.path = path
        super().__init__(message)


def _describe(exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err["loc"]) or "<root>"
        problems.append(f"{location}: {err['msg']}")
    return "; ".join(problems)


def load_specification(path: str | Path) -> ProjectSpec:
    """Parse the specification at *path*.

    Raises:
        SpecificationError: If the file is absent, not JSON, or invalid.
            No partially-built object is ever returned.
    """
    spec_path = Path(path)
    if not spec_path.is_file():
        raise SpecificationError(
            SpecErrorKind.NOT_FOUND, spec_path, f"Specification not found: {spec_path}"
        )

    try:
        raw = load_json(spec_path)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SpecificationError(
            SpecErrorKind.MALFORMED, spec_path, f"{spec_path} is not valid JSON: {exc}"
        ) from exc

    if not isinstance(raw, dict):
        raise SpecificationError(
            SpecErrorKind.SCHEMA, spec_path, f"{spec_path} must contain a JSON object"
        )

    try:
        return ProjectSpec.model_validate(raw)
    except ValidationError as exc:
        raise SpecificationError(
            SpecErrorKind.SCHEMA, spec_path, f"{spec_path} is invalid: {_describe(exc)}"
        ) from exc
