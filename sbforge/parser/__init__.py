"""Specification parsing: ``base.json`` -> ``ProjectSpec``."""

from sbforge.parser.loader import SpecErrorKind, SpecificationError, load_specification
from sbforge.parser.models import Application, ProjectSpec

__all__ = [
    "Application",
    "ProjectSpec",
    "SpecErrorKind",
    "SpecificationError",
    "load_specification",
]
