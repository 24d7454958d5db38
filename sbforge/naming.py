"""Identifier case conversion.

The same converters build filesystem paths (``MyBlog`` -> ``my-blog``) and
generated symbol names inside templates, so a single module owns them.  They
are exposed to templates both as the ``naming`` context handle and as Jinja2
filters.
"""

from __future__ import annotations

import re

_VALID_IDENTIFIER = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


class NamingError(ValueError):
    """Raised when an identifier cannot be converted safely."""

    def __init__(self, identifier: str, reason: str) -> None:
        self.identifier = identifier
        super().__init__(f"Invalid identifier {identifier!r}: {reason}")


def _validate(identifier: str) -> str:
    if not isinstance(identifier, str) or not identifier.strip():
        raise NamingError(str(identifier), "identifier is empty")
    identifier = identifier.strip()
    if not _VALID_IDENTIFIER.match(identifier):
        raise NamingError(
            identifier,
            "must start with a letter and contain only letters, digits, '-' or '_'",
        )
    return identifier


def _split_words(identifier: str) -> list[str]:
    spaced = _ACRONYM_BOUNDARY.sub(r"\1 \2", identifier)
    spaced = _WORD_BOUNDARY.sub(r"\1 \2", spaced)
    return [w for w in re.split(r"[\s_-]+", spaced) if w]


def camel_to_dash(identifier: str) -> str:
    """Convert ``MyBlog`` / ``myBlog`` to ``my-blog``.

    Strings that are already lowercase dash-case come back unchanged.

    Raises:
        NamingError: If *identifier* is empty or contains characters that
            are not safe in a path segment.
    """
    identifier = _validate(identifier)
    return "-".join(word.lower() for word in _split_words(identifier))


def camel_to_snake(identifier: str) -> str:
    """Convert ``BlogEntry`` to ``blog_entry``."""
    identifier = _validate(identifier)
    return "_".join(word.lower() for word in _split_words(identifier))


def dash_to_camel(identifier: str) -> str:
    """Convert ``blog-entry`` to ``blogEntry``."""
    return uncapitalize(to_pascal(identifier))


def to_pascal(identifier: str) -> str:
    """Convert ``blog-entry``, ``blog_entry`` or ``blogEntry`` to ``BlogEntry``."""
    identifier = _validate(identifier)
    return "".join(word[0].upper() + word[1:] for word in _split_words(identifier))


def uncapitalize(value: str) -> str:
    """Lower-case the first character only (``BlogEntry`` -> ``blogEntry``)."""
    return value[:1].lower() + value[1:]


def package_to_path(package_name: str) -> str:
    """Convert a dotted namespace to a relative source path.

    ``com.example.blog`` -> ``com/example/blog``
    """
    return "/".join(part for part in package_name.split(".") if part)


class NamingConverter:
    """Template-facing handle over the module-level converters."""

    camel_to_dash = staticmethod(camel_to_dash)
    camel_to_snake = staticmethod(camel_to_snake)
    dash_to_camel = staticmethod(dash_to_camel)
    to_pascal = staticmethod(to_pascal)
    uncapitalize = staticmethod(uncapitalize)
    package_to_path = staticmethod(package_to_path)


# Filters registered on every rendering environment.
JINJA_FILTERS = {
    "dash_case": camel_to_dash,
    "snake_case": camel_to_snake,
    "camel_case": dash_to_camel,
    "pascal_case": to_pascal,
    "uncapitalize": uncapitalize,
    "package_path": package_to_path,
}
