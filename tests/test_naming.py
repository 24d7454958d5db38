"""Unit tests for identifier case conversion (sbforge.naming)."""

from __future__ import annotations

import pytest

from sbforge.naming import (
    JINJA_FILTERS,
    NamingConverter,
    NamingError,
    camel_to_dash,
    camel_to_snake,
    dash_to_camel,
    package_to_path,
    to_pascal,
    uncapitalize,
)

pytestmark = pytest.mark.unit


class TestCamelToDash:
    @pytest.mark.parametrize(
        "identifier, expected",
        [
            ("MyBlog", "my-blog"),
            ("myBlog", "my-blog"),
            ("BlogEntry", "blog-entry"),
            ("HTMLParser", "html-parser"),
            ("Entry2Comment", "entry2-comment"),
            ("Blog", "blog"),
        ],
    )
    def test_conversions(self, identifier: str, expected: str):
        assert camel_to_dash(identifier) == expected

    def test_deterministic(self):
        assert camel_to_dash("GuestBookEntry") == camel_to_dash("GuestBookEntry")

    def test_dash_case_input_unchanged(self):
        assert camel_to_dash("my-blog") == "my-blog"
        assert camel_to_dash(camel_to_dash("MyBlog")) == "my-blog"

    def test_surrounding_whitespace_ignored(self):
        assert camel_to_dash("  MyBlog ") == "my-blog"

    @pytest.mark.parametrize("bad", ["", "   ", "1Blog", "My Blog", "my/blog", "../etc", "Blog!"])
    def test_invalid_identifiers_raise(self, bad: str):
        with pytest.raises(NamingError):
            camel_to_dash(bad)

    def test_naming_error_is_value_error(self):
        with pytest.raises(ValueError) as excinfo:
            camel_to_dash("")
        assert excinfo.value.identifier == ""


class TestOtherConverters:
    def test_camel_to_snake(self):
        assert camel_to_snake("BlogEntry") == "blog_entry"

    def test_dash_to_camel(self):
        assert dash_to_camel("blog-entry") == "blogEntry"

    def test_to_pascal(self):
        assert to_pascal("blog-entry") == "BlogEntry"
        assert to_pascal("blog_entry") == "BlogEntry"
        assert to_pascal("blogEntry") == "BlogEntry"

    def test_uncapitalize(self):
        assert uncapitalize("BlogEntry") == "blogEntry"
        assert uncapitalize("") == ""

    def test_package_to_path(self):
        assert package_to_path("com.example.blog") == "com/example/blog"


class TestTemplateHandles:
    def test_converter_exposes_functions(self):
        naming = NamingConverter()
        assert naming.camel_to_dash("MyBlog") == "my-blog"
        assert naming.package_to_path("a.b") == "a/b"

    def test_filters_registered(self):
        assert JINJA_FILTERS["dash_case"] is camel_to_dash
        assert {"pascal_case", "uncapitalize", "package_path"} <= set(JINJA_FILTERS)
