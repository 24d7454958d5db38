"""Tests for rendering-context construction (sbforge.scaffolder.context)."""

from __future__ import annotations

from pathlib import Path

import pytest

from sbforge.naming import NamingConverter
from sbforge.parser import ProjectSpec
from sbforge.scaffolder.context import (
    CONTEXT_KEYS,
    TemplateToolkit,
    build_context,
    service_descriptor_path,
)

pytestmark = pytest.mark.unit


class TestBuildContext:
    def test_project_level_context_has_every_key(self, blog_spec: ProjectSpec):
        ctx = build_context(blog_spec)
        assert set(ctx) == set(CONTEXT_KEYS)
        assert ctx["project"] is blog_spec
        assert ctx["application"] is None
        assert ctx["output_path"] is None
        assert isinstance(ctx["naming"], NamingConverter)
        assert isinstance(ctx["templates"], TemplateToolkit)

    def test_application_context(self, blog_spec: ProjectSpec):
        app = blog_spec.applications[0]
        ctx = build_context(blog_spec, app, author="Jane Doe", destination_root="/work")
        assert ctx["application"] is app
        assert ctx["author"] == "Jane Doe"
        assert ctx["destination_root"] == "/work"

    def test_output_override_independent_of_application(self, blog_spec: ProjectSpec):
        ctx = build_context(blog_spec, None, Path("x/service.xml"))
        assert ctx["application"] is None
        assert ctx["output_path"] == "x/service.xml"

    def test_contexts_do_not_share_application(self, blog_spec: ProjectSpec):
        app_ctx = build_context(blog_spec, blog_spec.applications[0])
        project_ctx = build_context(blog_spec)
        assert app_ctx["application"] is not None
        assert project_ctx["application"] is None


class TestTemplateToolkit:
    def test_paths(self, blog_spec: ProjectSpec):
        toolkit = TemplateToolkit(blog_spec)
        assert toolkit.project_dir == "my-blog"
        assert toolkit.module_dir("api") == "my-blog/my-blog-api"
        assert toolkit.package_path == "com/example/blog"
        assert toolkit.java_source_dir("service") == (
            "my-blog/my-blog-service/src/main/java/com/example/blog"
        )
        assert toolkit.resources_dir("web") == "my-blog/my-blog-web/src/main/resources"
        assert toolkit.service_xml_path == "my-blog/my-blog-service/service.xml"

    def test_unknown_module(self, blog_spec: ProjectSpec):
        with pytest.raises(ValueError):
            TemplateToolkit(blog_spec).module_dir("portal")

    def test_service_descriptor_path(self, blog_spec: ProjectSpec, tmp_path: Path):
        assert service_descriptor_path(blog_spec, tmp_path) == (
            tmp_path / "my-blog" / "my-blog-service" / "service.xml"
        )
