"""sbforge scaffolder -- context, template resolution, rendering, skeleton and reconciliation.

Quick usage::

    from sbforge.scaffolder import TemplateRenderer, build_context, resolve_template_set

    renderer = TemplateRenderer(spec.platform_version, destination_root=".")
    for descriptor in resolve_template_set(spec.platform_version, "Portlet_"):
        for app in spec.applications:
            await renderer.render_to_file(descriptor, build_context(spec, app))
"""

from sbforge.scaffolder.context import (
    CONTEXT_KEYS,
    TemplateToolkit,
    build_context,
    service_descriptor_path,
)
from sbforge.scaffolder.reconciler import ReconcileError, ReconcileResult, reconcile
from sbforge.scaffolder.resolver import (
    OutputPolicy,
    TemplateDescriptor,
    TemplateResolutionError,
    resolve_template_set,
)
from sbforge.scaffolder.skeleton import SkeletonError, SkeletonGenerator
from sbforge.scaffolder.templates import RenderError, RenderFailure, TemplateRenderer

__all__ = [
    "CONTEXT_KEYS",
    "OutputPolicy",
    "ReconcileError",
    "ReconcileResult",
    "RenderError",
    "RenderFailure",
    "SkeletonError",
    "SkeletonGenerator",
    "TemplateDescriptor",
    "TemplateRenderer",
    "TemplateResolutionError",
    "TemplateToolkit",
    "build_context",
    "reconcile",
    "resolve_template_set",
    "service_descriptor_path",
]
