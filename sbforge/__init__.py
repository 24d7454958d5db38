"""sbforge -- service-builder project scaffolding.

Reads ``base.json``, renders a service descriptor and per-application
scaffolding from Jinja2 templates, and drives ``gradle buildService``
between render passes.
"""

__version__ = "0.1.0"
