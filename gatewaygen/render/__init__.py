"""Rendering of planned artifacts into Go source files."""

from .format import GoSourceFormatter
from .renderer import ImportSpec, TemplateRenderer, import_for

__all__ = ["GoSourceFormatter", "ImportSpec", "TemplateRenderer", "import_for"]
