"""Report specification models and document renderers."""

from .models import ReportSection, ReportSpec, Severity, TableData
from .renderer import DocumentRenderer, MarkdownRenderer, render_markdown

__all__ = [
    "ReportSection",
    "ReportSpec",
    "Severity",
    "TableData",
    "DocumentRenderer",
    "MarkdownRenderer",
    "render_markdown",
]
