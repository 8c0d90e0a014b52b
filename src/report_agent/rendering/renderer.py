"""Persist a report specification as a document."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Sequence

from .models import ReportSection, ReportSpec, Severity, TableData
from report_agent.agent_core.exceptions import RenderError
from report_agent.agent_core.logger import get_logger

logger = get_logger(__name__)

_ALERT_PREFIXES = {
    Severity.WATCH: "**Watch:** ",
    Severity.WARNING: "**⚠ WARNING:** ",
    Severity.CRITICAL: "**⚠️ CRITICAL:** ",
}


class DocumentRenderer(ABC):
    """Turns a report specification into a persisted document."""

    @abstractmethod
    def render(self, spec: ReportSpec) -> Path:
        """Write the document and return its location.

        Raises:
            RenderError: If the document cannot be persisted.
        """
        pass


class MarkdownRenderer(DocumentRenderer):
    """Renders reports as Markdown files. Rendering the same spec twice yields the same file."""

    def __init__(self, output_path: str | Path) -> None:
        self.output_path = Path(output_path)

    def render(self, spec: ReportSpec) -> Path:
        logger.info(f"Building report document with {len(spec.sections)} section(s)...")
        document = render_markdown(spec)
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self.output_path.write_text(document, encoding="utf-8")
        except OSError as exc:
            msg = f"Could not write report to {self.output_path}: {exc}"
            logger.error(msg)
            raise RenderError(msg) from exc
        logger.info(f"Report written to {self.output_path}")
        return self.output_path


def render_markdown(spec: ReportSpec) -> str:
    lines: List[str] = [f"# {spec.title.strip()}", ""]

    if spec.subtitle:
        lines += [f"_{spec.subtitle.strip()}_", ""]

    if spec.executive_summary:
        lines += ["## Executive Summary", "", spec.executive_summary.strip(), ""]

    for section in spec.sections:
        lines += _render_section(section)

    if spec.recommendations:
        lines += ["## Recommendations", ""]
        lines += [f"{i}. {item.strip()}" for i, item in enumerate(spec.recommendations, start=1)]
        lines.append("")

    if spec.methodology_notes:
        lines += ["## Methodology & Data Notes", "", f"_{spec.methodology_notes.strip()}_", ""]

    return "\n".join(lines).rstrip() + "\n"


def _render_section(section: ReportSection) -> List[str]:
    lines = [f"## {section.heading.strip()}", ""]
    content = section.content.strip()

    prefix = _ALERT_PREFIXES.get(section.alert_level)
    if prefix:
        # Call-outs are blockquotes so every paragraph line keeps the emphasis
        quoted = [f"> {line}" if line else ">" for line in f"{prefix}{content}".splitlines()]
        lines += quoted
    else:
        lines.append(content)
    lines.append("")

    if section.include_table and section.table_data is not None and section.table_data.rows:
        lines += _render_table(section.table_data)
        lines.append("")
    return lines


def _render_table(table: TableData) -> List[str]:
    width = len(table.headers) or max(len(row) for row in table.rows)
    headers = list(table.headers) or [f"Column {i}" for i in range(1, width + 1)]

    lines = [_table_row(headers), _table_row(["---"] * width)]
    for row in table.rows:
        cells = [_format_cell(cell) for cell in row]
        cells += [""] * (width - len(cells))
        lines.append(_table_row(cells))
    return lines


def _table_row(cells: Sequence[str]) -> str:
    return "| " + " | ".join(cell.replace("|", "\\|").replace("\n", " ") for cell in cells) + " |"


def _format_cell(value: object) -> str:
    if isinstance(value, float) and value.is_integer():
        return f"{value:.1f}"
    return str(value)
