"""
Report building utilities.

ReportBuilder collects metrics, free-text sections and tables, then
renders them as Markdown, plain text or JSON.
"""

import json
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


def format_number(value: Any, decimals: int = 2) -> str:
    """Format a number with thousands separators; '-' for missing values."""
    if value is None:
        return '-'
    if isinstance(value, float) and math.isnan(value):
        return '-'
    if isinstance(value, (int, float)) or hasattr(value, '__float__'):
        try:
            number = float(value)
        except (TypeError, ValueError):
            return str(value)
        if decimals == 0:
            return f"{int(round(number)):,}"
        return f"{number:,.{decimals}f}"
    return str(value)


def format_percent(value: Any, decimals: int = 1) -> str:
    """Format a fraction (0.25) as a percentage ('25.0%')."""
    if value is None:
        return '-'
    return f"{float(value) * 100:.{decimals}f}%"


class ReportBuilder:
    """Accumulates report content in insertion order."""

    def __init__(self, title: str, profile: Optional[str] = None):
        self.title = title
        self.profile = profile
        self.generated_at = datetime.now()
        self.metrics: List[Dict[str, Any]] = []
        self.blocks: List[Dict[str, Any]] = []

    def add_metric(self, name: str, value: Any, unit: str = '') -> None:
        self.metrics.append({'name': name, 'value': value, 'unit': unit})

    def add_section(self, title: str, text: str) -> None:
        self.blocks.append({'kind': 'section', 'title': title, 'text': text})

    def add_table(
        self,
        title: str,
        headers: List[str],
        rows: List[List[str]],
        alignments: Optional[List[str]] = None,
    ) -> None:
        """
        Add a table.

        Args:
            title: Table heading
            headers: Column headers
            rows: Cell strings, one list per row
            alignments: 'l' or 'r' per column (default: all left)
        """
        if alignments is None:
            alignments = ['l'] * len(headers)
        if len(alignments) != len(headers):
            raise ValueError("alignments must match headers")
        for row in rows:
            if len(row) != len(headers):
                raise ValueError(f"Row has {len(row)} cells, expected {len(headers)}")
        self.blocks.append({
            'kind': 'table',
            'title': title,
            'headers': headers,
            'rows': rows,
            'alignments': alignments,
        })

    # ─── rendering ───

    def _metric_line(self, metric: Dict[str, Any]) -> str:
        value = metric['value']
        if isinstance(value, float):
            value = format_number(value, 2)
        elif isinstance(value, int):
            value = format_number(value, 0)
        unit = f" {metric['unit']}" if metric['unit'] else ''
        return f"- **{metric['name']}**: {value}{unit}"

    def to_markdown(self) -> str:
        lines = [f"# {self.title}", ""]
        subtitle = f"Generated {self.generated_at:%Y-%m-%d %H:%M}"
        if self.profile:
            subtitle += f" · profile `{self.profile}`"
        lines += [subtitle, ""]

        if self.metrics:
            lines += ["## Key Metrics", ""]
            lines += [self._metric_line(m) for m in self.metrics]
            lines.append("")

        for block in self.blocks:
            lines += [f"## {block['title']}", ""]
            if block['kind'] == 'section':
                lines += [block['text'], ""]
                continue
            separators = ['---:' if a == 'r' else ':---' for a in block['alignments']]
            lines.append("| " + " | ".join(block['headers']) + " |")
            lines.append("| " + " | ".join(separators) + " |")
            for row in block['rows']:
                lines.append("| " + " | ".join(row) + " |")
            lines.append("")

        return "\n".join(lines)

    def to_text(self) -> str:
        lines = ["=" * 60, self.title.upper(), "=" * 60]

        for metric in self.metrics:
            unit = f" {metric['unit']}" if metric['unit'] else ''
            lines.append(f"  {metric['name']:<32} {metric['value']}{unit}")

        for block in self.blocks:
            lines += ["", block['title'], "-" * len(block['title'])]
            if block['kind'] == 'section':
                lines.append(block['text'])
                continue
            widths = [
                max(len(str(h)), *(len(r[i]) for r in block['rows'])) if block['rows'] else len(str(h))
                for i, h in enumerate(block['headers'])
            ]

            def fmt(cells):
                out = []
                for cell, width, align in zip(cells, widths, block['alignments']):
                    out.append(cell.rjust(width) if align == 'r' else cell.ljust(width))
                return "  ".join(out)

            lines.append(fmt(block['headers']))
            lines.append("  ".join("-" * w for w in widths))
            lines += [fmt(row) for row in block['rows']]

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'profile': self.profile,
            'generated_at': self.generated_at.isoformat(),
            'metrics': self.metrics,
            'blocks': self.blocks,
        }

    def save_markdown(self, path: str) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_markdown())
        return path

    def save_json(self, path: str) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2, default=str))
        return path
