"""Rendering of query results and errors for the console page.

Column headers come from the first row's keys, in that row's order; no
schema is assumed. `None` is shown as NULL, marked up with its own CSS
class so it stays distinguishable from a literal "NULL" string.
"""
import json
from dataclasses import dataclass
from html import escape
from typing import Any

NULL_TOKEN = "NULL"
NO_RESULTS = "Query executed successfully. No results to display."

_MISSING = object()

STYLES = """
<style>
.dbx-results { border-collapse: collapse; width: 100%; font-size: 0.875rem; }
.dbx-results th { text-align: left; text-transform: uppercase; color: #6b7280; background: #f9fafb; padding: 0.5rem 1rem; }
.dbx-results td { padding: 0.5rem 1rem; border-top: 1px solid #e5e7eb; white-space: nowrap; }
.dbx-null { color: #9ca3af; font-style: italic; }
.dbx-caption { color: #4b5563; font-size: 0.875rem; }
.dbx-empty { text-align: center; color: #6b7280; padding: 2rem 0; }
.dbx-error { background: #fee2e2; border: 1px solid #f87171; color: #b91c1c; padding: 0.75rem 1rem; border-radius: 0.5rem; white-space: pre-wrap; }
</style>
"""


def format_value(value: Any) -> str:
    if value is None:
        return NULL_TOKEN
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


@dataclass(frozen=True)
class ResultTable:
    headers: list[str]
    rows: list[list[Any]]

    @classmethod
    def from_rows(cls, rows: list[dict[str, Any]]) -> "ResultTable":
        if not rows:
            return cls(headers=[], rows=[])
        headers = list(rows[0].keys())
        return cls(
            headers=headers,
            rows=[[row.get(h, _MISSING) for h in headers] for row in rows],
        )

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def caption(self) -> str:
        return f"{self.row_count} {'row' if self.row_count == 1 else 'rows'} returned"

    def text_rows(self) -> list[list[str]]:
        """Cell text as displayed; cells absent from a row are blank."""
        return [["" if v is _MISSING else format_value(v) for v in row] for row in self.rows]


def _render_cell(value: Any) -> str:
    if value is _MISSING:
        return "<td></td>"
    if value is None:
        return f'<td><span class="dbx-null">{NULL_TOKEN}</span></td>'
    return f"<td>{escape(format_value(value))}</td>"


def render_results_html(rows: list[dict[str, Any]]) -> str:
    """HTML for a successful result, including the zero-row case."""
    table = ResultTable.from_rows(rows)
    caption = f'<p class="dbx-caption">{table.caption}</p>'
    if not table.rows:
        return f'{caption}<div class="dbx-empty">{NO_RESULTS}</div>'

    head = "".join(f"<th>{escape(h)}</th>" for h in table.headers)
    body = "".join(
        "<tr>" + "".join(_render_cell(v) for v in row) + "</tr>"
        for row in table.rows
    )
    return (
        f"{caption}"
        f'<table class="dbx-results"><thead><tr>{head}</tr></thead>'
        f"<tbody>{body}</tbody></table>"
    )


def render_error_html(message: str) -> str:
    return f'<div class="dbx-error">{escape(message)}</div>'
