"""HTML report rendering utilities."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import html
import json
from typing import Any

_IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".svg", ".gif")
_SECTION_TITLES = {"container": "Container", "test": "Test"}


def _json_dump(payload: Any) -> str:
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=True)


def _escape_text(value: Any) -> str:
    if value is None:
        return ""
    return html.escape(str(value))


def _render_file_value(value: Mapping[str, Any]) -> str:
    path = value.get("path")
    if not path:
        return '<span class="muted">not available</span>'
    escaped = _escape_text(path)
    if str(path).lower().endswith(_IMAGE_SUFFIXES):
        return (
            f'<a href="{escaped}"><img class="schema" src="{escaped}" '
            f'alt="{escaped}"></a>'
        )
    return f'<a href="{escaped}"><code>{escaped}</code></a>'


def _render_value(value: Any) -> str:
    if isinstance(value, Mapping) and value.get("type") == "file":
        return _render_file_value(value)
    return _escape_text(value)


def _render_key_values(entries: Sequence[Mapping[str, Any]]) -> str:
    if not entries:
        return ""
    rows = []
    for entry in entries:
        rows.append(
            "<tr>"
            f'<th scope="row">{_escape_text(entry.get("key"))}</th>'
            f"<td>{_render_value(entry.get('value'))}</td>"
            "</tr>"
        )
    return '<table class="kv">\n' + "\n".join(rows) + "\n</table>"


def _label_text(label: Any) -> str:
    if not isinstance(label, Mapping):
        return ""
    path = label.get("path") or [label.get("name")]
    return " / ".join(str(part) for part in path if part)


def _collect_rows(
    collection: Mapping[str, Any],
    columns: list[str],
    rows: list[tuple[str, dict[str, str]]],
) -> None:
    items = collection.get("items") or []
    if items:
        cells: dict[str, str] = {}
        for item in items:
            column = _label_text(item.get("label"))
            if column not in columns:
                columns.append(column)
            cells[column] = str(item.get("display", ""))
        rows.append((_label_text(collection.get("label")), cells))
    for child in collection.get("collections") or []:
        _collect_rows(child, columns, rows)


def _render_data_collection(collection: Mapping[str, Any]) -> str:
    columns: list[str] = []
    rows: list[tuple[str, dict[str, str]]] = []
    _collect_rows(collection, columns, rows)
    title = _escape_text(collection.get("title"))
    if not rows:
        return f'<h4>{title}</h4>\n<p class="muted">No data.</p>'
    header = "".join(f"<th>{_escape_text(column)}</th>" for column in columns)
    body = []
    for row_label, cells in rows:
        values = "".join(
            f"<td>{_escape_text(cells.get(column, ''))}</td>" for column in columns
        )
        body.append(f'<tr><th scope="row">{_escape_text(row_label)}</th>{values}</tr>')
    return (
        f"<h4>{title}</h4>\n"
        '<table class="data">\n'
        f"<thead><tr><th></th>{header}</tr></thead>\n"
        "<tbody>\n" + "\n".join(body) + "\n</tbody>\n</table>"
    )


def _render_report(report: Mapping[str, Any], depth: int = 3) -> str:
    parts: list[str] = []
    name = report.get("name")
    if name:
        level = min(depth, 6)
        parts.append(f"<h{level}>{_escape_text(name)}</h{level}>")
    entries = report.get("entries") or []
    key_values = [entry for entry in entries if entry.get("type") == "key_value"]
    parts.append(_render_key_values(key_values))
    for entry in entries:
        if entry.get("type") == "data_collection":
            parts.append(_render_data_collection(entry))
    for sub in report.get("sub_reports") or []:
        parts.append(_render_report(sub, depth + 1))
    return "\n".join(part for part in parts if part)


def _render_section(section: Mapping[str, Any]) -> str:
    kind = str(section.get("kind", ""))
    eyebrow = _SECTION_TITLES.get(kind, kind or "Section")
    reports = section.get("reports") or []
    body = "\n".join(_render_report(report) for report in reports)
    if not body:
        body = '<p class="muted">Nothing was reported.</p>'
    return (
        '<section class="panel">\n'
        f'<p class="eyebrow">{_escape_text(eyebrow)}</p>\n'
        f"<h2>{_escape_text(section.get('id'))}</h2>\n"
        f"{body}\n"
        "</section>"
    )


def render_report_html(
    *,
    title: str,
    created_at: str,
    payload: Mapping[str, Any],
) -> str:
    sections = payload.get("sections") or []
    sections_html = "\n".join(_render_section(section) for section in sections)
    if not sections_html:
        sections_html = (
            '<section class="panel"><p class="muted">No sections reported.</p></section>'
        )
    payload_raw = _json_dump(payload).replace("</", "<\\/")

    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{_escape_text(title)}</title>
  <style>
    :root {{
      --bg: #f5f0e7;
      --bg-accent: #dfe9ef;
      --panel: #ffffff;
      --ink: #1f2a33;
      --muted: #5f6c77;
      --accent: #0f6f68;
      --border: #d5d7d9;
      --shadow: 0 18px 40px rgba(19, 36, 48, 0.08);
      --font-display: "Trebuchet MS", "Lucida Sans Unicode", "Lucida Grande", sans-serif;
      --font-body: "Palatino Linotype", "Book Antiqua", Palatino, serif;
      --font-mono: "Courier New", Courier, monospace;
    }}

    * {{
      box-sizing: border-box;
    }}

    body {{
      margin: 0;
      font-family: var(--font-body);
      color: var(--ink);
      background: linear-gradient(140deg, var(--bg) 0%, var(--bg-accent) 100%);
    }}

    code {{
      font-family: var(--font-mono);
      font-size: 0.9em;
    }}

    .page {{
      max-width: 1080px;
      margin: 0 auto;
      padding: 32px 20px 60px;
    }}

    .hero {{
      padding: 28px;
      border-radius: 22px;
      background: rgba(255, 255, 255, 0.85);
      border: 1px solid var(--border);
      box-shadow: var(--shadow);
    }}

    .eyebrow {{
      font-family: var(--font-display);
      letter-spacing: 0.18em;
      text-transform: uppercase;
      font-size: 11px;
      color: var(--accent);
      margin: 0 0 8px;
    }}

    h1, h2, h3, h4 {{
      font-family: var(--font-display);
    }}

    .panel {{
      margin-top: 26px;
      padding: 22px;
      border-radius: 20px;
      background: var(--panel);
      border: 1px solid var(--border);
      box-shadow: var(--shadow);
    }}

    table {{
      border-collapse: collapse;
      margin: 8px 0 16px;
      width: 100%;
    }}

    th, td {{
      text-align: left;
      padding: 6px 10px;
      border-bottom: 1px solid var(--border);
      vertical-align: top;
    }}

    table.data td {{
      font-family: var(--font-mono);
      font-size: 13px;
    }}

    img.schema {{
      max-width: 100%;
      border: 1px solid var(--border);
      border-radius: 12px;
    }}

    .muted {{
      color: var(--muted);
      margin: 0;
    }}
  </style>
</head>
<body>
  <div class="page">
    <header class="hero">
      <p class="eyebrow">container report</p>
      <h1>{_escape_text(title)}</h1>
      <p class="muted">Created: {_escape_text(created_at)} &middot; Sections: {len(sections)}</p>
    </header>

{sections_html}
  </div>

  <script type="application/json" id="report-payload">
{payload_raw}
  </script>
</body>
</html>
"""


__all__ = ["render_report_html"]
