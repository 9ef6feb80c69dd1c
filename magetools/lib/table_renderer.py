"""Render name/value tables as text, CSV, JSON, XML or YAML."""
from __future__ import annotations

import csv
import json
import sys
import xml.etree.ElementTree as ET
from typing import Any, Callable, Dict, List, Optional, Sequence, TextIO

import yaml

FORMATS = ["csv", "json", "xml", "yaml"]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _records(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> List[Dict[str, Any]]:
    return [dict(zip(headers, row)) for row in rows]


def render_text(headers: Sequence[str], rows: Sequence[Sequence[Any]], stream: TextIO) -> None:
    cells = [[_cell(value) for value in row] for row in rows]
    widths = [len(header) for header in headers]
    for row in cells:
        for idx, value in enumerate(row):
            widths[idx] = max(widths[idx], len(value))
    border = "+" + "+".join("-" * (width + 2) for width in widths) + "+"

    def line(values: Sequence[str]) -> str:
        return "|" + "|".join(f" {value:<{widths[idx]}} " for idx, value in enumerate(values)) + "|"

    stream.write(border + "\n")
    stream.write(line(list(headers)) + "\n")
    stream.write(border + "\n")
    for row in cells:
        stream.write(line(row) + "\n")
    stream.write(border + "\n")


def render_csv(headers: Sequence[str], rows: Sequence[Sequence[Any]], stream: TextIO) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_cell(value) for value in row])


def render_json(headers: Sequence[str], rows: Sequence[Sequence[Any]], stream: TextIO) -> None:
    stream.write(json.dumps(_records(headers, rows), ensure_ascii=False, indent=2) + "\n")


def render_yaml(headers: Sequence[str], rows: Sequence[Sequence[Any]], stream: TextIO) -> None:
    yaml.safe_dump(_records(headers, rows), stream, allow_unicode=True, sort_keys=False)


def render_xml(headers: Sequence[str], rows: Sequence[Sequence[Any]], stream: TextIO) -> None:
    table = ET.Element("table")
    header_node = ET.SubElement(table, "headers")
    for header in headers:
        ET.SubElement(header_node, "header").text = header
    for row in rows:
        row_node = ET.SubElement(table, "row")
        for header, value in zip(headers, row):
            ET.SubElement(row_node, header).text = _cell(value)
    ET.indent(table)
    stream.write('<?xml version="1.0" encoding="UTF-8"?>\n')
    stream.write(ET.tostring(table, encoding="unicode") + "\n")


RENDERERS: Dict[str, Callable[[Sequence[str], Sequence[Sequence[Any]], TextIO], None]] = {
    "csv": render_csv,
    "json": render_json,
    "xml": render_xml,
    "yaml": render_yaml,
}


def render(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    fmt: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    out = stream or sys.stdout
    if fmt is None:
        render_text(headers, rows, out)
        return
    renderer = RENDERERS.get(fmt.lower())
    if renderer is None:
        raise ValueError(f"Unknown format {fmt}. One of [{','.join(FORMATS)}]")
    renderer(headers, rows, out)


def write_section(stream: TextIO, title: str) -> None:
    stream.write("\n")
    stream.write(title + "\n")
    stream.write("=" * len(title) + "\n")
    stream.write("\n")
