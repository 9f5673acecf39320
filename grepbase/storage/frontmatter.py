"""YAML front matter helpers shared by the raw and processed layers."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Tuple

import yaml

HEADER_DELIMITER = "---"


class _BlockDumper(yaml.SafeDumper):
    """Safe dumper that indents sequences under their parent key."""

    def increase_indent(self, flow: bool = False, indentless: bool = False):
        return super().increase_indent(flow, False)


class _FlowListDumper(_BlockDumper):
    """Renders lists of scalars inline so each tag stays on a single grep-able line."""


def _represent_list(dumper: yaml.SafeDumper, data: list) -> yaml.Node:
    flow = all(not isinstance(item, (list, tuple, dict)) for item in data)
    return dumper.represent_sequence("tag:yaml.org,2002:seq", data, flow_style=flow)


_FlowListDumper.add_representer(list, _represent_list)
_FlowListDumper.add_representer(tuple, _represent_list)


def dump_header(data: Mapping[str, Any], *, flow_lists: bool = False, width: int = 200) -> str:
    """Serialize a mapping as YAML keeping insertion order."""

    dumper = _FlowListDumper if flow_lists else _BlockDumper
    return yaml.dump(
        dict(data),
        Dumper=dumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=width,
    )


def render_document(header: Mapping[str, Any], body: str, *, flow_lists: bool = False) -> str:
    """Join a YAML header block and a body into one Markdown document."""

    lines = [HEADER_DELIMITER]
    if header:
        lines.append(dump_header(header, flow_lists=flow_lists).strip())
    lines.append(HEADER_DELIMITER)
    lines.append("")
    lines.append(body.strip())
    return "\n".join(lines)


def split_document(text: str) -> Tuple[str, str]:
    """
    Split a document into its raw YAML header text and the body below it.

    Raises ValueError when the text does not open with a ``---`` delimited block.
    """

    opening = HEADER_DELIMITER + "\n"
    if not text.startswith(opening):
        raise ValueError("missing opening header delimiter")

    end_index = text.find("\n" + HEADER_DELIMITER, len(opening))
    if end_index == -1:
        raise ValueError("missing closing header delimiter")

    header = text[len(opening) : end_index].rstrip()
    body = text[end_index + len(HEADER_DELIMITER) + 1 :]
    # Drop the delimiter's line break and the blank separator line.
    for _ in range(2):
        if body.startswith("\n"):
            body = body[1:]
    return header, body


def parse_header(header: str) -> Dict[str, Any]:
    """Parse header text; raises ValueError unless it is a mapping."""

    parsed = yaml.safe_load(header)
    if not isinstance(parsed, dict):
        raise ValueError(f"header is a {type(parsed).__name__}, not a mapping")
    return parsed
