from __future__ import annotations

from dataclasses import dataclass
import re

_FENCE_RE = re.compile(r"^\s*(```|~~~)")
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")


@dataclass(frozen=True, slots=True)
class OutlineItem:
    level: int
    text: str
    line: int
    offset: int


def parse_markdown_outline(text: str) -> list[OutlineItem]:
    items: list[OutlineItem] = []
    open_fence: str | None = None
    offset = 0

    for line_number, raw_line in enumerate(text.split("\n"), start=1):
        line = raw_line[:-1] if raw_line.endswith("\r") else raw_line
        line_offset = offset
        offset += len(raw_line) + 1

        fence_match = _FENCE_RE.match(line)
        if fence_match:
            token = fence_match.group(1)
            if open_fence == token:
                open_fence = None
            elif open_fence is None:
                open_fence = token
            continue
        if open_fence is not None:
            continue

        heading_match = _HEADING_RE.match(line)
        if not heading_match:
            continue
        heading_text = heading_match.group(2).strip()
        if heading_text:
            items.append(
                OutlineItem(
                    level=len(heading_match.group(1)),
                    text=heading_text,
                    line=line_number,
                    offset=line_offset,
                )
            )

    return items


def active_outline_index(items: list[OutlineItem], cursor_line: int) -> int | None:
    active: int | None = None
    for index, item in enumerate(items):
        if item.line > cursor_line:
            break
        active = index
    return active
