from __future__ import annotations

import re

import markdown as markdown_renderer

_MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "footnotes", "sane_lists", "nl2br"]
_TASK_ITEM_RE = re.compile(r"(<li>\s*(?:<p>)?)\[([ xX])\]\s")


def _build_renderer() -> markdown_renderer.Markdown:
    renderer = markdown_renderer.Markdown(extensions=_MARKDOWN_EXTENSIONS)
    # Raw HTML in a document is shown as text, never interpreted.
    renderer.preprocessors.deregister("html_block")
    renderer.inlinePatterns.deregister("html")
    return renderer


def _render_task_items(body: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        checked = " checked" if match.group(2) in "xX" else ""
        return f'{match.group(1)}<input type="checkbox" disabled{checked}> '

    return _TASK_ITEM_RE.sub(_replace, body)


def render_markdown_body(markdown_text: str) -> str:
    if not markdown_text.strip():
        return ""
    body = _build_renderer().convert(markdown_text)
    return _render_task_items(body)


def render_markdown_html(markdown_text: str, css: str = "") -> str:
    return (
        '<html><head><meta charset="utf-8"><style>'
        + css
        + "</style></head><body>"
        + render_markdown_body(markdown_text)
        + "</body></html>"
    )
