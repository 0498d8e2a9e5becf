"""
Workspace tree scanning.

Builds the sidebar tree of a markdown workspace: only folders that contain
markdown somewhere beneath them and only ``.md`` files, folders listed
before files and names compared case-insensitively.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Literal, Union

from .errors import WorkspaceNotADirectoryError

logger = logging.getLogger("markdownedit.workspace")

MARKDOWN_EXTENSION = "md"


@dataclass(frozen=True, slots=True)
class FileNode:
    name: str
    path: str

    @property
    def kind(self) -> Literal["file"]:
        return "file"


@dataclass(frozen=True, slots=True)
class FolderNode:
    name: str
    path: str
    children: tuple["TreeNode", ...] = ()

    @property
    def kind(self) -> Literal["folder"]:
        return "folder"


TreeNode = Union[FolderNode, FileNode]


def is_markdown_name(name: str) -> bool:
    stem, dot, extension = name.rpartition(".")
    return bool(dot and stem) and extension.lower() == MARKDOWN_EXTENSION


def _sort_key(node: TreeNode) -> tuple[bool, str]:
    return (isinstance(node, FileNode), node.name.lower())


def _scan_markdown_tree(directory: str) -> list[TreeNode]:
    entries: list[os.DirEntry[str]] = []
    try:
        with os.scandir(directory) as iterator:
            for entry in iterator:
                entries.append(entry)
    except OSError as exc:
        # Entries listed before the failure are kept.
        logger.debug("Listing %s stopped early: %s", directory, exc)

    nodes: list[TreeNode] = []
    for entry in entries:
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = not is_dir and entry.is_file(follow_symlinks=False)
        except OSError as exc:
            logger.debug("Skipping entry with unknown type %s: %s", entry.path, exc)
            continue

        if is_dir:
            children = _scan_markdown_tree(entry.path)
            if children:
                nodes.append(FolderNode(name=entry.name, path=entry.path, children=tuple(children)))
        elif is_file and is_markdown_name(entry.name):
            nodes.append(FileNode(name=entry.name, path=entry.path))

    nodes.sort(key=_sort_key)
    return nodes


def scan_workspace(root: str | os.PathLike[str]) -> FolderNode:
    """Scan ``root`` and return the markdown tree rooted at it.

    Raises ``WorkspaceNotADirectoryError`` when ``root`` is missing or is not
    a directory. Unreadable subdirectories and entries whose type cannot be
    determined are skipped silently; the scan never follows symlinks.
    """
    root_str = os.fspath(root)
    if not os.path.isdir(root_str):
        raise WorkspaceNotADirectoryError(root_str)

    children = _scan_markdown_tree(root_str)
    name = Path(root_str).name
    if name in ("", ".."):
        name = root_str
    tree = FolderNode(name=name, path=root_str, children=tuple(children))
    logger.info("Scanned workspace %s: %d markdown files", root_str, sum(1 for _ in iter_markdown_files(tree)))
    return tree


def iter_markdown_files(node: TreeNode) -> Iterator[FileNode]:
    if isinstance(node, FileNode):
        yield node
        return
    for child in node.children:
        yield from iter_markdown_files(child)


def node_to_dict(node: TreeNode) -> dict[str, object]:
    payload: dict[str, object] = {"name": node.name, "path": node.path, "kind": node.kind}
    if isinstance(node, FolderNode):
        payload["children"] = [node_to_dict(child) for child in node.children]
    return payload
