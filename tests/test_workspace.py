import dataclasses
import os
from pathlib import Path

import pytest

from markdownedit.core import workspace
from markdownedit.core.errors import WorkspaceNotADirectoryError
from markdownedit.core.workspace import (
    FileNode,
    FolderNode,
    is_markdown_name,
    iter_markdown_files,
    node_to_dict,
    scan_workspace,
)


def _touch(path: Path, text: str = "# note\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _shape(node):
    if isinstance(node, FileNode):
        return ("file", node.name)
    return ("folder", node.name, [_shape(child) for child in node.children])


def _all_nodes(node):
    yield node
    if isinstance(node, FolderNode):
        for child in node.children:
            yield from _all_nodes(child)


def test_scan_prunes_empty_folders_and_non_markdown_files(tmp_path: Path) -> None:
    root = tmp_path / "ws"
    _touch(root / "a.md")
    _touch(root / "notes" / "b.md")
    _touch(root / "notes" / "deep" / "c.txt", "plain")
    (root / "empty").mkdir()

    tree = scan_workspace(str(root))

    assert tree.kind == "folder"
    assert tree.name == "ws"
    assert tree.path == str(root)
    assert _shape(tree) == ("folder", "ws", [("folder", "notes", [("file", "b.md")]), ("file", "a.md")])
    notes = tree.children[0]
    assert notes.path == str(root / "notes")
    assert notes.children[0].path == str(root / "notes" / "b.md")


def test_scan_orders_folders_first_then_case_insensitive_names(tmp_path: Path) -> None:
    _touch(tmp_path / "b.md")
    _touch(tmp_path / "A.md")
    _touch(tmp_path / "c.MD")
    _touch(tmp_path / "Zeta" / "z.md")
    _touch(tmp_path / "alpha" / "x.md")

    tree = scan_workspace(tmp_path)

    assert [(child.kind, child.name) for child in tree.children] == [
        ("folder", "alpha"),
        ("folder", "Zeta"),
        ("file", "A.md"),
        ("file", "b.md"),
        ("file", "c.MD"),
    ]


def test_every_leaf_is_markdown_and_every_nested_folder_is_non_empty(tmp_path: Path) -> None:
    _touch(tmp_path / "docs" / "guide.md")
    _touch(tmp_path / "docs" / "image.png", "png")
    _touch(tmp_path / "docs" / "api" / "README.Md")
    _touch(tmp_path / "src" / "main.py", "print()")
    _touch(tmp_path / "src" / "nested" / "deeper" / "notes.markdown", "x")
    _touch(tmp_path / "mdfile", "no extension")
    (tmp_path / "build" / "out").mkdir(parents=True)

    tree = scan_workspace(tmp_path)

    for node in _all_nodes(tree):
        if isinstance(node, FileNode):
            assert node.name.lower().endswith(".md")
        elif node is not tree:
            assert node.children
    assert {node.name for node in iter_markdown_files(tree)} == {"guide.md", "README.Md"}
    assert [child.name for child in tree.children] == ["docs"]


def test_root_without_markdown_is_still_a_folder(tmp_path: Path) -> None:
    _touch(tmp_path / "readme.txt", "text")

    tree = scan_workspace(tmp_path)

    assert isinstance(tree, FolderNode)
    assert tree.children == ()


def test_root_path_is_kept_as_given(tmp_path: Path) -> None:
    _touch(tmp_path / "a.md")
    given = str(tmp_path) + os.sep

    tree = scan_workspace(given)

    assert tree.path == given
    assert tree.name == tmp_path.name


def test_filesystem_root_is_named_by_its_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(workspace, "_scan_markdown_tree", lambda directory: [])
    root = os.path.abspath(os.sep)

    tree = scan_workspace(root)

    assert tree.name == root
    assert tree.path == root
    assert tree.children == ()


def test_parent_reference_root_is_named_by_its_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _touch(tmp_path / "notes" / "a.md")
    monkeypatch.chdir(tmp_path)

    tree = scan_workspace(os.path.join("notes", ".."))

    assert tree.name == os.path.join("notes", "..")
    assert [child.name for child in tree.children] == ["notes"]


def test_scan_rejects_regular_file_root(tmp_path: Path) -> None:
    file_path = _touch(tmp_path / "a.md")

    with pytest.raises(WorkspaceNotADirectoryError) as excinfo:
        scan_workspace(file_path)

    assert isinstance(excinfo.value, NotADirectoryError)
    assert excinfo.value.root == str(file_path)
    assert "root is not a directory" in str(excinfo.value)


def test_scan_rejects_missing_root(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceNotADirectoryError):
        scan_workspace(tmp_path / "missing")


def test_unreadable_subdirectory_is_skipped(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _touch(tmp_path / "a.md")
    _touch(tmp_path / "locked" / "secret.md")
    _touch(tmp_path / "open" / "public.md")
    locked = str(tmp_path / "locked")
    real_scandir = os.scandir

    def fake_scandir(path):
        if os.fspath(path) == locked:
            raise PermissionError(13, "Permission denied", locked)
        return real_scandir(path)

    monkeypatch.setattr(workspace.os, "scandir", fake_scandir)

    tree = scan_workspace(tmp_path)

    assert _shape(tree)[2] == [("folder", "open", [("file", "public.md")]), ("file", "a.md")]


class _BrokenEntry:
    def __init__(self, entry: os.DirEntry) -> None:
        self.name = entry.name
        self.path = entry.path

    def is_dir(self, follow_symlinks: bool = True) -> bool:
        raise OSError("stat failed")

    def is_file(self, follow_symlinks: bool = True) -> bool:
        raise OSError("stat failed")


def test_entry_with_unknown_type_is_skipped(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _touch(tmp_path / "good.md")
    _touch(tmp_path / "bad.md")
    real_scandir = os.scandir

    class _Listing:
        def __init__(self, path) -> None:
            with real_scandir(path) as iterator:
                self._entries = list(iterator)

        def __enter__(self):
            return iter(
                _BrokenEntry(entry) if entry.name == "bad.md" else entry
                for entry in self._entries
            )

        def __exit__(self, *exc_info) -> None:
            return None

    monkeypatch.setattr(workspace.os, "scandir", _Listing)

    tree = scan_workspace(tmp_path)

    assert [child.name for child in tree.children] == ["good.md"]


def test_listing_error_keeps_entries_read_before_it(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _touch(tmp_path / "a.md")
    _touch(tmp_path / "b.md")
    real_scandir = os.scandir

    class _InterruptedListing:
        def __init__(self, path) -> None:
            with real_scandir(path) as iterator:
                self._entries = sorted(iterator, key=lambda entry: entry.name)

        def __enter__(self):
            return self._iterate()

        def __exit__(self, *exc_info) -> None:
            return None

        def _iterate(self):
            yield self._entries[0]
            raise OSError(5, "Input/output error")

    monkeypatch.setattr(workspace.os, "scandir", _InterruptedListing)

    tree = scan_workspace(tmp_path)

    assert [child.name for child in tree.children] == ["a.md"]


def test_symlinks_are_not_followed(tmp_path: Path) -> None:
    target_dir = tmp_path / "outside"
    _touch(target_dir / "linked.md")
    root = tmp_path / "ws"
    _touch(root / "real.md")
    try:
        os.symlink(target_dir, root / "dir_link", target_is_directory=True)
        os.symlink(root / "real.md", root / "file_link.md")
    except (OSError, NotImplementedError):
        pytest.skip("symlinks are not supported here")

    tree = scan_workspace(root)

    assert [child.name for child in tree.children] == ["real.md"]


def test_scanning_twice_gives_equal_trees(tmp_path: Path) -> None:
    _touch(tmp_path / "x" / "y" / "z.md")
    _touch(tmp_path / "top.md")

    assert scan_workspace(tmp_path) == scan_workspace(tmp_path)


def test_tree_nodes_are_immutable(tmp_path: Path) -> None:
    _touch(tmp_path / "a.md")
    tree = scan_workspace(tmp_path)

    with pytest.raises(dataclasses.FrozenInstanceError):
        tree.name = "other"  # type: ignore[misc]
    assert not hasattr(tree.children[0], "children")


def test_node_to_dict_omits_children_for_files(tmp_path: Path) -> None:
    _touch(tmp_path / "notes" / "b.md")

    payload = node_to_dict(scan_workspace(tmp_path))

    assert payload["kind"] == "folder"
    folder = payload["children"][0]
    assert folder == {
        "name": "notes",
        "path": str(tmp_path / "notes"),
        "kind": "folder",
        "children": [{"name": "b.md", "path": str(tmp_path / "notes" / "b.md"), "kind": "file"}],
    }
    assert "children" not in folder["children"][0]


def test_iter_markdown_files_follows_tree_order(tmp_path: Path) -> None:
    _touch(tmp_path / "b.md")
    _touch(tmp_path / "sub" / "a.md")

    names = [node.name for node in iter_markdown_files(scan_workspace(tmp_path))]

    assert names == ["a.md", "b.md"]


@pytest.mark.parametrize(
    ("name", "expected"),
    [("a.md", True), ("A.MD", True), ("x.y.Md", True), (".md", False), ("md", False), ("a.mdx", False)],
)
def test_is_markdown_name(name: str, expected: bool) -> None:
    assert is_markdown_name(name) is expected
