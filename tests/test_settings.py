import json
import logging
import os
from pathlib import Path
import sys

import pytest

from markdownedit.settings import (
    MAX_RECENT_FILES,
    AppSettings,
    RecentFile,
    configure_logging,
    get_config_dir,
)


def test_missing_or_broken_settings_fall_back_to_defaults(tmp_path: Path) -> None:
    assert AppSettings.load(tmp_path / "missing.json") == AppSettings()

    broken = tmp_path / "settings.json"
    broken.write_text("{not json", encoding="utf-8")
    assert AppSettings.load(broken) == AppSettings()

    broken.write_text("[1, 2]", encoding="utf-8")
    assert AppSettings.load(broken) == AppSettings()


def test_settings_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "config" / "settings.json"
    settings = AppSettings(
        last_workspace="/ws",
        ui_theme="dark",
        editor_mode="split",
        split_left_pct=45,
        sidebar_visible=False,
        sidebar_width=333,
        sidebar_tab="outline",
        last_open_file="/ws/a.md",
    )
    settings.touch_recent_file("/ws/a.md")

    settings.save(path)

    assert AppSettings.load(path) == settings


def test_invalid_values_are_replaced_by_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "last_workspace": 42,
                "ui_theme": "purple",
                "editor_mode": "wysiwyg",
                "split_left_pct": 95,
                "sidebar_visible": "yes",
                "sidebar_width": True,
                "sidebar_tab": "search",
                "recent_files": ["/plain/string.md", {"path": "/a.md"}, {"path": "/a.md", "name": "dup"}, {"name": "x"}],
            }
        ),
        encoding="utf-8",
    )

    settings = AppSettings.load(path)
    defaults = AppSettings()

    assert settings.last_workspace == defaults.last_workspace
    assert settings.ui_theme == "light"
    assert settings.editor_mode == "markdown"
    assert settings.split_left_pct == 60
    assert settings.sidebar_visible is True
    assert settings.sidebar_width == 290
    assert settings.sidebar_tab == "files"
    assert settings.recent_files == [RecentFile(path="/a.md", name="a.md")]


def test_touch_recent_file_moves_to_front_and_caps_list() -> None:
    settings = AppSettings()
    for index in range(MAX_RECENT_FILES + 5):
        settings.touch_recent_file(f"/ws/note{index}.md")
    settings.touch_recent_file("/ws/note10.md")

    assert len(settings.recent_files) == MAX_RECENT_FILES
    assert settings.recent_files[0] == RecentFile(path="/ws/note10.md", name="note10.md")
    assert [item.path for item in settings.recent_files].count("/ws/note10.md") == 1

    settings.forget_recent_file("/ws/note10.md")
    assert all(item.path != "/ws/note10.md" for item in settings.recent_files)


def test_config_dir_honours_xdg_config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    if os.name == "nt" or sys.platform == "darwin":
        pytest.skip("XDG config dirs are used on Linux only")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    assert get_config_dir() == tmp_path / "markdownedit"


def test_configure_logging_reads_level_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MARKDOWNEDIT_LOG_LEVEL", "debug")
    assert configure_logging() == logging.DEBUG

    monkeypatch.setenv("MARKDOWNEDIT_LOG_LEVEL", "nonsense")
    assert configure_logging() == logging.WARNING
    assert configure_logging("info") == logging.INFO
