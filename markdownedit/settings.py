from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
import os
from pathlib import Path
import sys

APP_NAME = "MarkdownEdit"
SETTINGS_FILENAME = "settings.json"
MAX_RECENT_FILES = 20

THEMES = ("light", "dark")
EDITOR_MODES = ("markdown", "split", "preview")
SIDEBAR_TABS = ("files", "recent", "outline")

LOG_LEVEL_ENV = "MARKDOWNEDIT_LOG_LEVEL"

logger = logging.getLogger("markdownedit.settings")


def configure_logging(level_name: str | None = None) -> int:
    name = (level_name or os.environ.get(LOG_LEVEL_ENV) or "WARNING").upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return level


def get_config_dir(app_name: str = APP_NAME) -> Path:
    home = Path.home()
    if os.name == "nt":
        base = Path(os.environ.get("APPDATA", home / "AppData" / "Roaming"))
        return base / app_name
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / app_name
    base = Path(os.environ.get("XDG_CONFIG_HOME", home / ".config"))
    return base / app_name.lower()


@dataclass(frozen=True, slots=True)
class RecentFile:
    path: str
    name: str

    @classmethod
    def from_path(cls, path: str) -> "RecentFile":
        return cls(path=path, name=Path(path).name or path)


@dataclass(slots=True)
class AppSettings:
    last_workspace: str = ""
    recent_files: list[RecentFile] = field(default_factory=list)
    ui_theme: str = "light"
    editor_mode: str = "markdown"
    split_left_pct: int = 60
    sidebar_visible: bool = True
    sidebar_width: int = 290
    sidebar_tab: str = "files"
    last_open_file: str = ""

    @classmethod
    def load(cls, path: Path | None = None) -> "AppSettings":
        path = path or get_config_dir() / SETTINGS_FILENAME
        if not path.exists():
            return cls()

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
            return cls()
        if not isinstance(data, dict):
            return cls()

        settings = cls()
        if isinstance(data.get("last_workspace"), str):
            settings.last_workspace = data["last_workspace"]

        recent_files = data.get("recent_files")
        if isinstance(recent_files, list):
            seen: set[str] = set()
            for item in recent_files:
                if not isinstance(item, dict) or not isinstance(item.get("path"), str):
                    continue
                if item["path"] in seen:
                    continue
                seen.add(item["path"])
                name = item.get("name")
                if isinstance(name, str) and name:
                    settings.recent_files.append(RecentFile(path=item["path"], name=name))
                else:
                    settings.recent_files.append(RecentFile.from_path(item["path"]))
            settings.recent_files = settings.recent_files[:MAX_RECENT_FILES]

        if data.get("ui_theme") in THEMES:
            settings.ui_theme = str(data["ui_theme"])
        if data.get("editor_mode") in EDITOR_MODES:
            settings.editor_mode = str(data["editor_mode"])
        if data.get("sidebar_tab") in SIDEBAR_TABS:
            settings.sidebar_tab = str(data["sidebar_tab"])

        split_left_pct = data.get("split_left_pct")
        if isinstance(split_left_pct, int) and not isinstance(split_left_pct, bool) and 20 <= split_left_pct <= 80:
            settings.split_left_pct = split_left_pct

        if isinstance(data.get("sidebar_visible"), bool):
            settings.sidebar_visible = bool(data["sidebar_visible"])

        sidebar_width = data.get("sidebar_width")
        if isinstance(sidebar_width, int) and not isinstance(sidebar_width, bool) and 120 <= sidebar_width <= 1200:
            settings.sidebar_width = sidebar_width

        if isinstance(data.get("last_open_file"), str):
            settings.last_open_file = str(data["last_open_file"])

        return settings

    def save(self, path: Path | None = None) -> None:
        path = path or get_config_dir() / SETTINGS_FILENAME
        path.parent.mkdir(parents=True, exist_ok=True)

        payload = {
            "last_workspace": self.last_workspace,
            "recent_files": [{"path": item.path, "name": item.name} for item in self.recent_files[:MAX_RECENT_FILES]],
            "ui_theme": self.ui_theme,
            "editor_mode": self.editor_mode,
            "split_left_pct": self.split_left_pct,
            "sidebar_visible": self.sidebar_visible,
            "sidebar_width": self.sidebar_width,
            "sidebar_tab": self.sidebar_tab,
            "last_open_file": self.last_open_file,
        }
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    def touch_recent_file(self, path: str, max_items: int = MAX_RECENT_FILES) -> None:
        normalized = str(path)
        self.recent_files = [item for item in self.recent_files if item.path != normalized]
        self.recent_files.insert(0, RecentFile.from_path(normalized))
        self.recent_files = self.recent_files[:max_items]

    def forget_recent_file(self, path: str) -> None:
        self.recent_files = [item for item in self.recent_files if item.path != str(path)]
