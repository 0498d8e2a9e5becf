from __future__ import annotations

import logging
from pathlib import Path

from PySide6.QtCore import QBuffer, QByteArray, QIODevice, QTimer, Qt, QUrl
from PySide6.QtGui import QAction, QGuiApplication, QKeySequence, QTextCursor
from PySide6.QtWidgets import (
    QAbstractItemView,
    QButtonGroup,
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QSplitter,
    QStatusBar,
    QStyle,
    QTabWidget,
    QTextBrowser,
    QToolBar,
    QToolButton,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ..core.outline import OutlineItem, active_outline_index, parse_markdown_outline
from ..core.preview import render_markdown_html
from ..core.storage import (
    build_image_asset_path,
    copy_file,
    ensure_markdown_suffix,
    normalize_image_extension,
    read_text_file,
    suggest_untitled_path,
    write_binary_file,
    write_text_file,
)
from ..core.workspace import FolderNode, TreeNode, scan_workspace
from ..settings import EDITOR_MODES, SIDEBAR_TABS, AppSettings
from .theme import ThemeTokens, build_app_stylesheet, build_preview_css, get_theme_tokens

logger = logging.getLogger("markdownedit.ui")

_PATH_ROLE = Qt.ItemDataRole.UserRole
_KIND_ROLE = Qt.ItemDataRole.UserRole + 1
_IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.webp *.bmp *.svg)"


class MainWindow(QMainWindow):
    SIDEBAR_COLLAPSE_WIDTH = 120
    SIDEBAR_DEFAULT_WIDTH = 290

    def __init__(self, settings: AppSettings | None = None) -> None:
        super().__init__()
        self.settings = settings or AppSettings.load()
        self._theme_tokens: ThemeTokens = get_theme_tokens(self.settings.ui_theme)

        self.workspace_root: str | None = None
        self.workspace_tree: FolderNode | None = None
        self.expanded_paths: set[str] = set()
        self.current_file: Path | None = None
        self.outline_items: list[OutlineItem] = []
        self._updating = False
        self._sidebar_last_width = self.settings.sidebar_width or self.SIDEBAR_DEFAULT_WIDTH
        self._editor_mode = self.settings.editor_mode

        self.setWindowTitle("MarkdownEdit[*]")
        self.setMinimumSize(960, 640)

        self._create_actions()
        self._build_ui()
        self._connect_signals()

        self._preview_timer = QTimer(self)
        self._preview_timer.setSingleShot(True)
        self._preview_timer.setInterval(180)
        self._preview_timer.timeout.connect(self._update_preview)

        self._outline_timer = QTimer(self)
        self._outline_timer.setSingleShot(True)
        self._outline_timer.setInterval(250)
        self._outline_timer.timeout.connect(self._refresh_outline)

        self._apply_theme(self.settings.ui_theme, persist=False)
        self._apply_sidebar_visibility(self.settings.sidebar_visible, persist=False)
        self._refresh_recent_list()

        if self.settings.last_workspace and Path(self.settings.last_workspace).is_dir():
            self._load_workspace(self.settings.last_workspace, show_message=False)

        last_file = Path(self.settings.last_open_file) if self.settings.last_open_file else None
        if last_file is not None and last_file.is_file():
            self._open_file(last_file)
        else:
            self._new_document()

        self._apply_editor_mode(self._editor_mode, persist=False)

    def _create_actions(self) -> None:
        style = self.style()

        self.open_workspace_action = QAction("Open Folder", self)
        self.open_workspace_action.setShortcut(QKeySequence("Ctrl+Shift+O"))
        self.open_workspace_action.setIcon(style.standardIcon(QStyle.StandardPixmap.SP_DirOpenIcon))
        self.open_workspace_action.triggered.connect(self._choose_workspace)

        self.open_file_action = QAction("Open File", self)
        self.open_file_action.setShortcut(QKeySequence("Ctrl+O"))
        self.open_file_action.setIcon(style.standardIcon(QStyle.StandardPixmap.SP_DialogOpenButton))
        self.open_file_action.triggered.connect(self._choose_file)

        self.new_file_action = QAction("New", self)
        self.new_file_action.setShortcut(QKeySequence("Ctrl+N"))
        self.new_file_action.setIcon(style.standardIcon(QStyle.StandardPixmap.SP_FileIcon))
        self.new_file_action.triggered.connect(self._new_file)

        self.save_action = QAction("Save", self)
        self.save_action.setShortcut(QKeySequence.StandardKey.Save)
        self.save_action.setIcon(style.standardIcon(QStyle.StandardPixmap.SP_DialogSaveButton))
        self.save_action.triggered.connect(self._save)

        self.save_as_action = QAction("Save As...", self)
        self.save_as_action.setShortcut(QKeySequence("Ctrl+Shift+S"))
        self.save_as_action.setIcon(style.standardIcon(QStyle.StandardPixmap.SP_DialogSaveButton))
        self.save_as_action.triggered.connect(self._save_as)

        self.refresh_action = QAction("Refresh Workspace", self)
        self.refresh_action.setShortcut(QKeySequence("F5"))
        self.refresh_action.setIcon(style.standardIcon(QStyle.StandardPixmap.SP_BrowserReload))
        self.refresh_action.triggered.connect(self._refresh_workspace)

        self.insert_image_action = QAction("Insert Image", self)
        self.insert_image_action.setShortcut(QKeySequence("Ctrl+Shift+I"))
        self.insert_image_action.setIcon(style.standardIcon(QStyle.StandardPixmap.SP_FileDialogContentsView))
        self.insert_image_action.triggered.connect(self._insert_image_from_file)

        self.paste_image_action = QAction("Paste Image", self)
        self.paste_image_action.setShortcut(QKeySequence("Ctrl+Shift+V"))
        self.paste_image_action.triggered.connect(self._paste_image_from_clipboard)

        self.toggle_sidebar_action = QAction("Show Sidebar", self)
        self.toggle_sidebar_action.setCheckable(True)
        self.toggle_sidebar_action.setChecked(True)
        self.toggle_sidebar_action.setShortcut(QKeySequence("Ctrl+B"))
        self.toggle_sidebar_action.toggled.connect(self._toggle_sidebar)

        self.toggle_theme_action = QAction("Toggle Theme", self)
        self.toggle_theme_action.setShortcut(QKeySequence("Ctrl+Alt+T"))
        self.toggle_theme_action.setIcon(style.standardIcon(QStyle.StandardPixmap.SP_DesktopIcon))
        self.toggle_theme_action.triggered.connect(self._toggle_theme)

        self.addAction(self.paste_image_action)
        self._update_toggle_icons()

    def _build_ui(self) -> None:
        self.outer_splitter = QSplitter(Qt.Orientation.Horizontal, self)
        self.outer_splitter.setChildrenCollapsible(True)

        self.sidebar_panel = self._build_sidebar()
        self.outer_splitter.addWidget(self.sidebar_panel)

        self.editor_shell = self._build_editor_shell()
        self.outer_splitter.addWidget(self.editor_shell)
        self.outer_splitter.setStretchFactor(0, 0)
        self.outer_splitter.setStretchFactor(1, 1)
        self.outer_splitter.setCollapsible(0, True)
        self.outer_splitter.setCollapsible(1, False)
        self.outer_splitter.setSizes([self._sidebar_last_width, 900])
        self.outer_splitter.splitterMoved.connect(self._on_outer_splitter_moved)

        self.setCentralWidget(self.outer_splitter)
        self._build_status_bar()

    def _build_sidebar(self) -> QWidget:
        sidebar = QFrame(self)
        sidebar.setObjectName("sideBar")
        layout = QVBoxLayout(sidebar)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(8)

        self.workspace_label = QLabel("Workspace: none")
        self.workspace_label.setWordWrap(True)
        self.workspace_label.setObjectName("muted")
        layout.addWidget(self.workspace_label)

        self.sidebar_tabs = QTabWidget(sidebar)
        layout.addWidget(self.sidebar_tabs, 1)

        self.file_tree = QTreeWidget(sidebar)
        self.file_tree.setHeaderHidden(True)
        self.file_tree.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.sidebar_tabs.addTab(self.file_tree, "Files")

        self.recent_list = QListWidget(sidebar)
        self.recent_list.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.sidebar_tabs.addTab(self.recent_list, "Recent")

        self.outline_list = QListWidget(sidebar)
        self.outline_list.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.sidebar_tabs.addTab(self.outline_list, "Outline")

        if self.settings.sidebar_tab in SIDEBAR_TABS:
            self.sidebar_tabs.setCurrentIndex(SIDEBAR_TABS.index(self.settings.sidebar_tab))
        return sidebar

    def _build_editor_shell(self) -> QWidget:
        shell = QFrame(self)
        shell.setObjectName("editorSurface")
        layout = QVBoxLayout(shell)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        layout.addWidget(self._build_title_toolbar())

        self.content_splitter = QSplitter(Qt.Orientation.Horizontal, shell)
        self.content_splitter.setChildrenCollapsible(False)
        layout.addWidget(self.content_splitter, 1)

        self.editor = QPlainTextEdit(shell)
        self.editor.setLineWrapMode(QPlainTextEdit.LineWrapMode.WidgetWidth)
        self.content_splitter.addWidget(self.editor)

        self.preview_browser = QTextBrowser(shell)
        self.preview_browser.setOpenExternalLinks(True)
        self.content_splitter.addWidget(self.preview_browser)
        self.content_splitter.splitterMoved.connect(self._on_content_splitter_moved)
        return shell

    def _build_title_toolbar(self) -> QToolBar:
        toolbar = QToolBar("Editor", self)
        toolbar.setObjectName("titleToolbar")
        toolbar.setMovable(False)
        toolbar.setToolButtonStyle(Qt.ToolButtonStyle.ToolButtonIconOnly)
        toolbar.addAction(self.toggle_sidebar_action)
        toolbar.addSeparator()
        toolbar.addAction(self.open_workspace_action)
        toolbar.addAction(self.open_file_action)
        toolbar.addAction(self.new_file_action)
        toolbar.addSeparator()
        toolbar.addAction(self.save_action)
        toolbar.addAction(self.save_as_action)
        toolbar.addAction(self.refresh_action)
        toolbar.addSeparator()
        toolbar.addAction(self.insert_image_action)
        toolbar.addSeparator()

        mode_switcher = QWidget(toolbar)
        mode_layout = QHBoxLayout(mode_switcher)
        mode_layout.setContentsMargins(0, 0, 0, 0)
        mode_layout.setSpacing(4)

        self.mode_group = QButtonGroup(mode_switcher)
        self.mode_group.setExclusive(True)
        self.mode_buttons: dict[str, QToolButton] = {}
        for mode, caption in zip(EDITOR_MODES, ("Markdown", "Split", "Preview")):
            button = QToolButton(mode_switcher)
            button.setText(caption)
            button.setCheckable(True)
            button.setToolButtonStyle(Qt.ToolButtonStyle.ToolButtonTextOnly)
            button.clicked.connect(lambda _checked=False, value=mode: self._apply_editor_mode(value))
            self.mode_group.addButton(button)
            mode_layout.addWidget(button)
            self.mode_buttons[mode] = button

        toolbar.addWidget(mode_switcher)
        toolbar.addSeparator()
        toolbar.addAction(self.toggle_theme_action)
        return toolbar

    def _build_status_bar(self) -> None:
        status_bar = QStatusBar(self)
        self.setStatusBar(status_bar)

        self.file_status_label = QLabel("File: new document")
        self.cursor_status_label = QLabel("Line 1")
        self.mode_status_label = QLabel("")

        status_bar.addWidget(self.file_status_label, 1)
        status_bar.addPermanentWidget(self.cursor_status_label)
        status_bar.addPermanentWidget(self.mode_status_label)

    def _connect_signals(self) -> None:
        self.file_tree.itemActivated.connect(self._open_tree_item)
        self.file_tree.itemDoubleClicked.connect(self._open_tree_item)
        self.file_tree.itemExpanded.connect(self._remember_expanded)
        self.file_tree.itemCollapsed.connect(self._remember_collapsed)

        self.recent_list.itemActivated.connect(self._open_recent_item)
        self.recent_list.itemDoubleClicked.connect(self._open_recent_item)

        self.outline_list.itemClicked.connect(self._jump_to_outline_item)
        self.outline_list.itemActivated.connect(self._jump_to_outline_item)

        self.sidebar_tabs.currentChanged.connect(self._on_sidebar_tab_changed)

        self.editor.textChanged.connect(self._on_editor_changed)
        self.editor.cursorPositionChanged.connect(self._on_cursor_moved)
        self.editor.document().modificationChanged.connect(self.setWindowModified)
        self.editor.document().modificationChanged.connect(lambda _modified: self._update_file_status_label())

    # Workspace

    def _choose_workspace(self) -> None:
        start_dir = self.workspace_root or self.settings.last_workspace or str(Path.home())
        selected = QFileDialog.getExistingDirectory(self, "Open Folder", start_dir)
        if not selected:
            return
        self._load_workspace(selected)

    def _load_workspace(self, root: str, show_message: bool = True) -> bool:
        try:
            tree = scan_workspace(root)
        except NotADirectoryError as exc:
            logger.warning("Opening workspace %s failed: %s", root, exc)
            QMessageBox.critical(self, "Cannot open workspace", f"Could not open the workspace:\n{exc}")
            return False

        if root != self.workspace_root:
            self.expanded_paths = {tree.path}
        self.workspace_root = root
        self.workspace_tree = tree
        self.settings.last_workspace = root
        self.settings.save()

        self.workspace_label.setText(f"Workspace: {root}")
        self._populate_file_tree()
        if show_message:
            self.statusBar().showMessage("Workspace refreshed", 3000)
        return True

    def _refresh_workspace(self) -> None:
        if not self.workspace_root:
            self._choose_workspace()
            return
        self._load_workspace(self.workspace_root)

    def _populate_file_tree(self) -> None:
        self.file_tree.blockSignals(True)
        try:
            self.file_tree.clear()
            if self.workspace_tree is None:
                return
            root_item = self._build_tree_item(self.workspace_tree)
            self.file_tree.addTopLevelItem(root_item)
            self._restore_expansion(root_item)
            if not self.workspace_tree.children:
                placeholder = QTreeWidgetItem(["(no .md files found)"])
                placeholder.setFlags(Qt.ItemFlag.NoItemFlags)
                root_item.addChild(placeholder)
        finally:
            self.file_tree.blockSignals(False)
        self._select_current_file_in_tree()

    def _build_tree_item(self, node: TreeNode) -> QTreeWidgetItem:
        item = QTreeWidgetItem([node.name])
        item.setData(0, _PATH_ROLE, node.path)
        item.setData(0, _KIND_ROLE, node.kind)
        item.setToolTip(0, node.path)
        style = self.style()
        if isinstance(node, FolderNode):
            item.setIcon(0, style.standardIcon(QStyle.StandardPixmap.SP_DirIcon))
            for child in node.children:
                item.addChild(self._build_tree_item(child))
        else:
            item.setIcon(0, style.standardIcon(QStyle.StandardPixmap.SP_FileIcon))
        return item

    def _restore_expansion(self, item: QTreeWidgetItem) -> None:
        if item.data(0, _KIND_ROLE) != "folder":
            return
        item.setExpanded(item.data(0, _PATH_ROLE) in self.expanded_paths)
        for index in range(item.childCount()):
            self._restore_expansion(item.child(index))

    def _remember_expanded(self, item: QTreeWidgetItem) -> None:
        path = item.data(0, _PATH_ROLE)
        if path:
            self.expanded_paths.add(path)

    def _remember_collapsed(self, item: QTreeWidgetItem) -> None:
        self.expanded_paths.discard(item.data(0, _PATH_ROLE))

    def _select_current_file_in_tree(self) -> None:
        if self.current_file is None:
            return
        target = str(self.current_file)
        pending = [self.file_tree.topLevelItem(i) for i in range(self.file_tree.topLevelItemCount())]
        while pending:
            item = pending.pop()
            if item.data(0, _KIND_ROLE) == "file" and item.data(0, _PATH_ROLE) == target:
                self.file_tree.setCurrentItem(item)
                return
            pending.extend(item.child(i) for i in range(item.childCount()))

    def _open_tree_item(self, item: QTreeWidgetItem | None, _column: int = 0) -> None:
        if item is None or item.data(0, _KIND_ROLE) != "file":
            return
        path = Path(item.data(0, _PATH_ROLE))
        if self.current_file == path:
            return
        if not self._ensure_saved_before_navigation():
            return
        self._open_file(path)

    # Documents

    def _choose_file(self) -> None:
        if not self._ensure_saved_before_navigation():
            return
        start_dir = str(self.current_file.parent) if self.current_file else (self.workspace_root or str(Path.home()))
        selected, _ = QFileDialog.getOpenFileName(self, "Open File", start_dir, "Markdown (*.md)")
        if not selected:
            return
        self._open_file(Path(selected))

    def _open_file(self, path: Path) -> bool:
        try:
            text = read_text_file(path)
        except OSError as exc:
            QMessageBox.critical(self, "Cannot open file", f"Could not open file:\n{path}\n\n{exc}")
            return False

        self.current_file = path
        self._set_editor_text(text)
        self.settings.last_open_file = str(path)
        self.settings.touch_recent_file(str(path))
        self.settings.save()
        self._refresh_recent_list()
        self._select_current_file_in_tree()
        self._update_file_status_label()
        self.statusBar().showMessage(f"Opened {path.name}", 3000)
        return True

    def _new_file(self) -> None:
        if not self._ensure_saved_before_navigation():
            return
        self._new_document()

    def _new_document(self) -> None:
        self.current_file = None
        self.settings.last_open_file = ""
        self._set_editor_text("")
        self._update_file_status_label()

    def _set_editor_text(self, text: str) -> None:
        self._updating = True
        try:
            self.editor.setPlainText(text)
            self.editor.moveCursor(QTextCursor.MoveOperation.Start)
            self.editor.document().setModified(False)
        finally:
            self._updating = False
        self._sync_preview_base_dir()
        self._refresh_outline()
        self._update_preview()
        self._on_cursor_moved()

    def _ask_save_path(self) -> Path | None:
        if self.current_file is not None:
            suggested = self.current_file
        else:
            start_dir = Path(self.workspace_root) if self.workspace_root else Path.home()
            suggested = suggest_untitled_path(start_dir)
        selected, _ = QFileDialog.getSaveFileName(self, "Save As", str(suggested), "Markdown (*.md)")
        if not selected:
            return None
        return ensure_markdown_suffix(selected)

    def _save_to_target(self, target: Path) -> bool:
        try:
            write_text_file(target, self.editor.toPlainText())
        except OSError as exc:
            self.statusBar().showMessage(f"Save failed: {exc}", 7000)
            QMessageBox.critical(self, "Save failed", f"Could not save file:\n{target}\n\n{exc}")
            return False

        self.current_file = target
        self.editor.document().setModified(False)
        self.settings.last_open_file = str(target)
        self.settings.touch_recent_file(str(target))
        self.settings.save()
        self._refresh_recent_list()
        self._sync_preview_base_dir()
        self._update_file_status_label()
        if self._is_inside_workspace(target):
            self._load_workspace(self.workspace_root, show_message=False)
        self.statusBar().showMessage(f"Saved {target.name}", 3000)
        return True

    def _is_inside_workspace(self, path: Path) -> bool:
        if not self.workspace_root:
            return False
        try:
            path.resolve().relative_to(Path(self.workspace_root).resolve())
        except ValueError:
            return False
        return True

    def _save(self) -> bool:
        target = self.current_file or self._ask_save_path()
        if target is None:
            return False
        return self._save_to_target(target)

    def _save_as(self) -> bool:
        target = self._ask_save_path()
        if target is None:
            return False
        return self._save_to_target(target)

    def _ensure_saved_before_navigation(self) -> bool:
        if not self.editor.document().isModified():
            return True

        answer = QMessageBox.question(
            self,
            "Unsaved changes",
            "The current document has unsaved changes. Save them?",
            QMessageBox.StandardButton.Save | QMessageBox.StandardButton.Discard | QMessageBox.StandardButton.Cancel,
            QMessageBox.StandardButton.Save,
        )
        if answer == QMessageBox.StandardButton.Save:
            return self._save()
        return answer == QMessageBox.StandardButton.Discard

    # Recent files

    def _refresh_recent_list(self) -> None:
        self.recent_list.clear()
        for recent in self.settings.recent_files:
            item = QListWidgetItem(recent.name)
            item.setData(_PATH_ROLE, recent.path)
            item.setToolTip(recent.path)
            self.recent_list.addItem(item)

        if not self.settings.recent_files:
            placeholder = QListWidgetItem("(no recent files)")
            placeholder.setFlags(Qt.ItemFlag.NoItemFlags)
            self.recent_list.addItem(placeholder)

    def _open_recent_item(self, item: QListWidgetItem | None) -> None:
        if item is None:
            return
        raw_path = item.data(_PATH_ROLE)
        if not raw_path:
            return
        path = Path(raw_path)
        if not path.is_file():
            self.settings.forget_recent_file(raw_path)
            self.settings.save()
            self._refresh_recent_list()
            QMessageBox.warning(self, "File not found", f"The file no longer exists:\n{path}")
            return
        if self.current_file == path or not self._ensure_saved_before_navigation():
            return
        self._open_file(path)

    # Outline

    def _refresh_outline(self) -> None:
        self.outline_items = parse_markdown_outline(self.editor.toPlainText())
        self.outline_list.blockSignals(True)
        try:
            self.outline_list.clear()
            for outline_item in self.outline_items:
                item = QListWidgetItem(("    " * (outline_item.level - 1)) + outline_item.text)
                item.setData(_PATH_ROLE, outline_item.offset)
                self.outline_list.addItem(item)
        finally:
            self.outline_list.blockSignals(False)
        self._highlight_active_outline()

    def _highlight_active_outline(self) -> None:
        index = active_outline_index(self.outline_items, self.editor.textCursor().blockNumber() + 1)
        self.outline_list.blockSignals(True)
        if index is None:
            self.outline_list.clearSelection()
        else:
            self.outline_list.setCurrentRow(index)
        self.outline_list.blockSignals(False)

    def _jump_to_outline_item(self, item: QListWidgetItem | None) -> None:
        if item is None:
            return
        offset = item.data(_PATH_ROLE)
        if not isinstance(offset, int):
            return
        cursor = self.editor.textCursor()
        cursor.setPosition(min(offset, len(self.editor.toPlainText())))
        self.editor.setTextCursor(cursor)
        self.editor.centerCursor()
        self.editor.setFocus()

    # Images

    def _ensure_current_file_path(self) -> Path | None:
        if self.current_file is not None:
            return self.current_file
        QMessageBox.information(self, "Save first", "Save the document before inserting images.")
        if not self._save():
            return None
        return self.current_file

    def _insert_markdown_image(self, relative_source: str, alt_text: str) -> None:
        alt = alt_text.replace("]", "\\]")
        self.editor.insertPlainText(f"![{alt}]({relative_source})")
        self.editor.setFocus()

    def _insert_image_from_file(self) -> None:
        start_dir = str(self.current_file.parent) if self.current_file else str(Path.home())
        selected, _ = QFileDialog.getOpenFileName(self, "Insert Image", start_dir, _IMAGE_FILTER)
        if not selected:
            return
        document_path = self._ensure_current_file_path()
        if document_path is None:
            return

        source = Path(selected)
        target, relative_source = build_image_asset_path(document_path, normalize_image_extension(source.name))
        try:
            copy_file(source, target)
        except OSError as exc:
            QMessageBox.critical(self, "Insert image failed", f"Could not copy image:\n{source}\n\n{exc}")
            return
        self._insert_markdown_image(relative_source, source.stem or target.name)

    def _paste_image_from_clipboard(self) -> None:
        clipboard = QGuiApplication.clipboard()
        image = clipboard.image() if clipboard is not None else None
        if image is None or image.isNull():
            self.editor.paste()
            return
        document_path = self._ensure_current_file_path()
        if document_path is None:
            return

        data = QByteArray()
        buffer = QBuffer(data)
        buffer.open(QIODevice.OpenModeFlag.WriteOnly)
        saved = image.save(buffer, "PNG")
        buffer.close()
        if not saved:
            self.statusBar().showMessage("Clipboard image could not be encoded", 5000)
            return

        target, relative_source = build_image_asset_path(document_path, "png")
        try:
            write_binary_file(target, bytes(data.data()))
        except OSError as exc:
            QMessageBox.critical(self, "Paste image failed", f"Could not save image:\n{target}\n\n{exc}")
            return
        self._insert_markdown_image(relative_source, target.name)

    # Editor modes and preview

    def _apply_editor_mode(self, mode: str, persist: bool = True) -> None:
        if mode not in EDITOR_MODES:
            mode = "markdown"
        self._editor_mode = mode
        self.editor.setVisible(mode in ("markdown", "split"))
        self.preview_browser.setVisible(mode in ("split", "preview"))
        if mode == "split":
            total = max(400, self.content_splitter.size().width())
            left = int(total * self.settings.split_left_pct / 100)
            self.content_splitter.setSizes([left, total - left])

        button = self.mode_buttons.get(mode)
        if button is not None and not button.isChecked():
            button.setChecked(True)
        self.mode_status_label.setText(mode.capitalize())

        if mode != "markdown":
            self._update_preview()
        self.settings.editor_mode = mode
        if persist:
            self.settings.save()

    def _on_content_splitter_moved(self, _: int, __: int) -> None:
        if self._editor_mode != "split":
            return
        sizes = self.content_splitter.sizes()
        total = sum(sizes)
        if total <= 0:
            return
        self.settings.split_left_pct = max(20, min(80, round(sizes[0] * 100 / total)))

    def _on_editor_changed(self) -> None:
        if self._updating:
            return
        self._outline_timer.start()
        if self._editor_mode != "markdown":
            self._preview_timer.start()

    def _on_cursor_moved(self) -> None:
        self.cursor_status_label.setText(f"Line {self.editor.textCursor().blockNumber() + 1}")
        self._highlight_active_outline()

    def _sync_preview_base_dir(self) -> None:
        base_dir = self.current_file.parent if self.current_file else (Path(self.workspace_root) if self.workspace_root else None)
        if base_dir is not None:
            self.preview_browser.document().setBaseUrl(QUrl.fromLocalFile(str(base_dir) + "/"))

    def _update_preview(self) -> None:
        if self._editor_mode == "markdown":
            return
        scroll = self.preview_browser.verticalScrollBar().value()
        self.preview_browser.setHtml(render_markdown_html(self.editor.toPlainText(), build_preview_css(self._theme_tokens)))
        self.preview_browser.verticalScrollBar().setValue(scroll)

    # Layout and theme

    def _update_file_status_label(self) -> None:
        name = self.current_file.name if self.current_file else "Untitled.md"
        marker = " *" if self.editor.document().isModified() else ""
        self.file_status_label.setText(f"File: {name}{marker}")
        self.setWindowTitle(f"{name}[*] - MarkdownEdit")

    def _on_sidebar_tab_changed(self, index: int) -> None:
        if 0 <= index < len(SIDEBAR_TABS):
            self.settings.sidebar_tab = SIDEBAR_TABS[index]

    def _toggle_theme(self) -> None:
        self._apply_theme("dark" if self.settings.ui_theme == "light" else "light")

    def _apply_theme(self, theme_name: str, persist: bool = True) -> None:
        tokens = get_theme_tokens(theme_name)
        self._theme_tokens = tokens
        self.settings.ui_theme = tokens.name
        self.setStyleSheet(build_app_stylesheet(tokens))
        self._update_preview()
        if persist:
            self.settings.save()

    def _toggle_sidebar(self, visible: bool) -> None:
        self._apply_sidebar_visibility(visible)
        self._update_toggle_icons()

    def _apply_sidebar_visibility(self, visible: bool, persist: bool = True) -> None:
        self.settings.sidebar_visible = visible
        if self.toggle_sidebar_action.isChecked() != visible:
            self.toggle_sidebar_action.blockSignals(True)
            self.toggle_sidebar_action.setChecked(visible)
            self.toggle_sidebar_action.blockSignals(False)
            self._update_toggle_icons()

        if visible:
            self.sidebar_panel.show()
            total = max(760, self.outer_splitter.size().width())
            width = max(self.SIDEBAR_COLLAPSE_WIDTH + 40, self._sidebar_last_width)
            width = min(width, total - 420)
            self.outer_splitter.setSizes([width, total - width])
        else:
            sizes = self.outer_splitter.sizes()
            if len(sizes) > 1 and sizes[0] > self.SIDEBAR_COLLAPSE_WIDTH:
                self._sidebar_last_width = sizes[0]
            self.sidebar_panel.hide()
            self.outer_splitter.setSizes([0, 1])

        if persist:
            self.settings.sidebar_width = int(self._sidebar_last_width)
            self.settings.save()

    def _on_outer_splitter_moved(self, _: int, __: int) -> None:
        if not self.toggle_sidebar_action.isChecked():
            return
        sizes = self.outer_splitter.sizes()
        if len(sizes) < 2:
            return
        sidebar_width = sizes[0]
        if sidebar_width <= self.SIDEBAR_COLLAPSE_WIDTH:
            self._apply_sidebar_visibility(False)
            return
        self._sidebar_last_width = sidebar_width
        self.settings.sidebar_width = int(sidebar_width)

    def _update_toggle_icons(self) -> None:
        if self.toggle_sidebar_action.isChecked():
            self.toggle_sidebar_action.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_ArrowLeft))
        else:
            self.toggle_sidebar_action.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_ArrowRight))

    def _persist_ui_state(self) -> None:
        self.settings.sidebar_visible = self.toggle_sidebar_action.isChecked()
        self.settings.sidebar_width = int(self._sidebar_last_width)
        self.settings.editor_mode = self._editor_mode
        self.settings.last_workspace = self.workspace_root or ""
        self.settings.last_open_file = str(self.current_file) if self.current_file else ""
        self.settings.save()

    def closeEvent(self, event) -> None:  # type: ignore[override]
        if self._ensure_saved_before_navigation():
            self._persist_ui_state()
            event.accept()
            return
        event.ignore()
