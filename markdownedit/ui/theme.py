from __future__ import annotations

from dataclasses import dataclass

UI_FONT = '"Inter", "Segoe UI", "Noto Sans", sans-serif'
MONO_FONT = '"JetBrains Mono", "Cascadia Mono", "DejaVu Sans Mono", monospace'


@dataclass(frozen=True, slots=True)
class ThemeTokens:
    name: str
    window: str
    toolbar: str
    sidebar: str
    paper: str
    field: str
    rule: str
    rule_strong: str
    ink: str
    ink_soft: str
    link: str
    highlight: str
    highlight_edge: str
    row_hover: str
    tab_idle: str
    status: str
    status_ink: str
    code_block: str


DARK_TOKENS = ThemeTokens(
    name="dark",
    window="#17191c",
    toolbar="#1d2024",
    sidebar="#1b1d21",
    paper="#202328",
    field="#24282d",
    rule="#33373d",
    rule_strong="#4a5058",
    ink="#e3e1dc",
    ink_soft="#9a9890",
    link="#7fb4e8",
    highlight="#2f4a63",
    highlight_edge="#5a88b3",
    row_hover="#272b31",
    tab_idle="#1f2226",
    status="#1d2024",
    status_ink="#9a9890",
    code_block="#2a2e34",
)

LIGHT_TOKENS = ThemeTokens(
    name="light",
    window="#f4f2ee",
    toolbar="#faf9f6",
    sidebar="#efece6",
    paper="#fdfcfa",
    field="#fdfcfa",
    rule="#dcd7ce",
    rule_strong="#bdb6a9",
    ink="#2b2a27",
    ink_soft="#76726a",
    link="#2f6ca3",
    highlight="#d6e4f2",
    highlight_edge="#2f6ca3",
    row_hover="#e6e2da",
    tab_idle="#e7e3dc",
    status="#faf9f6",
    status_ink="#76726a",
    code_block="#f0ede7",
)


def get_theme_tokens(theme_name: str) -> ThemeTokens:
    if theme_name == "dark":
        return DARK_TOKENS
    return LIGHT_TOKENS


def _chrome_rules(t: ThemeTokens) -> str:
    return f"""
    QWidget {{ color: {t.ink}; background: {t.window}; font-family: {UI_FONT}; font-size: 13px; }}
    QToolBar#titleToolbar {{ background: {t.toolbar}; border: none; border-bottom: 1px solid {t.rule}; padding: 3px 6px; spacing: 2px; }}
    QToolBar#titleToolbar QToolButton {{ background: transparent; border: 1px solid transparent; border-radius: 4px; padding: 3px 9px; }}
    QToolBar#titleToolbar QToolButton:hover {{ background: {t.row_hover}; }}
    QToolBar#titleToolbar QToolButton:checked {{ background: {t.highlight}; border-color: {t.highlight_edge}; }}
    QStatusBar {{ background: {t.status}; color: {t.status_ink}; border-top: 1px solid {t.rule}; }}
    QStatusBar QLabel {{ background: transparent; color: {t.status_ink}; padding: 0 8px; }}
    QSplitter::handle {{ background: {t.rule}; }}
    QSplitter::handle:hover {{ background: {t.highlight_edge}; }}
    """


def _sidebar_rules(t: ThemeTokens) -> str:
    return f"""
    QFrame#sideBar {{ background: {t.sidebar}; border-right: 1px solid {t.rule}; }}
    QFrame#sideBar QLabel#muted {{ background: transparent; color: {t.ink_soft}; padding: 6px 8px 2px; }}
    QTabWidget::pane {{ border: none; background: {t.sidebar}; }}
    QTabBar::tab {{ background: {t.tab_idle}; color: {t.ink_soft}; padding: 4px 12px; border-bottom: 2px solid transparent; }}
    QTabBar::tab:selected {{ background: {t.sidebar}; color: {t.ink}; border-bottom: 2px solid {t.highlight_edge}; }}
    QTreeWidget, QListWidget {{ background: {t.sidebar}; border: none; outline: none; }}
    QTreeWidget::item, QListWidget::item {{ padding: 2px 4px; border-radius: 3px; }}
    QTreeWidget::item:hover, QListWidget::item:hover {{ background: {t.row_hover}; }}
    QTreeWidget::item:selected, QListWidget::item:selected {{ background: {t.highlight}; color: {t.ink}; }}
    """


def _editor_rules(t: ThemeTokens) -> str:
    return f"""
    QFrame#editorSurface {{ background: {t.paper}; }}
    QPlainTextEdit, QTextBrowser, QLineEdit {{ background: {t.field}; border: 1px solid {t.rule}; border-radius: 4px; selection-background-color: {t.highlight}; selection-color: {t.ink}; }}
    QPlainTextEdit {{ font-family: {MONO_FONT}; font-size: 14px; padding: 10px 14px; }}
    QPlainTextEdit:focus, QLineEdit:focus {{ border-color: {t.highlight_edge}; }}
    """


def build_app_stylesheet(tokens: ThemeTokens) -> str:
    return _chrome_rules(tokens) + _sidebar_rules(tokens) + _editor_rules(tokens)


def build_preview_css(tokens: ThemeTokens) -> str:
    # QTextBrowser understands a subset of CSS 2.1 only.
    t = tokens
    return f"""
    body {{ font-family: {UI_FONT}; font-size: 15px; color: {t.ink}; background: {t.paper}; margin: 16px 22px; }}
    h1, h2, h3, h4, h5, h6 {{ color: {t.ink}; margin: 16px 0 6px; }}
    h1 {{ font-size: 25px; border-bottom: 1px solid {t.rule}; }}
    h2 {{ font-size: 20px; }}
    h3 {{ font-size: 17px; }}
    p, li {{ line-height: 150%; }}
    pre {{ background: {t.code_block}; border: 1px solid {t.rule}; padding: 8px 10px; font-family: {MONO_FONT}; }}
    code {{ background: {t.code_block}; font-family: {MONO_FONT}; }}
    blockquote {{ color: {t.ink_soft}; border-left: 3px solid {t.rule_strong}; margin: 8px 0; padding-left: 12px; }}
    table {{ border-collapse: collapse; margin: 8px 0; }}
    th {{ background: {t.code_block}; }}
    th, td {{ border: 1px solid {t.rule}; padding: 4px 8px; }}
    a {{ color: {t.link}; }}
    hr {{ border: none; border-top: 1px solid {t.rule}; }}
    """
