from markdownedit.ui.theme import DARK_TOKENS, LIGHT_TOKENS, build_app_stylesheet, build_preview_css, get_theme_tokens


def test_unknown_theme_falls_back_to_light() -> None:
    assert get_theme_tokens("dark") is DARK_TOKENS
    assert get_theme_tokens("solarized") is LIGHT_TOKENS


def test_stylesheet_covers_sidebar_tree_and_editor() -> None:
    sheet = build_app_stylesheet(DARK_TOKENS)

    assert "QFrame#sideBar" in sheet
    assert "QTreeWidget::item:selected" in sheet
    assert f"background: {DARK_TOKENS.paper}" in sheet
    assert "{" in sheet and "{{" not in sheet


def test_preview_css_uses_theme_colors() -> None:
    css = build_preview_css(LIGHT_TOKENS)

    assert f"color: {LIGHT_TOKENS.ink}" in css
    assert f"a {{ color: {LIGHT_TOKENS.link}; }}" in css
