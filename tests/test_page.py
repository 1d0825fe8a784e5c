import json

from chat_trigger.interface.page import (
    MARKED_JS,
    PRISM_CORE_JS,
    page_css,
    render_chat_page,
    script_json,
)
from chat_trigger.interface.styles import css_value, theme_css
from chat_trigger.trigger.settings import (
    ChatConfiguration,
    ColorConfig,
    Feature,
    StyleConfig,
    Theme,
)


def _config(features=(), **style) -> ChatConfiguration:
    return ChatConfiguration(features=tuple(features), style=StyleConfig(**style))


def test_page_is_deterministic(config):
    assert render_chat_page(config) == render_chat_page(config)


def test_no_placeholders_left(config):
    html = render_chat_page(config)
    assert html.startswith("<!DOCTYPE html>")
    assert "{{" not in html.split("<script>")[0]
    for name in ("STYLESHEETS", "CSS", "FILE_UPLOAD", "SCRIPTS", "CONFIG", "SCRIPT"):
        assert "{{" + name + "}}" not in html


def test_auto_theme_adds_dark_media_query():
    assert "prefers-color-scheme: dark" in theme_css(StyleConfig(theme=Theme.AUTO))
    assert "prefers-color-scheme: dark" not in theme_css(StyleConfig(theme=Theme.LIGHT))
    assert "#1a1a1a" in theme_css(StyleConfig(theme=Theme.DARK))


def test_custom_colors_override_palette():
    css = theme_css(StyleConfig(theme=Theme.LIGHT, colors=ColorConfig(background="#123456")))
    assert "--bg-color: #123456;" in css
    assert "#f5f5f5" not in css


def test_css_values_cannot_break_out():
    assert css_value("red;} body{display:none") == "red bodydisplay:none"
    css = page_css(_config(width="100%</style><script>alert(1)</script>"))
    assert "</style>" not in css


def test_feature_blocks_follow_features():
    bare = render_chat_page(_config())
    assert MARKED_JS not in bare
    assert PRISM_CORE_JS not in bare
    assert 'id="fileInput"' not in bare
    assert ".message-timestamp" not in bare

    rich = render_chat_page(
        _config(
            [Feature.MARKDOWN, Feature.CODE_HIGHLIGHT, Feature.FILE_UPLOAD, Feature.TIMESTAMPS]
        )
    )
    assert MARKED_JS in rich
    assert PRISM_CORE_JS in rich
    assert 'id="fileInput"' in rich
    assert ".message-timestamp" in rich


def test_file_upload_accept_is_escaped():
    config = ChatConfiguration(features=(Feature.FILE_UPLOAD,), allowed_file_types='pdf,"><b>')
    html = render_chat_page(config)
    assert 'accept="pdf,&quot;&gt;&lt;b&gt;"' in html


def test_compact_mode_and_animations():
    compact = page_css(_config(compact_mode=True, enable_animations=False))
    assert "gap: 8px;" in compact
    assert "@keyframes" not in compact
    assert "@keyframes" in page_css(_config())


def test_client_config_is_script_safe():
    config = ChatConfiguration(initial_message="</script><script>alert(1)</script> {{SCRIPT}}")
    html = render_chat_page(config)
    assert "</script><script>alert(1)" not in html
    assert html.count("const conversation = [];") == 1

    encoded = script_json({"initialMessage": "a<b>&c"})
    assert "<" not in encoded
    assert json.loads(encoded) == {"initialMessage": "a<b>&c"}


def test_allow_file_uploads_shows_control_without_feature():
    config = ChatConfiguration(features=(), allow_file_uploads=True)
    assert 'id="fileInput"' in render_chat_page(config)


def test_markdown_replies_escape_raw_html():
    html = render_chat_page(_config([Feature.MARKDOWN]))
    assert "marked.use({renderer: {html: escapeHtml}});" in html
    assert "javascript|data|vbscript" in html
