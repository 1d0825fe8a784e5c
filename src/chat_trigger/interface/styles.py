"""CSS fragments for the hosted chat page, each a pure function of the style config."""

import re

from ..trigger.settings import (
    AnimationSpeed,
    ColorConfig,
    FontFamily,
    FontSize,
    LineHeight,
    StyleConfig,
    Theme,
)

FONT_SIZES = {
    FontSize.SMALL: "12px",
    FontSize.MEDIUM: "14px",
    FontSize.LARGE: "16px",
    FontSize.EXTRA_LARGE: "18px",
}

LINE_HEIGHTS = {
    LineHeight.COMPACT: "1.2",
    LineHeight.NORMAL: "1.5",
    LineHeight.RELAXED: "1.6",
    LineHeight.LOOSE: "1.8",
}

FONT_FAMILIES = {
    FontFamily.SYSTEM: '-apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif',
    FontFamily.SANS_SERIF: "Arial, Helvetica, sans-serif",
    FontFamily.SERIF: 'Georgia, "Times New Roman", serif',
    FontFamily.MONOSPACE: '"Courier New", Consolas, monospace',
}

ANIMATION_DURATIONS = {
    AnimationSpeed.FAST: "0.15s",
    AnimationSpeed.NORMAL: "0.3s",
    AnimationSpeed.SLOW: "0.5s",
}

DEFAULT_PRIMARY = "#667eea"
DEFAULT_GRADIENT_END = "#764ba2"

LIGHT_PALETTE = {
    "bg-color": "#f5f5f5",
    "container-bg": "white",
    "text-color": "#333",
    "user-msg-bg": "#e3f2fd",
    "assistant-msg-bg": "#f3e5f5",
    "border-color": "#e0e0e0",
    "code-bg": "#f0f0f0",
    "pre-bg": "#f8f8f8",
}

DARK_PALETTE = {
    "bg-color": "#1a1a1a",
    "container-bg": "#2d2d2d",
    "text-color": "#e0e0e0",
    "user-msg-bg": "#4a5568",
    "assistant-msg-bg": "#553c69",
    "border-color": "#444",
    "code-bg": "#2d2d2d",
    "pre-bg": "#1e1e1e",
}

_UNSAFE = re.compile(r"[<>{};]")


def css_value(value: str) -> str:
    """Strip characters that could close the declaration or the style block."""
    return _UNSAFE.sub("", value).strip()


def _custom_colors(colors: ColorConfig) -> dict[str, str]:
    custom = {
        "bg-color": colors.background,
        "container-bg": colors.container_background,
        "text-color": colors.text,
        "user-msg-bg": colors.user_message,
        "assistant-msg-bg": colors.assistant_message,
    }
    return {name: css_value(value) for name, value in custom.items() if css_value(value)}


def _declarations(variables: dict[str, str], indent: str = "\t\t\t") -> str:
    return "\n".join(f"{indent}--{name}: {value};" for name, value in variables.items())


def theme_css(style: StyleConfig) -> str:
    """Root CSS variables; ``auto`` adds a dark block behind a media query."""
    custom = _custom_colors(style.colors)
    primary = css_value(style.colors.primary) or DEFAULT_PRIMARY
    gradient_end = css_value(style.colors.primary) or DEFAULT_GRADIENT_END

    base = DARK_PALETTE if style.theme == Theme.DARK else LIGHT_PALETTE
    variables = {
        "primary-color": primary,
        "primary-gradient": f"linear-gradient(135deg, {primary} 0%, {gradient_end} 100%)",
        **base,
        **custom,
        "font-size-base": FONT_SIZES[style.font_size],
        "line-height": LINE_HEIGHTS[style.line_height],
        "font-family": FONT_FAMILIES[style.font_family],
    }
    css = f"\t\t:root {{\n{_declarations(variables)}\n\t\t}}\n"

    if style.theme == Theme.AUTO:
        dark = {name: value for name, value in DARK_PALETTE.items() if name not in custom}
        declarations = _declarations(dark, indent="\t\t\t\t")
        css += (
            "\t\t@media (prefers-color-scheme: dark) {\n"
            f"\t\t\t:root {{\n{declarations}\n\t\t\t}}\n"
            "\t\t}\n"
        )
    return css


def container_css(style: StyleConfig) -> str:
    dimensions = {
        "width": style.width,
        "min-width": style.min_width,
        "max-width": style.max_width,
        "height": style.height,
        "max-height": style.max_height,
        "border-radius": style.border_radius,
        "box-shadow": style.box_shadow,
        "border": style.border_style,
        "padding": style.padding,
        "margin": style.margin,
    }
    rules = "\n".join(
        f"\t\t\t{prop}: {css_value(value)};" for prop, value in dimensions.items() if css_value(value)
    )
    return f"""
		.chat-container {{
			background: var(--container-bg);
{rules}
			display: flex;
			flex-direction: column;
			overflow: hidden;
			color: var(--text-color);
		}}
"""


BODY_CSS = """
		body {
			font-family: var(--font-family);
			margin: 0;
			padding: 20px;
			background: var(--bg-color);
			height: 100vh;
			box-sizing: border-box;
			display: flex;
			justify-content: center;
			align-items: center;
			font-size: var(--font-size-base);
			line-height: var(--line-height);
		}
"""


def messages_css(compact: bool) -> str:
    spacing = "8px" if compact else "16px"
    padding = "8px 12px" if compact else "12px 16px"
    return f"""
		.messages {{
			flex: 1;
			overflow-y: auto;
			padding: 20px;
			display: flex;
			flex-direction: column;
			gap: {spacing};
		}}

		.message {{
			padding: {padding};
			border-radius: 12px;
			word-wrap: break-word;
			position: relative;
		}}

		.message.user {{
			background: var(--user-msg-bg);
			align-self: flex-end;
			max-width: 80%;
		}}

		.message.assistant {{
			background: var(--assistant-msg-bg);
			align-self: flex-start;
			max-width: 85%;
		}}

		.message.system {{
			background: var(--border-color);
			align-self: center;
			font-style: italic;
			opacity: 0.8;
			max-width: 90%;
		}}
"""


INPUT_CSS = """
		.input-container {
			display: flex;
			padding: 20px;
			gap: 12px;
			border-top: 1px solid var(--border-color);
			align-items: flex-end;
		}

		.message-input {
			flex: 1;
			padding: 12px 16px;
			border: 2px solid var(--border-color);
			border-radius: 25px;
			font-size: var(--font-size-base);
			background: var(--container-bg);
			color: var(--text-color);
		}

		.message-input:focus {
			outline: none;
			border-color: var(--primary-color);
		}

		.send-button {
			background: var(--primary-gradient);
			color: white;
			border: none;
			border-radius: 50%;
			width: 48px;
			height: 48px;
			cursor: pointer;
			font-weight: 600;
		}

		.send-button:disabled {
			opacity: 0.5;
			cursor: not-allowed;
		}
"""

FILE_UPLOAD_CSS = """
		.file-upload-container {
			position: relative;
			display: flex;
			align-items: center;
		}

		.file-upload-input {
			display: none;
		}

		.file-upload-button {
			background: none;
			border: none;
			cursor: pointer;
			padding: 8px;
			border-radius: 50%;
			color: var(--text-color);
		}

		.file-upload-button:hover {
			background-color: var(--border-color);
		}

		.file-indicator {
			position: absolute;
			top: -8px;
			right: -8px;
			background: var(--primary-color);
			color: white;
			border-radius: 50%;
			width: 20px;
			height: 20px;
			display: none;
			align-items: center;
			justify-content: center;
			font-size: 12px;
			font-weight: bold;
		}

		.file-indicator.show {
			display: flex;
		}
"""

ACTIONS_CSS = """
		.message-actions {
			position: absolute;
			top: 8px;
			right: 8px;
			display: none;
			gap: 4px;
		}

		.message:hover .message-actions {
			display: flex;
		}

		.action-btn {
			background: rgba(0, 0, 0, 0.1);
			border: none;
			border-radius: 4px;
			padding: 4px 8px;
			cursor: pointer;
			font-size: 12px;
			color: var(--text-color);
		}

		.action-btn:hover {
			background: rgba(0, 0, 0, 0.2);
		}
"""

MARKDOWN_CSS = """
		.markdown h1, .markdown h2, .markdown h3 {
			margin: 0.5em 0;
		}

		.markdown p {
			margin: 0.5em 0;
		}

		.markdown ul, .markdown ol {
			padding-left: 1.5em;
		}

		.markdown blockquote {
			border-left: 4px solid var(--primary-color);
			padding-left: 1em;
			margin: 1em 0;
			opacity: 0.8;
		}
"""

CODE_HIGHLIGHT_CSS = """
		.markdown pre {
			background: var(--pre-bg);
			padding: 1em;
			border-radius: 8px;
			overflow-x: auto;
			margin: 1em 0;
		}

		.markdown code {
			background: var(--code-bg);
			padding: 2px 4px;
			border-radius: 4px;
			font-family: 'Courier New', monospace;
		}

		.markdown pre code {
			background: none;
			padding: 0;
		}
"""

TIMESTAMPS_CSS = """
		.message-timestamp {
			font-size: 11px;
			opacity: 0.6;
			margin-top: 4px;
		}
"""

RESPONSIVE_CSS = """
		@media (max-width: 768px) {
			body {
				padding: 0;
			}

			.chat-container {
				width: 100%;
				height: 100vh;
				border-radius: 0;
				margin: 0;
			}

			.messages, .input-container {
				padding: 16px;
			}
		}
"""


def animation_css(speed: AnimationSpeed) -> str:
    duration = ANIMATION_DURATIONS[speed]
    return f"""
		.message {{
			animation: fadeIn {duration} ease-out;
		}}

		.send-button:hover, .action-btn:hover, .file-upload-button:hover {{
			transform: scale(1.05);
			transition: transform {duration} ease;
		}}

		@keyframes fadeIn {{
			from {{ opacity: 0; transform: translateY(10px); }}
			to {{ opacity: 1; transform: translateY(0); }}
		}}
"""
