"""Trigger configuration: the immutable per-request snapshot and its resolver.

The host engine hands us a raw parameter mapping. Two layouts exist in the
wild, tagged by ``version``:

* ``2`` (default) is the full trigger layout with nested ``options``,
  ``uiEnhancements`` and ``threadOptions`` collections.
* ``1`` is the older flat layout (``webhookPath``, ``displayMode``,
  ``features``, ``uiSettings``) used by the simple embedded widget.

Both are resolved once per request into a frozen :class:`ChatConfiguration`.
Bad values never fail the request; they fall back to the documented default
and are logged.
"""

import logging
from enum import StrEnum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict

from ..config import (
    DEFAULT_FEATURES,
    DEFAULT_INITIAL_MESSAGE,
    DEFAULT_MESSAGE_SOURCE,
    DEFAULT_WEBHOOK_PATH,
)

logger = logging.getLogger(__name__)


class AccessMode(StrEnum):
    WEBHOOK_ONLY = "webhookOnly"
    HOSTED_CHAT = "hostedChat"
    EMBEDDED = "embedded"


class Authentication(StrEnum):
    NONE = "none"
    BASIC_AUTH = "basicAuth"


class OutputFormat(StrEnum):
    AI_AGENT = "aiAgent"
    DETAILED = "detailed"


class DisplayMode(StrEnum):
    SIMPLE = "simple"
    RICH = "rich"


class AttachmentPolicy(StrEnum):
    SKIP = "skip"
    STRICT = "strict"


class Feature(StrEnum):
    MARKDOWN = "markdown"
    CODE_HIGHLIGHT = "codeHighlight"
    COPY = "copy"
    TIMESTAMPS = "timestamps"
    REGENERATE = "regenerate"
    FILE_UPLOAD = "fileUpload"
    VOICE_INPUT = "voiceInput"
    EXPORT_CHAT = "exportChat"
    PIN_MESSAGES = "pinMessages"
    SEARCH = "search"


class Theme(StrEnum):
    LIGHT = "light"
    DARK = "dark"
    AUTO = "auto"


class FontFamily(StrEnum):
    SYSTEM = "system"
    SANS_SERIF = "sans-serif"
    SERIF = "serif"
    MONOSPACE = "monospace"


class FontSize(StrEnum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    EXTRA_LARGE = "extra-large"


class LineHeight(StrEnum):
    COMPACT = "compact"
    NORMAL = "normal"
    RELAXED = "relaxed"
    LOOSE = "loose"


class AnimationSpeed(StrEnum):
    FAST = "fast"
    NORMAL = "normal"
    SLOW = "slow"


# Spellings accepted from older node versions
_ALIASES: dict[type[StrEnum], dict[str, str]] = {
    AccessMode: {"webhook": "webhookOnly", "hosted": "hostedChat"},
    Authentication: {"basic": "basicAuth"},
    Feature: {"files": "fileUpload", "export": "exportChat", "pin": "pinMessages", "voice": "voiceInput"},
}


class ColorConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary: str = ""
    background: str = ""
    container_background: str = ""
    user_message: str = ""
    assistant_message: str = ""
    text: str = ""


class StyleConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    theme: Theme = Theme.AUTO
    width: str = "100%"
    min_width: str = ""
    max_width: str = ""
    height: str = ""
    max_height: str = "90vh"
    compact_mode: bool = False
    border_radius: str = "10px"
    box_shadow: str = "0 20px 60px rgba(0,0,0,0.3)"
    border_style: str = "none"
    padding: str = "0"
    margin: str = "20px auto"
    font_family: FontFamily = FontFamily.SYSTEM
    font_size: FontSize = FontSize.MEDIUM
    line_height: LineHeight = LineHeight.NORMAL
    enable_animations: bool = True
    animation_speed: AnimationSpeed = AnimationSpeed.NORMAL
    colors: ColorConfig = ColorConfig()


class ChatConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: AccessMode = AccessMode.HOSTED_CHAT
    webhook_path: str = DEFAULT_WEBHOOK_PATH
    public_available: bool = False
    authentication: Authentication = Authentication.NONE
    allowed_origins: str = "*"
    initial_message: str = DEFAULT_INITIAL_MESSAGE
    output_format: OutputFormat = OutputFormat.AI_AGENT
    display_mode: DisplayMode = DisplayMode.RICH
    features: tuple[Feature, ...] = tuple(Feature(f) for f in DEFAULT_FEATURES)
    allow_file_uploads: bool = False
    allowed_file_types: str = "*"
    max_file_size_mb: float = 0
    attachment_policy: AttachmentPolicy = AttachmentPolicy.SKIP
    message_source: str = DEFAULT_MESSAGE_SOURCE
    system_prompt: str = ""
    max_messages: int = 0
    style: StyleConfig = StyleConfig()

    def has(self, feature: Feature) -> bool:
        return feature in self.features

    def active_features(self, requested: Any = None) -> tuple[Feature, ...]:
        """Configured features, narrowed to ``requested`` when the caller sent a list."""
        if not isinstance(requested, list):
            return self.features
        wanted = set(_features(requested))
        return tuple(f for f in self.features if f in wanted)


def _choice(value: Any, enum_cls: type[StrEnum], default: StrEnum, field: str) -> Any:
    if value is None or value == "":
        return default
    if isinstance(value, str):
        value = _ALIASES.get(enum_cls, {}).get(value, value)
        try:
            return enum_cls(value)
        except ValueError:
            pass
    logger.warning("Invalid value %r for %s, using %s", value, field, default.value)
    return default


def _features(values: Iterable[Any]) -> tuple[Feature, ...]:
    resolved: list[Feature] = []
    for value in values:
        if not isinstance(value, str):
            continue
        value = _ALIASES[Feature].get(value, value)
        try:
            feature = Feature(value)
        except ValueError:
            logger.warning("Ignoring unknown feature %r", value)
            continue
        if feature not in resolved:
            resolved.append(feature)
    return tuple(resolved)


def _text(value: Any, default: str) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value}px"
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _path(value: Any, default: str, field: str) -> str:
    path = _text(value, default).strip("/")
    if not path:
        return default
    # Routes take a single path segment
    if "/" in path:
        logger.warning("Invalid value %r for %s, using %s", value, field, default)
        return default
    return path


def _flag(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    return default


def _number(value: Any, default: float, field: str) -> float:
    if value is None or value == "":
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid number %r for %s, using %s", value, field, default)
        return default
    return max(number, 0)


def _section(parameters: dict, key: str) -> dict:
    value = parameters.get(key)
    return value if isinstance(value, dict) else {}


def _style(ui: dict) -> StyleConfig:
    colors = _section(ui, "customColors")
    default = StyleConfig()
    return StyleConfig(
        theme=_choice(ui.get("theme"), Theme, default.theme, "theme"),
        width=_text(ui.get("width"), default.width),
        min_width=_text(ui.get("minWidth"), default.min_width),
        max_width=_text(ui.get("maxWidth"), default.max_width),
        height=_text(ui.get("height"), default.height),
        max_height=_text(ui.get("maxHeight"), default.max_height),
        compact_mode=_flag(ui.get("compactMode"), default.compact_mode),
        border_radius=_text(ui.get("borderRadius"), default.border_radius),
        box_shadow=_text(ui.get("boxShadow"), default.box_shadow),
        border_style=_text(ui.get("borderStyle"), default.border_style),
        padding=_text(ui.get("padding"), default.padding),
        margin=_text(ui.get("margin"), default.margin),
        font_family=_choice(ui.get("fontFamily"), FontFamily, default.font_family, "fontFamily"),
        font_size=_choice(ui.get("fontSize"), FontSize, default.font_size, "fontSize"),
        line_height=_choice(ui.get("lineHeight"), LineHeight, default.line_height, "lineHeight"),
        enable_animations=_flag(ui.get("enableAnimations"), default.enable_animations),
        animation_speed=_choice(
            ui.get("animationSpeed"), AnimationSpeed, default.animation_speed, "animationSpeed"
        ),
        colors=ColorConfig(
            primary=_text(colors.get("primaryColor"), ""),
            background=_text(colors.get("backgroundColor"), ""),
            container_background=_text(colors.get("containerBackground"), ""),
            user_message=_text(colors.get("userMessageColor"), ""),
            assistant_message=_text(colors.get("assistantMessageColor"), ""),
            text=_text(colors.get("textColor"), ""),
        ),
    )


def _from_trigger_layout(parameters: dict) -> ChatConfiguration:
    default = ChatConfiguration()
    options = _section(parameters, "options")
    ui = _section(parameters, "uiEnhancements")
    thread = _section(parameters, "threadOptions")
    features = ui.get("features")
    return ChatConfiguration(
        mode=_choice(parameters.get("mode"), AccessMode, default.mode, "mode"),
        webhook_path=_path(parameters.get("path"), default.webhook_path, "path"),
        public_available=_flag(parameters.get("public"), default.public_available),
        authentication=_choice(
            parameters.get("authentication"), Authentication, default.authentication, "authentication"
        ),
        allowed_origins=_text(options.get("allowedOrigins"), default.allowed_origins),
        initial_message=_text(parameters.get("initialMessage"), default.initial_message),
        output_format=_choice(ui.get("outputFormat"), OutputFormat, default.output_format, "outputFormat"),
        display_mode=_choice(ui.get("displayMode"), DisplayMode, default.display_mode, "displayMode"),
        features=_features(features) if isinstance(features, list) else default.features,
        allow_file_uploads=_flag(options.get("allowFileUploads"), default.allow_file_uploads),
        allowed_file_types=_text(options.get("allowedFilesMimeTypes"), default.allowed_file_types),
        max_file_size_mb=_number(options.get("maxFileSize"), default.max_file_size_mb, "maxFileSize"),
        attachment_policy=_choice(
            options.get("attachmentPolicy"), AttachmentPolicy, default.attachment_policy, "attachmentPolicy"
        ),
        message_source=_text(options.get("messageSource"), default.message_source),
        system_prompt=_text(thread.get("systemPrompt"), default.system_prompt),
        max_messages=int(_number(thread.get("maxMessages"), default.max_messages, "maxMessages")),
        style=_style(ui),
    )


def _from_simple_layout(parameters: dict) -> ChatConfiguration:
    default = ChatConfiguration()
    ui = _section(parameters, "uiSettings")
    features = parameters.get("features")
    return ChatConfiguration(
        mode=AccessMode.EMBEDDED,
        webhook_path=_path(parameters.get("webhookPath"), default.webhook_path, "webhookPath"),
        display_mode=_choice(parameters.get("displayMode"), DisplayMode, default.display_mode, "displayMode"),
        features=_features(features) if isinstance(features, list) else default.features,
        output_format=OutputFormat.DETAILED,
        style=_style(ui),
    )


_LAYOUTS = {
    1: _from_simple_layout,
    2: _from_trigger_layout,
}


def resolve_configuration(parameters: dict | None) -> ChatConfiguration:
    """Build the configuration snapshot for one request from the raw parameter mapping."""
    parameters = parameters if isinstance(parameters, dict) else {}
    version = parameters.get("version", 2)
    layout = _LAYOUTS.get(version) if isinstance(version, int) else None
    if layout is None:
        logger.warning("Unknown parameter layout version %r, using version 2", version)
        layout = _from_trigger_layout
    return layout(parameters)
