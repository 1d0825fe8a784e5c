import re

from chat_trigger.conversation.annotator import annotate
from chat_trigger.conversation.assembler import assemble, extract_messages, extract_user_message
from chat_trigger.conversation.identity import generate_session_id, generate_thread_id
from chat_trigger.conversation.models import Message, Role
from chat_trigger.conversation.sanitize import sanitize_message
from chat_trigger.trigger.settings import ChatConfiguration, Feature


def test_single_new_message(config):
    ctx = assemble({"message": "hello", "messages": []}, config)
    assert len(ctx.messages) == 1
    assert ctx.messages[0].role == Role.USER
    assert ctx.messages[0].content == "hello"
    assert ctx.user_message == "hello"


def test_message_alias_order():
    assert extract_user_message({"text": "t", "content": "c", "chatInput": "ci"}) == "t"
    assert extract_user_message({"content": "c", "chatInput": "ci"}) == "c"
    assert extract_user_message({"chatInput": "ci"}) == "ci"
    assert extract_user_message({"message": "", "text": "fallback"}) == "fallback"
    assert extract_user_message({"message": "m", "text": "t"}) == "m"


def test_message_from_string_bodies():
    assert extract_user_message('{"message": "json string"}') == "json string"
    assert extract_user_message("  just text  ") == "just text"
    assert extract_user_message(None) == ""
    assert extract_user_message({"message": 123}) == ""


def test_sanitize_removes_dangerous_patterns():
    dirty = '<script>alert(1)</script>hi <a href="javascript:x()" onclick="y()">x</a>'
    clean = sanitize_message(dirty)
    assert "<script" not in clean
    assert "javascript:" not in clean
    assert "onclick=" not in clean
    assert clean.startswith("hi")


def test_sanitize_removes_multiline_blocks(config):
    assert sanitize_message("hi <script>\nalert(1)\n</script> there") == "hi  there"
    assert sanitize_message("a<iframe\nsrc=x>\n</iframe>b") == "ab"

    ctx = assemble(
        {
            "message": "x<SCRIPT type='a'>\nsteal()</SCRIPT>",
            "messages": [{"content": "<script>\nold()\n</script>kept"}],
        },
        config,
    )
    assert [m.content for m in ctx.messages] == ["kept", "x"]


def test_sanitize_iframe_and_non_strings():
    assert sanitize_message("<iframe src='x'></iframe>ok") == "ok"
    assert sanitize_message(None) == ""
    assert sanitize_message(["x"]) == ""


def test_caller_identifiers_win(config):
    ctx = assemble({"message": "hi", "session_id": "s-1", "threadId": "t-1"}, config)
    assert ctx.session_id == "s-1"
    assert ctx.thread_id == "t-1"
    assert ctx.messages[0].metadata["session_id"] == "s-1"
    assert ctx.messages[0].metadata["thread_id"] == "t-1"
    assert ctx.messages[0].metadata["source"] == "chat_ui"


def test_generated_identifiers(config):
    ctx = assemble({"message": "hi"}, config)
    assert re.fullmatch(r"session_\d+_[0-9a-f]{9}", ctx.session_id)
    assert re.fullmatch(r"thread_\d+_[0-9a-f]{9}", ctx.thread_id)
    assert generate_session_id() != generate_session_id()
    assert generate_thread_id().startswith("thread_")


def test_prior_messages_normalized_and_ordered(config):
    body = {
        "message": "third",
        "messages": [
            {"role": "assistant", "content": "first", "timestamp": "2024-01-01T00:00:00Z"},
            {"message": "second", "metadata": {"k": "v"}},
            "garbage",
            {"role": "robot", "content": "fourth-ish"},
        ],
    }
    ctx = assemble(body, config)
    assert [m.content for m in ctx.messages] == ["first", "second", "fourth-ish", "third"]
    assert ctx.messages[0].role == Role.ASSISTANT
    assert ctx.messages[0].timestamp == "2024-01-01T00:00:00Z"
    assert ctx.messages[1].role == Role.USER
    assert ctx.messages[1].metadata["k"] == "v"
    assert ctx.messages[2].role == Role.USER


def test_prior_messages_get_timestamps():
    messages = extract_messages({"messages": [{"content": "x"}]})
    assert messages[0].timestamp


def test_empty_message_not_appended(config):
    ctx = assemble({"messages": [{"role": "user", "content": "old"}]}, config)
    assert len(ctx.messages) == 1
    assert ctx.user_message == ""


def test_malformed_bodies_never_raise(config):
    for body in (None, 42, [], "", "{not json", {"messages": "nope", "session_id": {"x": 1}}):
        ctx = assemble(body, config)
        assert ctx.session_id.startswith("session_")


def test_timestamp_only_with_feature():
    plain = ChatConfiguration(features=(Feature.COPY,))
    ctx = assemble({"message": "hi"}, plain)
    assert ctx.messages[0].timestamp is None
    assert "timestamp" not in ctx.messages[0].to_output()

    stamped = ChatConfiguration(features=(Feature.TIMESTAMPS,))
    ctx = assemble({"message": "hi"}, stamped)
    assert ctx.messages[0].timestamp


def test_body_features_narrow_configuration(config):
    ctx = assemble({"message": "hi", "features": ["timestamps", "copy", "regenerate"]}, config)
    message = ctx.messages[0]
    assert message.timestamp
    assert message.actions == ["copy"]
    assert "renderMarkdown" not in message.metadata


def test_annotate_flags_and_actions():
    messages = [
        Message(role=Role.USER, content="q"),
        Message(role=Role.ASSISTANT, content="a"),
    ]
    features = [Feature.MARKDOWN, Feature.CODE_HIGHLIGHT, Feature.COPY, Feature.REGENERATE, Feature.PIN_MESSAGES]
    user, assistant = annotate(messages, features)

    assert user.metadata == {"renderMarkdown": True, "highlightCode": True}
    assert user.actions == ["copy", "pin"]
    assert assistant.actions == ["copy", "pin", "regenerate"]
    assert messages[0].actions is None


def test_annotate_does_not_duplicate_actions():
    message = Message(role=Role.USER, content="q", actions=["copy"])
    (annotated,) = annotate([message], [Feature.COPY])
    assert annotated.actions == ["copy"]


def test_system_prompt_and_history_limit():
    config = ChatConfiguration(system_prompt="Be brief.", max_messages=3, features=())
    body = {
        "message": "newest",
        "messages": [{"content": f"old {i}"} for i in range(5)],
    }
    ctx = assemble(body, config)
    assert ctx.messages[0].role == Role.SYSTEM
    assert ctx.messages[0].content == "Be brief."
    assert [m.content for m in ctx.messages[1:]] == ["old 4", "newest"]


def test_system_prompt_not_duplicated():
    config = ChatConfiguration(system_prompt="Be brief.", features=())
    body = {"message": "hi", "messages": [{"role": "system", "content": "Existing"}]}
    ctx = assemble(body, config)
    assert [m.content for m in ctx.messages if m.role == Role.SYSTEM] == ["Existing"]
