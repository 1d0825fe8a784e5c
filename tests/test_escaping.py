from chat_trigger.output.escaping import escape_braces


def test_escape_single_string():
    assert escape_braces("a{b}c") == "a{{b}}c"


def test_escape_is_not_idempotent():
    once = escape_braces("{x}")
    assert once == "{{x}}"
    assert escape_braces(once) == "{{{{x}}}}"


def test_escape_nested_containers():
    value = {
        "text": "{{ $json.x }}",
        "items": ["{", {"deep": "}"}],
        "count": 3,
        "flag": True,
        "missing": None,
    }
    escaped = escape_braces(value)
    assert escaped["text"] == "{{{{ $json.x }}}}"
    assert escaped["items"] == ["{{", {"deep": "}}"}]
    assert escaped["count"] == 3
    assert escaped["flag"] is True
    assert escaped["missing"] is None


def test_escape_leaves_keys_alone():
    assert escape_braces({"{k}": "v"}) == {"{k}": "v"}


def test_escape_string_without_braces_unchanged():
    assert escape_braces("plain text") == "plain text"
