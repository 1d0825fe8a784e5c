import pytest

from chat_trigger.errors import AuthRejected, AuthRequired, OriginRejected
from chat_trigger.trigger.access import (
    check_access,
    check_credentials,
    check_origin,
    cors_headers,
    parse_basic_auth,
    parse_origins,
)
from chat_trigger.trigger.credentials import BasicCredentials
from chat_trigger.trigger.models import WebhookRequest
from chat_trigger.trigger.settings import Authentication, ChatConfiguration
from conftest import b64, basic_auth

ALICE = BasicCredentials("alice", "s3cret")


def _request(**headers) -> WebhookRequest:
    return WebhookRequest(method="POST", headers={k.replace("_", "-"): v for k, v in headers.items()})


def test_parse_origins():
    assert parse_origins(" https://a.com, https://b.com ,,") == ["https://a.com", "https://b.com"]
    assert parse_origins("") == []


def test_wildcard_origin_headers():
    headers = cors_headers(ChatConfiguration(allowed_origins="*"), "https://anything.example")
    assert headers["Access-Control-Allow-Origin"] == "*"
    assert headers["Access-Control-Allow-Methods"] == "GET, POST, OPTIONS"
    assert headers["Access-Control-Allow-Headers"] == "Content-Type, Authorization"


def test_listed_origin_is_echoed():
    config = ChatConfiguration(allowed_origins="https://a.com,https://b.com")
    headers = cors_headers(config, "https://b.com")
    assert headers["Access-Control-Allow-Origin"] == "https://b.com"
    assert headers["Vary"] == "Origin"


def test_unlisted_origin_gets_no_allow_origin():
    config = ChatConfiguration(allowed_origins="https://a.com,https://b.com")
    headers = cors_headers(config, "https://c.com")
    assert "Access-Control-Allow-Origin" not in headers


def test_check_origin():
    config = ChatConfiguration(allowed_origins="https://a.com,https://b.com")
    check_origin(config, "https://b.com")
    check_origin(config, None)
    with pytest.raises(OriginRejected):
        check_origin(config, "https://c.com")


def test_parse_basic_auth():
    assert parse_basic_auth(basic_auth("alice", "pa:ss")) == ("alice", "pa:ss")


@pytest.mark.parametrize(
    "header",
    [None, "", "Bearer abc", "Basic", "Basic !!!not-base64!!!", "Basic " + b64(b"no-colon")],
)
def test_parse_basic_auth_rejects(header):
    with pytest.raises(AuthRequired) as exc:
        parse_basic_auth(header)
    assert exc.value.status == 401
    assert exc.value.headers["WWW-Authenticate"].startswith("Basic realm=")


def test_check_credentials():
    check_credentials(basic_auth("alice", "s3cret"), ALICE)
    with pytest.raises(AuthRejected):
        check_credentials(basic_auth("alice", "wrong"), ALICE)
    with pytest.raises(AuthRejected):
        check_credentials(basic_auth("bob", "s3cret"), ALICE)


def test_missing_configured_credentials_rejects():
    with pytest.raises(AuthRejected):
        check_credentials(basic_auth("alice", "s3cret"), None)


def test_access_without_auth_allows():
    decision = check_access(ChatConfiguration(), _request())
    assert decision.allowed
    assert decision.cors_headers["Access-Control-Allow-Origin"] == "*"


def test_access_requires_header():
    config = ChatConfiguration(authentication=Authentication.BASIC_AUTH)
    decision = check_access(config, _request(), ALICE)
    assert not decision.allowed
    response = decision.to_response()
    assert response.status == 401
    assert "WWW-Authenticate" in response.headers


def test_access_wrong_credentials():
    config = ChatConfiguration(authentication=Authentication.BASIC_AUTH)
    decision = check_access(config, _request(Authorization=basic_auth("alice", "nope")), ALICE)
    response = decision.to_response()
    assert response.status == 403
    assert response.body == "Authorization data is wrong!"


def test_access_good_credentials():
    config = ChatConfiguration(authentication=Authentication.BASIC_AUTH)
    decision = check_access(config, _request(Authorization=basic_auth("alice", "s3cret")), ALICE)
    assert decision.allowed


def test_access_origin_allow_list():
    config = ChatConfiguration(allowed_origins="https://a.com,https://b.com")
    assert check_access(config, _request(Origin="https://b.com")).allowed

    decision = check_access(config, _request(Origin="https://c.com"))
    assert not decision.allowed
    assert decision.to_response().status == 403


def test_auth_checked_before_origin():
    config = ChatConfiguration(
        authentication=Authentication.BASIC_AUTH, allowed_origins="https://a.com"
    )
    decision = check_access(config, _request(Origin="https://c.com"), ALICE)
    assert decision.to_response().status == 401


def test_allowed_decision_has_no_error_response():
    decision = check_access(ChatConfiguration(), _request())
    with pytest.raises(ValueError):
        decision.to_response()
