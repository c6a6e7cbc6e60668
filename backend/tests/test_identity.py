# tests/test_identity.py
import pytest
from starlette.requests import Request

from clinic_queue.core.exceptions import InvalidCredentials, Unauthenticated
from clinic_queue.core.middleware import IdentityResolver

COOKIE = "access_token"


def make_request(headers=None, cookies=None):
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    if cookies:
        raw.append((b"cookie", "; ".join(f"{k}={v}" for k, v in cookies.items()).encode()))
    return Request(
        {"type": "http", "method": "GET", "path": "/patients", "query_string": b"", "headers": raw}
    )


@pytest.fixture
def resolver(tokens):
    return IdentityResolver(tokens, COOKIE)


def test_no_token_anywhere_is_unauthenticated(resolver):
    with pytest.raises(Unauthenticated):
        resolver.resolve(make_request())


def test_bearer_header_resolves_identity(resolver, tokens):
    token = tokens.issue(7, email="bo@clinic.com", role="user")
    identity = resolver.resolve(make_request({"Authorization": f"Bearer {token}"}))
    assert identity.user_id == 7
    assert isinstance(identity.user_id, int)
    assert identity.email == "bo@clinic.com"
    assert identity.role == "user"


def test_scheme_is_case_insensitive_and_token_is_unquoted(resolver, tokens):
    token = tokens.issue(3)
    identity = resolver.resolve(make_request({"Authorization": f'bearer   "{token}"  '}))
    assert identity.user_id == 3


def test_cookie_is_used_when_header_is_absent(resolver, tokens):
    identity = resolver.resolve(make_request(cookies={COOKIE: tokens.issue(5)}))
    assert identity.user_id == 5


@pytest.mark.parametrize("placeholder", ["null", "undefined", "NULL", ""])
def test_placeholder_bearer_falls_back_to_cookie(resolver, tokens, placeholder):
    request = make_request(
        {"Authorization": f"Bearer {placeholder}"}, cookies={COOKIE: tokens.issue(9)}
    )
    assert resolver.resolve(request).user_id == 9


def test_placeholder_bearer_without_cookie_is_unauthenticated(resolver):
    with pytest.raises(Unauthenticated):
        resolver.resolve(make_request({"Authorization": "Bearer undefined"}))


def test_header_wins_over_cookie(resolver, tokens):
    request = make_request(
        {"Authorization": f"Bearer {tokens.issue(1)}"}, cookies={COOKIE: tokens.issue(2)}
    )
    assert resolver.resolve(request).user_id == 1


def test_cookie_with_other_name_is_ignored(resolver, tokens):
    with pytest.raises(Unauthenticated):
        resolver.resolve(make_request(cookies={"session": tokens.issue(1)}))


def test_invalid_token_is_unauthenticated_with_bearer_challenge(resolver):
    with pytest.raises(Unauthenticated) as exc_info:
        resolver.resolve(make_request({"Authorization": "Bearer abc.def.ghi"}))
    assert isinstance(exc_info.value, InvalidCredentials)
    assert exc_info.value.status_code == 401
    assert exc_info.value.headers["WWW-Authenticate"] == "Bearer"


def test_non_bearer_scheme_is_ignored(resolver, tokens):
    with pytest.raises(Unauthenticated):
        resolver.resolve(make_request({"Authorization": f"Basic {tokens.issue(1)}"}))
