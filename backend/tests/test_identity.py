"""Tests for the identity provider client."""

import httpx
import pytest

from carwash.core.errors import AccountExists, AuthError, NotFound, UpstreamFailure, ValidationError
from carwash.services.identity import ROLE_CUSTOMER, ROLE_MANAGER, IdentityProvider


def make_provider(handler):
    return IdentityProvider(
        base_url="https://identity.test/",
        api_key="secret",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


class TestVerifyToken:
    def test_returns_subject_and_role(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={"uid": "u1", "role": "manager", "email": "m@x.io"})

        identity = make_provider(handler).verify_token("tok")

        assert seen == {"path": "/v1/tokens:verify", "auth": "Bearer secret"}
        assert identity.uid == "u1"
        assert identity.role == ROLE_MANAGER

    def test_missing_role_means_customer(self):
        provider = make_provider(lambda request: httpx.Response(200, json={"uid": "u1"}))

        assert provider.verify_token("tok").role == ROLE_CUSTOMER

    @pytest.mark.parametrize("status", [400, 401, 403])
    def test_rejected_token(self, status):
        provider = make_provider(lambda request: httpx.Response(status, json={"error": "bad"}))

        with pytest.raises(AuthError) as exc:
            provider.verify_token("tok")

        assert exc.value.status_code == 401

    def test_timeout_is_upstream_failure(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(UpstreamFailure):
            make_provider(handler).verify_token("tok")

    def test_server_error_is_upstream_failure(self):
        provider = make_provider(lambda request: httpx.Response(503))

        with pytest.raises(UpstreamFailure):
            provider.verify_token("tok")


class TestUsers:
    def test_get_user_reads_display_name(self):
        provider = make_provider(
            lambda request: httpx.Response(200, json={"uid": "u1", "displayName": "Thandi", "email": "t@x.io"})
        )

        user = provider.get_user("u1")

        assert user.name == "Thandi"
        assert user.email == "t@x.io"

    def test_get_user_not_found(self):
        provider = make_provider(lambda request: httpx.Response(404))

        with pytest.raises(NotFound):
            provider.get_user("u1")

    def test_create_user_conflict(self):
        provider = make_provider(lambda request: httpx.Response(409, json={"error": "Email already in use"}))

        with pytest.raises(AccountExists) as exc:
            provider.create_user("a@x.io", "secret1", "A")

        assert exc.value.status_code == 409
        assert exc.value.message == "Email already in use"
        assert not isinstance(exc.value, AuthError)

    def test_create_user_rejected(self):
        provider = make_provider(lambda request: httpx.Response(400, text="nope"))

        with pytest.raises(ValidationError):
            provider.create_user("a@x.io", "secret1", "A")

    def test_set_role_posts_claim(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = request.content
            return httpx.Response(204)

        make_provider(handler).set_role("u1", ROLE_MANAGER)

        assert seen["path"] == "/v1/users/u1/claims"
        assert b'"role"' in seen["body"]
        assert b'"manager"' in seen["body"]
