"""
HTTP-level tests: envelope shapes, status codes, and the full
register → login → details journey.
"""

from base64 import urlsafe_b64encode

import pytest

from auth.jwt import TokenService

JIM = {"name": "Jim Jomson", "email": "jim@example.com", "password": "Pass1!"}

NESTED_HEADER = urlsafe_b64encode(b"[" * 5000).rstrip(b"=").decode()


def _register(client, body=None):
    return client.post("/user/register", json=body or JIM)


def _login(client, email=JIM["email"], password=JIM["password"]):
    return client.post("/user/login", json={"email": email, "password": password})


class TestHealth:
    def test_ok_empty_body(self, client):
        res = client.get("/health")
        assert res.status_code == 200
        assert res.content == b""


class TestRegisterRoute:
    def test_created(self, client):
        res = _register(client)
        assert res.status_code == 201
        assert res.json() == {"id": "1"}

    def test_duplicate_email(self, client, directory):
        _register(client)
        res = _register(client, {**JIM, "name": "Jim Again"})
        assert res.status_code == 400
        assert res.json() == {"error": "email already in use"}
        assert directory.count() == 1

    def test_field_problems(self, client):
        res = _register(client, {"name": "  ", "email": "not-an-email", "password": ""})
        assert res.status_code == 400
        assert res.json() == {
            "error": {"name": "empty", "email": "invalid email", "password": "empty"}
        }

    def test_missing_fields_are_empty(self, client):
        res = client.post("/user/register", json={})
        assert res.status_code == 400
        assert res.json()["error"] == {"name": "empty", "email": "empty", "password": "empty"}

    def test_overlong_password(self, client):
        res = _register(client, {**JIM, "password": "x" * 73})
        assert res.status_code == 400
        assert res.json() == {"error": {"password": "too long"}}

    def test_wrong_type(self, client):
        res = _register(client, {**JIM, "name": 123})
        assert res.status_code == 400
        assert res.json() == {"error": {"name": "invalid"}}

    def test_unencodable_strings(self, client, directory):
        res = client.post(
            "/user/register",
            content='{"name": "\\udc80", "email": "jim@example.com", "password": "\\ud800"}',
            headers={"Content-Type": "application/json"},
        )
        assert res.status_code == 400
        assert res.json() == {"error": {"name": "invalid", "password": "invalid"}}
        assert directory.count() == 0

    def test_undecodable_body(self, client):
        res = client.post(
            "/user/register",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert res.status_code == 400
        assert res.json() == {"error": "failed to decode json"}

    def test_non_object_body(self, client):
        res = client.post("/user/register", json=["a", "b"])
        assert res.status_code == 400
        assert res.json() == {"error": "failed to decode json"}


class TestLoginRoute:
    def test_ok(self, client):
        _register(client)
        res = _login(client)
        assert res.status_code == 200
        body = res.json()
        assert body["id"] == "1"
        assert body["token"].startswith("Bearer: ")

    def test_enumeration_resistant(self, client):
        _register(client)
        unknown = _login(client, email="nobody@example.com")
        wrong = _login(client, password="wrong")
        assert unknown.status_code == wrong.status_code == 404
        assert unknown.json() == wrong.json() == {"error": "user or password not found"}

    def test_blank_fields(self, client):
        res = client.post("/user/login", json={"email": " ", "password": ""})
        assert res.status_code == 400
        assert res.json() == {"error": {"email": "empty", "password": "empty"}}

    @pytest.mark.parametrize("email", ["jim@example.com", "nobody@example.com"])
    def test_unencodable_password(self, client, email):
        _register(client)
        res = client.post(
            "/user/login",
            content='{"email": "%s", "password": "\\ud800"}' % email,
            headers={"Content-Type": "application/json"},
        )
        assert res.status_code == 400
        assert res.json() == {"error": {"password": "invalid"}}


class TestDetailsRoute:
    def _token(self, client, body=None):
        body = body or JIM
        _register(client, body)
        return _login(client, body["email"], body["password"]).json()["token"]

    def test_own_profile(self, client):
        token = self._token(client)
        res = client.get("/user/details/1", headers={"Authorization": token})
        assert res.status_code == 200
        assert res.json() == {"id": "1", "name": "Jim Jomson", "email": "jim@example.com"}
        assert "password" not in res.text

    def test_other_users_profile(self, client):
        token = self._token(client)
        self._token(client, {"name": "Ann", "email": "ann@example.com", "password": "pw"})
        res = client.get("/user/details/2", headers={"Authorization": token})
        assert res.status_code == 401
        assert res.json() == {"error": "unauthorized"}

    def test_missing_user_behind_valid_token(self, client, settings):
        token = TokenService(settings.jwt_secret).issue("99")
        res = client.get("/user/details/99", headers={"Authorization": token})
        assert res.status_code == 404
        assert res.json() == {"error": "user not found"}

    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"Authorization": ""},
            {"Authorization": "Bearer:"},
            {"Authorization": "Bearer: not.a.token"},
            {"Authorization": TokenService("wrong-secret").issue("1")},
            {"Authorization": TokenService("test-secret", expiry_seconds=-1).issue("1")},
            {"Authorization": "Bearer: " + NESTED_HEADER + ".e30.AAAA"},
        ],
        ids=["missing", "empty", "scheme-only", "malformed", "forged", "expired", "nested-header"],
    )
    def test_bad_tokens_share_one_response(self, client, headers):
        self._token(client)
        res = client.get("/user/details/1", headers=headers)
        assert res.status_code == 401
        assert res.json() == {"error": "unauthorized"}


class TestEnvelope:
    def test_unknown_route(self, client):
        res = client.get("/nope")
        assert res.status_code == 404
        assert res.json() == {"error": "not found"}

    def test_process_time_header(self, client):
        assert "X-Process-Time" in client.get("/health").headers


def test_full_journey(client):
    reg = _register(client)
    assert (reg.status_code, reg.json()) == (201, {"id": "1"})

    login = _login(client)
    assert login.status_code == 200
    assert login.json()["id"] == "1"
    token = login.json()["token"]

    details = client.get("/user/details/1", headers={"Authorization": token})
    assert details.status_code == 200
    assert details.json() == {"id": "1", "name": "Jim Jomson", "email": "jim@example.com"}
