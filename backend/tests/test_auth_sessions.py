from datetime import timedelta
import hashlib
import json

from fastapi import FastAPI
from fastapi.testclient import TestClient

from conftest import TEST_SECRET, FakeClock
from location_api.api import deps
from location_api.api.auth import router as auth_router
from location_api.config import Settings
from location_api.errors import register_exception_handlers
from location_api.models.auth import AuthSession
from location_api.models.user import Credential, User
from location_api.services.authenticator import Authenticator


def _cookie_value(set_cookie_header: str, cookie_name: str) -> str:
    token_part = set_cookie_header.split(";", 1)[0]
    name, value = token_part.split("=", 1)
    assert name == cookie_name
    return value.strip('"')


def _build_test_client(session_factory, clock=None, **settings_overrides):
    settings = Settings(secret_key=TEST_SECRET, **settings_overrides)

    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(auth_router, prefix="/api")

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_app_settings] = lambda: settings

    if clock is not None:
        def override_get_authenticator():
            db = session_factory()
            try:
                yield Authenticator(
                    db,
                    settings.secret_key,
                    session_lifetime=timedelta(days=settings.session_lifetime_days),
                    clock=clock,
                )
            finally:
                db.close()

        app.dependency_overrides[deps.get_authenticator] = override_get_authenticator

    return TestClient(app)


def _create_account(session_factory, email="alice@example.com", password="pw1", name="Alice"):
    db = session_factory()
    try:
        return Authenticator(db, TEST_SECRET).create_credential(email, password, name)
    finally:
        db.close()


def _sign_in(client, email="alice@example.com", password="pw1", path="/api/auth/sign-in"):
    return client.post(path, json={"email": email, "password": password})


def test_sign_in_sets_secure_httponly_session_cookie(session_factory):
    client = _build_test_client(session_factory)
    account = _create_account(session_factory)

    response = _sign_in(client)
    set_cookie = response.headers.get("set-cookie", "")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "user": {"id": account.id, "email": "alice@example.com", "name": "Alice"},
    }
    assert "session=" in set_cookie
    assert "HttpOnly" in set_cookie
    assert "Secure" in set_cookie
    assert "samesite=none" in set_cookie.lower()
    assert "Max-Age=604800" in set_cookie
    assert len(_cookie_value(set_cookie, "session")) == 64


def test_sign_in_email_alias_route(session_factory):
    client = _build_test_client(session_factory)
    _create_account(session_factory)

    response = _sign_in(client, path="/api/auth/sign-in/email")

    assert response.status_code == 200
    assert response.json()["user"]["email"] == "alice@example.com"


def test_sign_in_response_never_contains_digest_or_token(session_factory):
    client = _build_test_client(session_factory)
    _create_account(session_factory)

    response = _sign_in(client)
    token = _cookie_value(response.headers["set-cookie"], "session")

    assert token not in response.text
    assert "$2" not in response.text
    assert "password" not in response.text


def test_sign_in_missing_fields_is_400(session_factory):
    client = _build_test_client(session_factory)

    for body in ({"email": "alice@example.com"}, {"password": "pw1"}, {}):
        response = client.post("/api/auth/sign-in", json=body)

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "missing_fields",
            "message": "Email and password are required",
        }


def test_sign_in_with_unencodable_input_is_invalid_credentials(session_factory):
    client = _build_test_client(session_factory)
    legacy = hashlib.sha256(("admin123" + TEST_SECRET).encode("utf-8")).hexdigest()
    db = session_factory()
    try:
        user = User(email="admin@example.com", name="Admin User")
        user.credentials.append(Credential(password_digest=legacy))
        db.add(user)
        db.commit()
    finally:
        db.close()

    # Escaped JSON carrying lone surrogates
    bad_password = client.post(
        "/api/auth/sign-in",
        content=json.dumps({"email": "admin@example.com", "password": "\ud800"}),
        headers={"Content-Type": "application/json"},
    )
    bad_email = client.post(
        "/api/auth/sign-in",
        content=json.dumps({"email": "\ud800@example.com", "password": "admin123"}),
        headers={"Content-Type": "application/json"},
    )

    for response in (bad_password, bad_email):
        assert response.status_code == 401
        assert response.json()["error"] == "invalid_credentials"
        assert "set-cookie" not in response.headers
    assert _sign_in(client, email="admin@example.com", password="admin123").status_code == 200


def test_unregistered_email_and_wrong_password_look_the_same(session_factory):
    client = _build_test_client(session_factory)
    _create_account(session_factory)

    unknown = _sign_in(client, email="bob@example.com")
    wrong = _sign_in(client, password="nope")

    assert unknown.status_code == 401
    assert wrong.status_code == 401
    assert unknown.json() == wrong.json()
    assert unknown.json()["error"] == "invalid_credentials"
    assert "bob@example.com" not in unknown.text
    assert "set-cookie" not in unknown.headers


def test_get_session_resolves_cookie_to_user(session_factory):
    client = _build_test_client(session_factory)
    account = _create_account(session_factory)
    token = _cookie_value(_sign_in(client).headers["set-cookie"], "session")

    response = client.get("/api/auth/get-session", headers={"Cookie": f"session={token}"})

    assert response.status_code == 200
    assert response.json() == {"user": {"id": account.id, "email": "alice@example.com", "name": "Alice"}}


def test_get_session_without_or_with_bad_cookie_is_null(session_factory):
    client = _build_test_client(session_factory)

    assert client.get("/api/auth/get-session").json() == {"user": None}
    bogus = client.get("/api/auth/get-session", headers={"Cookie": "session=" + "0" * 64})
    assert bogus.status_code == 200
    assert bogus.json() == {"user": None}


def test_get_session_after_expiry_is_null(session_factory):
    clock = FakeClock()
    client = _build_test_client(session_factory, clock=clock)
    _create_account(session_factory)
    token = _cookie_value(_sign_in(client).headers["set-cookie"], "session")

    clock.advance(days=7)

    response = client.get("/api/auth/get-session", headers={"Cookie": f"session={token}"})
    assert response.json() == {"user": None}


def test_sign_out_clears_cookie_and_session(session_factory):
    client = _build_test_client(session_factory)
    _create_account(session_factory)
    token = _cookie_value(_sign_in(client).headers["set-cookie"], "session")

    response = client.post("/api/auth/sign-out", headers={"Cookie": f"session={token}"})

    assert response.status_code == 200
    assert response.json() == {"success": True}
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("session=")
    assert "Max-Age=0" in set_cookie

    after = client.get("/api/auth/get-session", headers={"Cookie": f"session={token}"})
    assert after.json() == {"user": None}

    db = session_factory()
    try:
        assert db.query(AuthSession).count() == 0
    finally:
        db.close()


def test_sign_out_always_succeeds(session_factory):
    client = _build_test_client(session_factory)

    assert client.post("/api/auth/sign-out").status_code == 200
    assert client.post("/api/auth/sign-out", headers={"Cookie": "session=unknown"}).status_code == 200


def test_two_sign_ins_produce_two_valid_sessions(session_factory):
    client = _build_test_client(session_factory)
    _create_account(session_factory)

    first = _cookie_value(_sign_in(client).headers["set-cookie"], "session")
    second = _cookie_value(_sign_in(client).headers["set-cookie"], "session")

    assert first != second
    client.post("/api/auth/sign-out", headers={"Cookie": f"session={first}"})
    still_valid = client.get("/api/auth/get-session", headers={"Cookie": f"session={second}"})
    assert still_valid.json()["user"]["email"] == "alice@example.com"


def test_sign_up_disabled_by_default(session_factory):
    client = _build_test_client(session_factory)

    response = client.post(
        "/api/auth/sign-up/email",
        json={"email": "carol@example.com", "password": "Password123!", "name": "Carol"},
    )

    assert response.status_code == 403
    assert response.json()["error"] == "sign_up_disabled"


def test_sign_up_when_enabled_then_duplicate(session_factory):
    client = _build_test_client(session_factory, signup_enabled=True)
    body = {"email": "carol@example.com", "password": "Password123!", "name": "Carol"}

    created = client.post("/api/auth/sign-up/email", json=body)
    duplicate = client.post("/api/auth/sign-up/email", json=body)

    assert created.status_code == 201
    assert created.json()["user"]["name"] == "Carol"
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "duplicate_email"
    assert _sign_in(client, email="carol@example.com", password="Password123!").status_code == 200


def test_misconfigured_secret_at_request_time_is_500(session_factory, monkeypatch):
    client = _build_test_client(session_factory)
    del client.app.dependency_overrides[deps.get_app_settings]
    monkeypatch.setenv("SECRET_KEY", "short")
    deps.get_settings.cache_clear()

    try:
        response = _sign_in(client)
    finally:
        monkeypatch.undo()
        deps.get_settings.cache_clear()

    assert response.status_code == 500
    assert response.json()["error"] == "misconfiguration"
    assert "short" not in response.text
