"""
Auth routes: registration, throttling, login reconciliation
"""

import threading
import uuid
from concurrent.futures import ThreadPoolExecutor

from app.config import settings
from app.core.security import verify_token
from app.modules.auth.schemas import LoginRequest
from app.modules.auth.service import AuthService, merge_profile
from types import SimpleNamespace


REGISTER_BODY = {
    "name": "Budi Santoso",
    "email": "budi@example.com",
    "password": "password123",
    "phone": "+62812345680",
}


class TestRegister:
    def test_register_creates_auth_user_and_profile(self, client, fake_db):
        response = client.post("/api/auth/register", json=REGISTER_BODY)

        assert response.status_code == 201
        body = response.json()
        assert body["user"]["email"] == "budi@example.com"
        assert body["user"]["role"] == "public"
        assert "password_hash" not in body["user"]

        rows = fake_db.rows("users")
        assert len(rows) == 1
        assert rows[0]["id"] == fake_db.auth.users["budi@example.com"]["id"]
        assert rows[0]["password_hash"].startswith("$2b$")
        assert fake_db.auth.sent_emails[0]["options"]["email_redirect_to"] == settings.email_confirm_redirect_to

    def test_register_duplicate_email_returns_409(self, client, make_user):
        make_user(email="budi@example.com")

        response = client.post("/api/auth/register", json=REGISTER_BODY)

        assert response.status_code == 409

    def test_register_email_already_in_auth_returns_409(self, client, fake_db):
        fake_db.auth.create_user("budi@example.com", "whatever")

        response = client.post("/api/auth/register", json=REGISTER_BODY)

        assert response.status_code == 409
        assert fake_db.rows("users") == []

    def test_register_again_within_window_is_throttled(self, client, fake_db):
        first = client.post("/api/auth/register", json=REGISTER_BODY)
        fake_db.tables["users"].clear()

        second = client.post("/api/auth/register", json=REGISTER_BODY)

        assert first.status_code == 201
        assert second.status_code == 429
        assert "Please wait" in second.json()["detail"]

    def test_rejected_register_does_not_hold_the_slot(self, client, fake_db, make_user):
        make_user(email="budi@example.com")
        duplicate = client.post("/api/auth/register", json=REGISTER_BODY)
        fake_db.tables["users"].clear()

        retry = client.post("/api/auth/register", json=REGISTER_BODY)

        assert duplicate.status_code == 409
        assert retry.status_code == 201

    def test_throttle_is_per_email(self, client):
        client.post("/api/auth/register", json=REGISTER_BODY)

        other = client.post("/api/auth/register", json={**REGISTER_BODY, "email": "siti@example.com"})

        assert other.status_code == 201

    def test_provider_rate_limit_maps_to_429_and_arms_throttle(self, client, fake_db):
        fake_db.auth.rate_limited = True
        first = client.post("/api/auth/register", json=REGISTER_BODY)
        fake_db.auth.rate_limited = False
        second = client.post("/api/auth/register", json=REGISTER_BODY)

        assert first.status_code == 429
        assert second.status_code == 429
        assert "Please wait" in second.json()["detail"]

    def test_register_missing_fields_returns_400(self, client):
        response = client.post("/api/auth/register", json={"email": "budi@example.com"})

        assert response.status_code == 400

    def test_register_short_password_returns_400(self, client):
        response = client.post("/api/auth/register", json={**REGISTER_BODY, "password": "123"})

        assert response.status_code == 400

    def test_profile_insert_failure_does_not_block_registration(self, client, fake_db):
        fake_db.failing_tables.add("users")

        response = client.post("/api/auth/register", json=REGISTER_BODY)

        assert response.status_code == 201
        assert response.json()["user"]["id"] == fake_db.auth.users["budi@example.com"]["id"]


class TestResendConfirmation:
    def test_resend_sends_email(self, client, fake_db):
        response = client.post("/api/auth/resend-confirmation", json={"email": "budi@example.com"})

        assert response.status_code == 200
        assert fake_db.auth.sent_emails[-1]["type"] == "signup"

    def test_resend_twice_is_throttled(self, client):
        client.post("/api/auth/resend-confirmation", json={"email": "budi@example.com"})

        response = client.post("/api/auth/resend-confirmation", json={"email": "budi@example.com"})

        assert response.status_code == 429

    def test_resend_without_email_returns_400(self, client):
        response = client.post("/api/auth/resend-confirmation", json={})

        assert response.status_code == 400


class TestLogin:
    def test_wrong_password_returns_401(self, client, fake_db):
        fake_db.auth.create_user("budi@example.com", "password123")

        response = client.post("/api/auth/login", json={"email": "budi@example.com", "password": "nope"})

        assert response.status_code == 401

    def test_unknown_email_returns_401(self, client):
        response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "password123"})

        assert response.status_code == 401

    def test_missing_fields_returns_400(self, client):
        response = client.post("/api/auth/login", json={"email": "budi@example.com"})

        assert response.status_code == 400

    def test_login_uses_existing_profile(self, client, fake_db, make_user):
        user_id = fake_db.auth.create_user("ahmad@example.com", "password123", user_metadata={"name": "From Auth"})
        make_user("officer", id=user_id, email="ahmad@example.com", name="Officer Ahmad")

        response = client.post("/api/auth/login", json={"email": "ahmad@example.com", "password": "password123"})

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["name"] == "Officer Ahmad"
        assert body["user"]["role"] == "officer"
        claims = verify_token(body["token"])
        assert claims["id"] == user_id
        assert claims["role"] == "officer"
        assert fake_db.find("users", "id", user_id)["last_login"] is not None

    def test_first_login_creates_exactly_one_profile(self, client, fake_db):
        user_id = fake_db.auth.create_user(
            "siti@example.com", "password123", user_metadata={"name": "Siti", "phone": "+6281"}
        )

        first = client.post("/api/auth/login", json={"email": "siti@example.com", "password": "password123"})
        second = client.post("/api/auth/login", json={"email": "siti@example.com", "password": "password123"})

        assert first.status_code == 200
        assert second.status_code == 200
        rows = fake_db.rows("users")
        assert len(rows) == 1
        assert rows[0]["id"] == user_id
        assert rows[0]["name"] == "Siti"
        assert rows[0]["phone"] == "+6281"
        assert rows[0]["role"] == "public"

    def test_profile_found_by_email_when_ids_differ(self, client, fake_db, make_user):
        fake_db.auth.create_user("legacy@example.com", "password123")
        legacy = make_user("admin", email="legacy@example.com", name="Legacy Admin")

        response = client.post("/api/auth/login", json={"email": "legacy@example.com", "password": "password123"})

        assert response.status_code == 200
        assert response.json()["user"]["id"] == legacy["id"]
        assert len(fake_db.rows("users")) == 1

    def test_name_falls_back_to_email_local_part(self, client, fake_db):
        fake_db.auth.create_user("no.name@example.com", "password123")

        response = client.post("/api/auth/login", json={"email": "no.name@example.com", "password": "password123"})

        assert response.json()["user"]["name"] == "no.name"

    def test_login_succeeds_with_auth_only_profile_when_table_unavailable(self, client, fake_db):
        user_id = fake_db.auth.create_user(
            "siti@example.com", "password123",
            user_metadata={"name": "Siti"}, app_metadata={"role": "officer"}
        )
        fake_db.failing_tables.add("users")

        response = client.post("/api/auth/login", json={"email": "siti@example.com", "password": "password123"})

        assert response.status_code == 200
        user = response.json()["user"]
        assert user == {
            "id": user_id,
            "name": "Siti",
            "email": "siti@example.com",
            "phone": None,
            "role": "officer",
            "avatar_url": None,
        }

    def test_dev_bypass_skips_supabase(self, client, monkeypatch):
        monkeypatch.setattr(settings, "dev_bypass_auth", True)

        response = client.post("/api/auth/login", json={"email": "anyone@example.com", "password": "x"})

        assert response.status_code == 200
        assert response.json()["user"]["role"] == "admin"


class TestReconcileProfile:
    def test_concurrent_first_logins_create_one_row(self, fake_db):
        fake_db.auth.create_user("race@example.com", "password123")
        barrier = threading.Barrier(2, timeout=5)
        fake_db.before_upsert = lambda table, payload: barrier.wait()

        def login():
            service = AuthService(fake_db, fake_db)
            return service.login(LoginRequest(email="race@example.com", password="password123"))

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(lambda _: login(), range(2)))

        assert len(fake_db.rows("users")) == 1
        assert results[0].user.id == results[1].user.id

    def test_email_conflict_during_create_is_recovered(self, fake_db):
        user_id = fake_db.auth.create_user("legacy@example.com", "password123")
        legacy_id = str(uuid.uuid4())

        def legacy_row_appears(table, payload):
            fake_db.seed("users", id=legacy_id, name="Legacy", email="legacy@example.com", role="officer")

        fake_db.before_upsert = legacy_row_appears
        service = AuthService(fake_db, fake_db)
        auth_user = SimpleNamespace(
            id=user_id, email="legacy@example.com", user_metadata={}, app_metadata={}
        )

        profile = service.reconcile_profile(auth_user)

        assert profile["id"] == legacy_id
        assert profile["role"] == "officer"
        assert len(fake_db.rows("users")) == 1

    def test_merge_prefers_local_row(self):
        auth_user = SimpleNamespace(
            id="auth-id", email="a@example.com",
            user_metadata={"name": "Meta", "phone": "+1", "avatar_url": "http://img"},
            app_metadata={"role": "admin"},
        )

        merged = merge_profile({"id": "auth-id", "name": "Local", "email": "a@example.com", "phone": None}, auth_user)

        assert merged["name"] == "Local"
        assert merged["phone"] == "+1"
        assert merged["avatar_url"] == "http://img"
        assert merged["role"] == "admin"


class TestMe:
    def test_me_returns_profile(self, client, make_user, auth_headers):
        user = make_user("officer", name="Officer Ahmad")

        response = client.get("/api/auth/me", headers=auth_headers(user=user))

        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Officer Ahmad"

    def test_me_without_token_returns_401(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 401

    def test_me_with_bad_token_returns_403(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 403

    def test_me_for_deleted_profile_returns_404(self, client, fake_db, make_user, auth_headers):
        user = make_user()
        headers = auth_headers(user=user)
        fake_db.tables["users"].clear()

        response = client.get("/api/auth/me", headers=headers)

        assert response.status_code == 404

    def test_me_under_dev_bypass(self, client, monkeypatch):
        monkeypatch.setattr(settings, "dev_bypass_auth", True)

        response = client.get("/api/auth/me")

        assert response.status_code == 200
        assert response.json()["user"]["id"] == "dev-user-1"

    def test_logout(self, client):
        response = client.post("/api/auth/logout")

        assert response.status_code == 200
