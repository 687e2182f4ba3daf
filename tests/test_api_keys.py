"""Tests for API key issuance, validation and the X-API-Key routes."""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.exceptions import APIKeyExpiredError, APIKeyInvalidError, APIKeyNotFoundError, APIKeyRevokedError
from app.models.api_key import APIKey
from app.models.user import User
from app.services.api_key import APIKeyService
from app.services.security import hash_token


@pytest.fixture(name="service")
def service_fixture() -> APIKeyService:
    return APIKeyService()


@pytest.fixture(name="owner")
def owner_fixture(db_session: Session) -> User:
    user = User(email="owner@example.com", password_hash="x", is_active=True, language="en_US")
    db_session.add(user)
    db_session.commit()
    return user


class TestAPIKeyService:
    """Service-level key lifecycle."""

    def test_create_stores_hash_not_raw(self, db_session: Session, service: APIKeyService, owner: User):
        api_key, raw = service.create_key(db_session, owner.id, "ci")

        assert len(raw) == 64
        assert api_key.key_prefix == raw[:8]
        assert api_key.key_hash == hash_token(raw)
        assert raw not in (api_key.key_hash, api_key.key_prefix)
        assert api_key.expires_at is None

    def test_create_with_expiry(self, db_session: Session, service: APIKeyService, owner: User):
        api_key, _ = service.create_key(db_session, owner.id, "ci", expiry_days=30)
        assert api_key.expires_at is not None
        delta = api_key.expires_at - datetime.utcnow()
        assert timedelta(days=29) < delta <= timedelta(days=30)

    def test_validate_returns_key(self, db_session: Session, service: APIKeyService, owner: User):
        api_key, raw = service.create_key(db_session, owner.id, "ci")
        assert service.validate_key(db_session, raw).id == api_key.id

    def test_validate_unknown(self, db_session: Session, service: APIKeyService):
        with pytest.raises(APIKeyInvalidError):
            service.validate_key(db_session, "not-a-real-key")

    def test_validate_revoked(self, db_session: Session, service: APIKeyService, owner: User):
        api_key, raw = service.create_key(db_session, owner.id, "ci")
        service.revoke_key(db_session, api_key.id, owner.id)
        with pytest.raises(APIKeyRevokedError):
            service.validate_key(db_session, raw)

    def test_validate_expired(self, db_session: Session, service: APIKeyService, owner: User):
        api_key, raw = service.create_key(db_session, owner.id, "ci", expiry_days=1)
        api_key.expires_at = datetime.utcnow() - timedelta(seconds=1)
        db_session.commit()
        with pytest.raises(APIKeyExpiredError):
            service.validate_key(db_session, raw)

    def test_rejections_share_one_message(self, db_session: Session, service: APIKeyService, owner: User):
        api_key, raw = service.create_key(db_session, owner.id, "ci")
        with pytest.raises(APIKeyInvalidError) as unknown:
            service.validate_key(db_session, "nope")
        service.revoke_key(db_session, api_key.id, owner.id)
        with pytest.raises(APIKeyRevokedError) as revoked:
            service.validate_key(db_session, raw)
        assert unknown.value.to_dict() == revoked.value.to_dict()
        assert unknown.value.reason != revoked.value.reason

    def test_list_newest_first(self, db_session: Session, service: APIKeyService, owner: User):
        first, _ = service.create_key(db_session, owner.id, "first")
        second, _ = service.create_key(db_session, owner.id, "second")
        assert [k.id for k in service.get_user_keys(db_session, owner.id)] == [second.id, first.id]

    def test_revoke_other_users_key(self, db_session: Session, service: APIKeyService, owner: User):
        api_key, raw = service.create_key(db_session, owner.id, "ci")
        with pytest.raises(APIKeyNotFoundError):
            service.revoke_key(db_session, api_key.id, owner.id + 1)
        assert service.validate_key(db_session, raw).id == api_key.id

    def test_delete(self, db_session: Session, service: APIKeyService, owner: User):
        api_key, raw = service.create_key(db_session, owner.id, "ci")
        service.delete_key(db_session, api_key.id, owner.id)
        assert db_session.query(APIKey).count() == 0
        with pytest.raises(APIKeyInvalidError):
            service.validate_key(db_session, raw)

    def test_delete_unknown(self, db_session: Session, service: APIKeyService, owner: User):
        with pytest.raises(APIKeyNotFoundError):
            service.delete_key(db_session, 12345, owner.id)


class TestAPIKeyEndpoints:
    """Key management over HTTP with a session token."""

    def _create(self, client: TestClient, headers: dict, **body) -> dict:
        response = client.post("/api/v1/api-keys", json={"name": "ci", **body}, headers=headers)
        assert response.status_code == 201
        return response.json()

    def test_create_returns_raw_key_once(self, client: TestClient, test_user: dict):
        data = self._create(client, test_user["headers"], expiry_days=7)
        assert len(data["key"]) == 64
        assert data["key_prefix"] == data["key"][:8]
        assert data["expires_at"] is not None

        listed = client.get("/api/v1/api-keys", headers=test_user["headers"]).json()
        assert len(listed) == 1
        assert "key" not in listed[0]
        assert "key_hash" not in listed[0]
        assert listed[0]["key_prefix"] == data["key_prefix"]
        assert listed[0]["is_revoked"] is False

    def test_create_requires_session(self, client: TestClient):
        response = client.post("/api/v1/api-keys", json={"name": "ci"})
        assert response.status_code == 401

    def test_create_validates_body(self, client: TestClient, test_user: dict):
        assert client.post("/api/v1/api-keys", json={"name": ""}, headers=test_user["headers"]).status_code == 422
        response = client.post(
            "/api/v1/api-keys", json={"name": "ci", "expiry_days": 0}, headers=test_user["headers"]
        )
        assert response.status_code == 422

    def test_revoke(self, client: TestClient, test_user: dict):
        data = self._create(client, test_user["headers"])
        response = client.post(f"/api/v1/api-keys/{data['id']}/revoke", headers=test_user["headers"])
        assert response.status_code == 200
        assert response.json() == {"message": "API key revoked"}

        profile = client.get("/api/v1/external/profile", headers={"X-API-Key": data["key"]})
        assert profile.status_code == 401

    def test_delete(self, client: TestClient, test_user: dict):
        data = self._create(client, test_user["headers"])
        response = client.delete(f"/api/v1/api-keys/{data['id']}", headers=test_user["headers"])
        assert response.status_code == 204
        assert client.get("/api/v1/api-keys", headers=test_user["headers"]).json() == []

    def test_other_users_key_is_not_found(self, client: TestClient, test_user: dict, db_session: Session):
        data = self._create(client, test_user["headers"])
        client.post(
            "/api/v1/auth/register",
            json={"email": "other@example.com", "password": "password123", "language_code": "en_US"},
        )
        db_session.query(User).filter(User.email == "other@example.com").update({User.is_active: True})
        db_session.commit()
        token = client.post(
            "/api/v1/auth/login", json={"email": "other@example.com", "password": "password123"}
        ).json()["token"]
        other_headers = {"Authorization": f"Bearer {token}"}

        assert client.post(f"/api/v1/api-keys/{data['id']}/revoke", headers=other_headers).status_code == 404
        assert client.delete(f"/api/v1/api-keys/{data['id']}", headers=other_headers).status_code == 404
        assert client.get("/api/v1/api-keys", headers=other_headers).json() == []


class TestExternalProfile:
    """X-API-Key authenticated route."""

    def test_profile_with_key(self, client: TestClient, test_user: dict):
        raw = client.post("/api/v1/api-keys", json={"name": "ci"}, headers=test_user["headers"]).json()["key"]
        response = client.get("/api/v1/external/profile", headers={"X-API-Key": raw})
        assert response.status_code == 200
        assert response.json() == {"user_id": test_user["user_id"], "email": "test@example.com", "language": "en_US"}

    def test_missing_key(self, client: TestClient):
        response = client.get("/api/v1/external/profile")
        assert response.status_code == 401
        assert response.json()["detail"] == "API key required"

    def test_invalid_and_expired_keys_look_the_same(self, client: TestClient, test_user: dict, db_session: Session):
        data = client.post(
            "/api/v1/api-keys", json={"name": "ci", "expiry_days": 1}, headers=test_user["headers"]
        ).json()
        db_session.query(APIKey).filter(APIKey.id == data["id"]).update(
            {APIKey.expires_at: datetime.utcnow() - timedelta(minutes=1)}
        )
        db_session.commit()

        expired = client.get("/api/v1/external/profile", headers={"X-API-Key": data["key"]})
        invalid = client.get("/api/v1/external/profile", headers={"X-API-Key": "bogus"})
        assert expired.status_code == invalid.status_code == 401
        assert expired.json() == invalid.json() == {"detail": "Invalid or expired API key", "code": "INVALID_API_KEY"}

    def test_session_token_is_not_an_api_key(self, client: TestClient, test_user: dict):
        response = client.get("/api/v1/external/profile", headers=test_user["headers"])
        assert response.status_code == 401
