"""Pytest configuration and fixtures."""

import os

# Settings are read at import time, so these must be set before any app import.
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-0123456789-abcdefghijklmnop")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("APP_ENV", "test")

from unittest.mock import patch  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, build_engine, get_db  # noqa: E402
from app.models.activation_token import ActivationToken  # noqa: E402, F401
from app.models.api_key import APIKey  # noqa: E402, F401
from app.models.ingredient import GlobalIngredient, GlobalIngredientName, UserIngredient  # noqa: E402, F401
from app.models.user import User  # noqa: E402, F401
from app.services.auth import AuthService  # noqa: E402
from app.services.email import EmailService  # noqa: E402
from app.services.jwt import JWTService  # noqa: E402

TEST_SECRET = os.environ["JWT_SECRET_KEY"]


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = build_engine("sqlite:///:memory:", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(name="send_email")
def send_email_fixture():
    """Replace SMTP delivery. Call args are (service, to_email, token, language)."""
    with patch.object(EmailService, "send_activation_email", autospec=True) as mock_send:
        yield mock_send


@pytest.fixture(name="jwt_service")
def jwt_service_fixture() -> JWTService:
    return JWTService(secret_key=TEST_SECRET, expire_minutes=60)


@pytest.fixture(name="auth_service")
def auth_service_fixture(jwt_service: JWTService) -> AuthService:
    email_service = EmailService(host="localhost", port=2525, timeout=1)
    return AuthService(jwt_service=jwt_service, email_service=email_service)


@pytest.fixture(name="client")
def client_fixture(db_session: Session, send_email):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    from app.rate_limit import limiter
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session):
    """Create an active user and return its data with a session token."""
    from app.services.auth import get_auth_service

    user, token = get_auth_service().register(
        db_session, "test@example.com", "password123", "en_US", skip_activation=True
    )
    return {
        "user_id": user.id,
        "email": user.email,
        "password": "password123",
        "token": token,
        "headers": {"Authorization": f"Bearer {token}"},
    }


@pytest.fixture(name="ingredients")
def ingredients_fixture(db_session: Session):
    """Seed a small global ingredient catalogue in two languages."""
    apple = GlobalIngredient(kcal_per_100g=52, fats=0.2, carbs=14, proteins=0.3)
    rice = GlobalIngredient(kcal_per_100g=130, fats=0.3, carbs=28, proteins=2.7)
    db_session.add_all([apple, rice])
    db_session.flush()
    db_session.add_all(
        [
            GlobalIngredientName(ingredient_id=apple.id, language_code="en_US", name="Apple"),
            GlobalIngredientName(ingredient_id=apple.id, language_code="uk_UA", name="Яблуко"),
            GlobalIngredientName(ingredient_id=rice.id, language_code="en_US", name="Rice"),
        ]
    )
    db_session.commit()
    return {"apple": apple.id, "rice": rice.id}
