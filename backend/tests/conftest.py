# tests/conftest.py
import asyncio
import os

# settings are read from the environment at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./clinic-test.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("JWT_ALGORITHM", "HS256")

import pytest
from fastapi.testclient import TestClient

from clinic_queue.config.settings import Settings
from clinic_queue.core.auth import PasswordHasher, TokenService
from clinic_queue.db.session import Database
from clinic_queue.main import create_app

SECRET = "test-secret"
ADMIN_EMAIL = "admin@clinic.com"
ADMIN_PASSWORD = "admin123"


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'clinic.db'}"


@pytest.fixture
def settings(database_url):
    return Settings(
        database_url=database_url,
        jwt_secret_key=SECRET,
        jwt_algorithm="HS256",
        bcrypt_rounds=4,
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens():
    return TokenService(SECRET, "HS256")


@pytest.fixture
def run_db(database_url):
    """
    Run ``scenario(db)`` on a fresh event loop against a freshly created
    schema, disposing the engine afterwards.
    """

    def _run(scenario):
        async def _main():
            db = Database(database_url)
            await db.create_all()
            try:
                return await scenario(db)
            finally:
                await db.dispose()

        return asyncio.run(_main())

    return _run


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def admin_headers(client):
    r = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert r.status_code == 200, r.text
    # keep the bearer header as the only credential
    client.cookies.clear()
    return {"Authorization": f"Bearer {r.json()['access_token']}"}
