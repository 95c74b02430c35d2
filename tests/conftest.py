"""
Configuración común de los tests.

La BD de los tests es un SQLite temporal: DATABASE_URL se fija ANTES de
importar database.py (que crea el engine al importarse).
"""

import os
import tempfile
from datetime import datetime

_DB_DIR = tempfile.mkdtemp(prefix="habitica-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'habitica-test.db')}"
os.environ["ADMIN_EMAILS"] = "admin@example.com"
os.environ.pop("TELEGRAM_BOT_TOKEN", None)
os.environ.pop("GEMINI_API_KEY", None)

import pytest
import pytz
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine

# 10:00 UTC → 12:00 en Madrid, mismo día
FIXED_NOW = datetime(2024, 7, 20, 10, 0, tzinfo=pytz.utc)


@pytest.fixture
def db():
    """BD vacía para cada test"""
    import models  # noqa: F401
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    import main

    main.app.dependency_overrides[main.get_now] = lambda: FIXED_NOW
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Registra un usuario y devuelve sus cabeceras de autenticación"""
    def _register(email="ana@example.com", display_name="Ana", password="secreto123"):
        response = client.post("/auth/register", json={
            "email": email,
            "password": password,
            "display_name": display_name,
        })
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}
    return _register


@pytest.fixture
def auth_headers(register):
    return register()
