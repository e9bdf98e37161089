import os
import sys
import tempfile

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

# purdetall.main builds a module-level app on import; keep it off the real data dir.
_IMPORT_DIR = tempfile.mkdtemp(prefix="purdetall-tests-")
os.environ.setdefault("SITE_DB_PATH", os.path.join(_IMPORT_DIR, "site.sqlite3"))
os.environ.setdefault("UPLOAD_DIR", os.path.join(_IMPORT_DIR, "uploads"))
os.environ.setdefault("PUBLIC_DIR", os.path.join(_IMPORT_DIR, "public"))
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from purdetall.main import create_app  # noqa: E402
from purdetall.services.errors import MailDeliveryError  # noqa: E402
from purdetall.settings import Settings  # noqa: E402

TEST_SECRET = "test-secret"
ADMIN_PASSWORD = "purdetall2025"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeMailSender:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent = []

    def send(self, to_address, subject, text_body, html_body=None):
        if self.fail:
            raise MailDeliveryError("Error al enviar el mensaje")
        self.sent.append({"to": to_address, "subject": subject, "text": text_body, "html": html_body})


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "db_path": str(tmp_path / "site.sqlite3"),
        "upload_dir": str(tmp_path / "uploads"),
        "public_dir": str(tmp_path / "public"),
        "auth_secret": TEST_SECRET,
        "bcrypt_rounds": 4,
        "rate_limit_max": 10_000,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def app(tmp_path):
    return create_app(make_settings(tmp_path))


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin_headers(app, client):
    app.state.user_store.create_user("admin", "admin@purdetall.es", ADMIN_PASSWORD)
    response = client.post("/api/auth/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


def png_upload(name: str = "car.png"):
    return (name, PNG_BYTES, "image/png")
