"""Shared fixtures: temporary SQLite database, fake gateway, recording mailer.

Environment variables are set before any ``storefront`` import because
``storefront.db`` builds its settings and engine at import time.
"""
import os
import tempfile
import uuid

_TMP_DIR = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["AUTH_SECRET"] = "test-secret-0123456789-abcdefghijklmnop"
os.environ["MEDIA_ROOT"] = os.path.join(_TMP_DIR, "uploads")
os.environ["STORAGE_BACKEND"] = "local"
os.environ["MP_NOTIFICATION_URL"] = "https://api.fatalcompany.test/api/webhook"
os.environ.pop("SMTP_HOST", None)

import pytest
from fastapi.testclient import TestClient

from storefront import models
from storefront.db import Base, SessionLocal, engine
from storefront.errors import PaymentGatewayError
from storefront.main import app
from storefront.security import create_access_token, hash_password
from storefront.services.notifications import OrderNotifier, get_notifier
from storefront.services.payment_gateway import PaymentInfo, Preference, get_payment_gateway
from storefront.storage import get_storage_backend

SENDER = "Fatal Company <loja@fatal.com>"


class FakeGateway:
    """In-memory stand-in for the Mercado Pago client."""

    def __init__(self):
        self.preferences = []
        self.payments = {}
        self.preference_error = None
        self.payment_error = None
        self.payment_lookups = 0

    def create_preference(self, request):
        if self.preference_error is not None:
            raise self.preference_error
        self.preferences.append(request)
        return Preference(
            id=f"pref-{len(self.preferences)}",
            redirect_url=f"https://mp.test/checkout?ref={request.external_reference}",
        )

    def get_payment(self, payment_id):
        self.payment_lookups += 1
        if self.payment_error is not None:
            raise self.payment_error
        if payment_id not in self.payments:
            raise PaymentGatewayError("payment not found", transient=False)
        return self.payments[payment_id]

    def set_payment(self, payment_id, status, external_reference):
        self.payments[payment_id] = PaymentInfo(
            id=payment_id, status=status, external_reference=external_reference
        )


class RecordingMailer:
    def __init__(self):
        self.sent = []
        self.error = None

    async def send(self, email):
        if self.error is not None:
            raise self.error
        self.sent.append(email)

    def subjects(self):
        return [email.subject for email in self.sent]


class MemoryStorage:
    def __init__(self):
        self.saved = {}
        self.deleted = []

    def save(self, key, contents, content_type):
        self.saved[key] = contents
        return f"https://cdn.test/{key}"

    def delete_by_url(self, url):
        self.deleted.append(url)


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def client(gateway, mailer, storage):
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_notifier] = lambda: OrderNotifier(mailer, SENDER)
    app.dependency_overrides[get_storage_backend] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _create_user(db, email, is_admin):
    user = models.User(
        id=str(uuid.uuid4()),
        name="Admin" if is_admin else "Cliente",
        email=email,
        password_hash=hash_password("senha-forte-123"),
        is_admin=is_admin,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def admin_headers(db):
    user = _create_user(db, "admin@fatal.com", is_admin=True)
    token = create_access_token({"sub": user.id, "is_admin": True})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers(db):
    user = _create_user(db, "cliente@fatal.com", is_admin=False)
    token = create_access_token({"sub": user.id, "is_admin": False})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def checkout_payload():
    return {
        "cliente": {
            "nome": "Maria Silva",
            "email": "maria@example.com",
            "endereco": "Rua Augusta, 100 - São Paulo/SP",
            "cep": "01305-000",
        },
        "itens": [
            {"_id": "p-1", "nome": "Camiseta Fatal", "preco": 100, "qty": 2, "size": "M", "color": "Preto",
             "imagem": "https://cdn.test/camiseta.jpg"},
            {"_id": "p-2", "nome": "Boné Fatal", "preco": 50, "qty": 1, "size": "U", "color": "Branco"},
        ],
        "frete": 10,
        "desconto": 25,
        "total": 235,
    }


@pytest.fixture
def place_order(client, checkout_payload):
    def _place(**overrides):
        payload = {**checkout_payload, **overrides}
        response = client.post("/api/checkout", json=payload)
        assert response.status_code == 200, response.text
        return response.json()["orderId"]

    return _place
