"""API tests for POST /api/checkout.

The payment gateway is replaced by ``FakeGateway`` and e-mails are captured by
``RecordingMailer`` (see conftest).
"""
import json

import pytest

from storefront import models
from storefront.errors import PaymentGatewayError
from storefront.services.order_message import SUBJECT_ORDER_RECEIVED


def _order_count(db):
    return db.query(models.Order).count()


def test_checkout_creates_awaiting_order_with_gateway_reference(client, db, gateway, checkout_payload):
    response = client.post("/api/checkout", json=checkout_payload)

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["success"] is True
    assert len(gateway.preferences) == 1
    preference = gateway.preferences[0]
    assert body["orderId"] == preference.external_reference
    assert body["url"] == f"https://mp.test/checkout?ref={body['orderId']}"

    orders = db.query(models.Order).all()
    assert len(orders) == 1
    order = orders[0]
    assert order.id == preference.external_reference
    assert order.status == models.OrderStatus.awaiting_payment.value
    assert order.subtotal_cents == 25000
    assert order.shipping_cents == 1000
    assert order.discount_cents == 2500
    assert order.total_cents == 23500
    assert order.payment_url == body["url"]
    assert order.customer_name == "Maria Silva"
    assert order.customer_postal_code == "01305-000"
    assert [(i.name, i.quantity, i.size, i.color) for i in order.items] == [
        ("Camiseta Fatal", 2, "M", "Preto"),
        ("Boné Fatal", 1, "U", "Branco"),
    ]


def test_checkout_sends_allocated_prices_to_gateway(client, gateway, checkout_payload):
    client.post("/api/checkout", json=checkout_payload)

    preference = gateway.preferences[0]
    assert [(i.title, i.quantity, i.unit_price_cents) for i in preference.items] == [
        ("Camiseta Fatal", 2, 9500),
        ("Boné Fatal", 1, 4500),
    ]
    assert preference.items[0].picture_url == "https://cdn.test/camiseta.jpg"
    assert preference.shipping_cents == 1000
    assert preference.payer_name == "Maria Silva"
    assert preference.payer_email == "maria@example.com"
    assert set(preference.back_urls) == {"success", "failure", "pending"}
    assert preference.notification_url == "https://api.fatalcompany.test/api/webhook"


def test_checkout_sends_order_received_email_with_payment_link(client, mailer, checkout_payload):
    body = client.post("/api/checkout", json=checkout_payload).json()

    assert mailer.subjects() == [SUBJECT_ORDER_RECEIVED]
    email = mailer.sent[0]
    assert email.to == "maria@example.com"
    assert email.sender == "Fatal Company <loja@fatal.com>"
    assert body["url"].replace("&", "&amp;") in email.html
    assert "2x Camiseta Fatal" in email.html
    assert "R$ 235,00" in email.html


def test_email_failure_does_not_fail_checkout(client, db, mailer, checkout_payload):
    mailer.error = ConnectionRefusedError("smtp down")

    response = client.post("/api/checkout", json=checkout_payload)

    assert response.status_code == 200
    assert _order_count(db) == 1
    assert mailer.sent == []


def test_empty_cart_is_rejected_and_nothing_persisted(client, db, gateway, checkout_payload):
    response = client.post("/api/checkout", json={**checkout_payload, "itens": [], "total": 0, "frete": 0, "desconto": 0})

    assert response.status_code == 400
    assert response.json() == {"error": "Carrinho vazio"}
    assert gateway.preferences == []
    assert _order_count(db) == 0


def test_non_positive_quantity_is_rejected(client, db, gateway, checkout_payload):
    itens = [dict(checkout_payload["itens"][0], qty=0)]
    response = client.post("/api/checkout", json={**checkout_payload, "itens": itens, "total": 0})

    assert response.status_code == 400
    assert "Quantidade inválida" in response.json()["error"]
    assert gateway.preferences == []
    assert _order_count(db) == 0


def test_inconsistent_total_is_rejected(client, db, checkout_payload):
    response = client.post("/api/checkout", json={**checkout_payload, "total": 1})

    assert response.status_code == 400
    assert response.json()["error"] == "Total do carrinho não confere"
    assert _order_count(db) == 0


def test_discount_above_subtotal_is_rejected(client, checkout_payload):
    response = client.post("/api/checkout", json={**checkout_payload, "desconto": 300, "total": 0})

    assert response.status_code == 400
    assert response.json()["error"] == "Desconto maior que o valor dos produtos"


def test_malformed_body_is_rejected(client, db):
    response = client.post("/api/checkout", json={"cliente": {"nome": "Ana"}, "itens": "nope"})

    assert response.status_code == 400
    assert response.json()["error"] == "Dados inválidos"
    assert _order_count(db) == 0


def test_gateway_failure_returns_500_and_persists_nothing(client, db, gateway, mailer, checkout_payload):
    gateway.preference_error = PaymentGatewayError()

    response = client.post("/api/checkout", json=checkout_payload)

    assert response.status_code == 500
    assert response.json() == {"error": "Erro no checkout"}
    assert _order_count(db) == 0
    assert mailer.sent == []


def test_each_checkout_gets_a_fresh_order_id(place_order, db):
    first = place_order()
    second = place_order()

    assert first != second
    assert _order_count(db) == 2


@pytest.mark.parametrize(
    "original, replacement",
    [
        ('"preco": 100', '"preco": Infinity'),
        ('"preco": 100', '"preco": NaN'),
        ('"frete": 10', '"frete": Infinity'),
        ('"total": 235', '"total": -Infinity'),
    ],
)
def test_non_finite_amounts_are_rejected(client, db, gateway, checkout_payload, original, replacement):
    body = json.dumps(checkout_payload, ensure_ascii=False).replace(original, replacement)

    response = client.post("/api/checkout", content=body, headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["error"] == "Dados inválidos"
    assert gateway.preferences == []
    assert _order_count(db) == 0
