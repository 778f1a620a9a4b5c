"""
Cliente do Mercado Pago (Checkout Pro) via API REST.

Só duas operações são usadas pela loja: criar a preferência de pagamento no checkout
e buscar um pagamento pelo id quando o webhook avisa de uma mudança.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from storefront.db import settings
from storefront.errors import PaymentGatewayError

logger = logging.getLogger(__name__)

CURRENCY = "BRL"
# Credencial recusada e limite de taxa contam como falha temporária.
RETRYABLE_STATUS_CODES = {401, 403, 429}


@dataclass(frozen=True)
class PreferenceItem:
    title: str
    quantity: int
    unit_price_cents: int
    picture_url: str | None = None


@dataclass(frozen=True)
class PreferenceRequest:
    external_reference: str
    items: list[PreferenceItem]
    shipping_cents: int
    payer_name: str
    payer_email: str
    back_urls: dict[str, str] = field(default_factory=dict)
    notification_url: str | None = None


@dataclass(frozen=True)
class Preference:
    id: str
    redirect_url: str


@dataclass(frozen=True)
class PaymentInfo:
    id: str
    status: str
    external_reference: str | None


class PaymentGateway(Protocol):
    def create_preference(self, request: PreferenceRequest) -> Preference: ...
    def get_payment(self, payment_id: str) -> PaymentInfo: ...


def _reais(cents: int) -> float:
    return round(cents / 100, 2)


def build_preference_body(request: PreferenceRequest) -> dict:
    body: dict = {
        "items": [
            {
                "title": item.title,
                "quantity": item.quantity,
                "unit_price": _reais(item.unit_price_cents),
                "currency_id": CURRENCY,
                **({"picture_url": item.picture_url} if item.picture_url else {}),
            }
            for item in request.items
        ],
        "shipments": {"cost": _reais(request.shipping_cents), "mode": "not_specified"},
        "payer": {"name": request.payer_name, "email": request.payer_email},
        "back_urls": request.back_urls,
        "auto_return": "approved",
        "external_reference": request.external_reference,
    }
    if request.notification_url:
        body["notification_url"] = request.notification_url
    return body


class MercadoPagoClient:
    def __init__(
        self,
        access_token: str | None,
        base_url: str = "https://api.mercadopago.com",
        timeout: float = 10.0,
        use_sandbox: bool = False,
    ) -> None:
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.use_sandbox = use_sandbox

    def _headers(self, idempotency_key: str | None = None) -> dict[str, str]:
        if not self.access_token:
            raise PaymentGatewayError("Mercado Pago não configurado", transient=True)
        headers = {"Authorization": f"Bearer {self.access_token}"}
        if idempotency_key:
            headers["X-Idempotency-Key"] = idempotency_key
        return headers

    def create_preference(self, request: PreferenceRequest) -> Preference:
        url = f"{self.base_url}/checkout/preferences"
        headers = self._headers(idempotency_key=request.external_reference)
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(url, json=build_preference_body(request), headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as exc:
            logger.warning("Mercado Pago preference timeout order=%s", request.external_reference)
            raise PaymentGatewayError("Tempo esgotado ao falar com o Mercado Pago") from exc
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Mercado Pago preference failed order=%s status=%s body=%s",
                request.external_reference,
                exc.response.status_code,
                exc.response.text,
            )
            raise PaymentGatewayError(transient=exc.response.status_code >= 500) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Mercado Pago preference error order=%s: %s", request.external_reference, exc)
            raise PaymentGatewayError() from exc

        redirect = data.get("sandbox_init_point") if self.use_sandbox else data.get("init_point")
        redirect = redirect or data.get("init_point")
        if not redirect:
            raise PaymentGatewayError("Resposta do Mercado Pago sem link de pagamento", transient=False)
        return Preference(id=str(data.get("id") or ""), redirect_url=redirect)

    def get_payment(self, payment_id: str) -> PaymentInfo:
        url = f"{self.base_url}/v1/payments/{payment_id}"
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(url, headers=self._headers())
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            transient = status >= 500 or status in RETRYABLE_STATUS_CODES
            logger.warning("Mercado Pago payment fetch failed payment=%s status=%s", payment_id, status)
            raise PaymentGatewayError("Falha ao consultar pagamento", transient=transient) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Mercado Pago payment fetch error payment=%s: %s", payment_id, exc)
            raise PaymentGatewayError("Falha ao consultar pagamento") from exc

        external_reference = data.get("external_reference")
        return PaymentInfo(
            id=str(data.get("id") or payment_id),
            status=str(data.get("status") or ""),
            external_reference=str(external_reference) if external_reference else None,
        )


def get_payment_gateway() -> PaymentGateway:
    return MercadoPagoClient(
        access_token=settings.mp_access_token,
        base_url=settings.mp_api_base_url,
        timeout=settings.mp_timeout_seconds,
        use_sandbox=settings.mp_use_sandbox,
    )
