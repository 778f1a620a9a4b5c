"""
Webhook do Mercado Pago.

Resposta 200 encerra as tentativas do gateway; 500 pede reenvio (só para falha
transitória ao consultar o pagamento).
"""
import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import JSONResponse

from storefront import schemas
from storefront.errors import InvalidPayload, PaymentGatewayError
from storefront.repository import OrderRepository, get_order_repository
from storefront.services.notifications import OrderNotifier, get_notifier
from storefront.services.payment_gateway import PaymentGateway, get_payment_gateway
from storefront.services.payments import PAYMENT_ACTIONS, reconcile_payment

router = APIRouter(prefix="/api", tags=["webhook"])
logger = logging.getLogger(__name__)


@router.post("/webhook")
def mercadopago_webhook(
    payload: schemas.WebhookIn,
    background: BackgroundTasks,
    repo: OrderRepository = Depends(get_order_repository),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: OrderNotifier = Depends(get_notifier),
):
    if payload.action not in PAYMENT_ACTIONS:
        logger.info("Webhook ignored: action=%s type=%s", payload.action, payload.type)
        return {"ok": True}

    payment_id = payload.data.id if payload.data else None
    if payment_id is None or not str(payment_id).strip():
        raise InvalidPayload("Webhook sem data.id")

    try:
        result = reconcile_payment(repo, gateway, str(payment_id).strip())
    except PaymentGatewayError:
        logger.warning("Webhook payment=%s: gateway unavailable, asking for retry", payment_id)
        return JSONResponse(status_code=500, content={"ok": False})

    if result.confirmation is not None:
        background.add_task(notifier.payment_approved, result.confirmation)
    return {"ok": True}
