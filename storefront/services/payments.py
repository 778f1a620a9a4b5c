"""
Reconciliação de pagamentos a partir dos webhooks do Mercado Pago.

Do corpo do webhook só o id do pagamento é usado; status e external_reference
vêm sempre de uma nova consulta ao gateway.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from storefront import models
from storefront.domain.order.status import gateway_transition_sources, order_status_for_gateway
from storefront.errors import PaymentGatewayError
from storefront.repository import OrderRepository
from storefront.services.notifications import notice_from_order
from storefront.services.order_message import OrderNotice
from storefront.services.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)

PAYMENT_ACTIONS = {"payment.created", "payment.updated"}


@dataclass
class ReconcileResult:
    payment_id: str
    order_id: str | None = None
    status: str | None = None
    changed: bool = False
    confirmation: OrderNotice | None = None


def reconcile_payment(repo: OrderRepository, gateway: PaymentGateway, payment_id: str) -> ReconcileResult:
    try:
        payment = gateway.get_payment(payment_id)
    except PaymentGatewayError as exc:
        if exc.transient:
            raise
        logger.warning("Webhook ignored: payment %s could not be fetched (permanent)", payment_id)
        return ReconcileResult(payment_id=payment_id)

    result = ReconcileResult(payment_id=payment.id, order_id=payment.external_reference)
    if not payment.external_reference:
        logger.warning("Webhook ignored: payment %s without external_reference", payment.id)
        return result

    order = repo.get(payment.external_reference)
    if order is None:
        logger.warning(
            "Webhook for unknown order ref=%s payment=%s status=%s",
            payment.external_reference,
            payment.id,
            payment.status,
        )
        return result

    target = order_status_for_gateway(payment.status)
    result.status = order.status
    if target == models.OrderStatus.awaiting_payment:
        logger.info("Payment %s for order %s still %s", payment.id, order.id, payment.status)
        return result

    changed = repo.transition_status(
        order.id,
        target,
        allowed_from=gateway_transition_sources(target),
        payment_id=payment.id,
    )
    order = repo.get(order.id)
    result.status = order.status
    result.changed = changed
    if not changed:
        logger.info("Payment %s: order %s already %s, nothing to do", payment.id, order.id, order.status)
        return result

    logger.info("Order %s moved to %s via webhook payment=%s", order.id, target.value, payment.id)
    if target == models.OrderStatus.approved:
        result.confirmation = notice_from_order(order)
    return result
