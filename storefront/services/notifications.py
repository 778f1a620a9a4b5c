"""
Notificações por e-mail do ciclo do pedido.

Rodam como BackgroundTasks depois da resposta: falhas são logadas e engolidas,
nunca chegam ao cliente da API.
"""
from __future__ import annotations

import logging

from storefront import models
from storefront.db import settings
from storefront.services.mailer import Mailer, OutgoingEmail, SmtpMailer
from storefront.services.order_message import (
    SUBJECT_ORDER_RECEIVED,
    SUBJECT_ORDER_SHIPPED,
    SUBJECT_PAYMENT_APPROVED,
    OrderNotice,
    OrderNoticeItem,
    order_received_html,
    order_shipped_html,
    payment_approved_html,
)

logger = logging.getLogger(__name__)


def notice_from_order(order: models.Order) -> OrderNotice:
    return OrderNotice(
        order_id=order.id,
        customer_name=order.customer_name,
        customer_email=order.customer_email,
        customer_address=order.customer_address,
        total_cents=order.total_cents,
        items=tuple(OrderNoticeItem(name=item.name, quantity=item.quantity) for item in order.items),
        payment_url=order.payment_url,
        tracking_code=order.tracking_code,
    )


class OrderNotifier:
    def __init__(self, mailer: Mailer | None, sender: str) -> None:
        self.mailer = mailer
        self.sender = sender

    async def order_received(self, notice: OrderNotice) -> None:
        await self._deliver(notice, SUBJECT_ORDER_RECEIVED, order_received_html(notice))

    async def payment_approved(self, notice: OrderNotice) -> None:
        await self._deliver(notice, SUBJECT_PAYMENT_APPROVED, payment_approved_html(notice))

    async def order_shipped(self, notice: OrderNotice) -> None:
        await self._deliver(notice, SUBJECT_ORDER_SHIPPED, order_shipped_html(notice))

    async def _deliver(self, notice: OrderNotice, subject: str, html: str) -> None:
        if self.mailer is None:
            logger.info("E-mail skipped: SMTP not configured order=%s subject=%s", notice.order_id, subject)
            return
        email = OutgoingEmail(sender=self.sender, to=notice.customer_email, subject=subject, html=html)
        try:
            await self.mailer.send(email)
        except Exception:
            logger.exception("Failed to send e-mail order=%s subject=%s", notice.order_id, subject)


def get_notifier() -> OrderNotifier:
    mailer = None
    if settings.smtp_enabled:
        mailer = SmtpMailer(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            starttls=settings.smtp_starttls,
            timeout=settings.smtp_timeout_seconds,
        )
    return OrderNotifier(mailer, settings.mail_from)
