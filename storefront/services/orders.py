from __future__ import annotations

import logging
from dataclasses import dataclass

from storefront import models
from storefront.domain.order.status import parse_order_status
from storefront.errors import InvalidPayload
from storefront.repository import OrderRepository
from storefront.services.notifications import notice_from_order
from storefront.services.order_message import OrderNotice

logger = logging.getLogger(__name__)


@dataclass
class StatusUpdateResult:
    order: models.Order
    shipped_notice: OrderNotice | None = None


def update_order_status(
    repo: OrderRepository,
    order_id: str,
    status_value: str,
    tracking_code: str | None = None,
) -> StatusUpdateResult:
    status = parse_order_status(status_value)
    if status is None:
        raise InvalidPayload(f"Status inválido: {status_value}")

    code = (tracking_code or "").strip() or None
    if status != models.OrderStatus.shipped:
        if code:
            logger.info("Tracking code ignored for order %s: status %s", order_id, status.value)
        code = None

    change = repo.update_status(order_id, status, tracking_code=code)
    order = change.order

    notice = None
    if status == models.OrderStatus.shipped:
        entered = change.previous_status != models.OrderStatus.shipped.value
        code_changed = code is not None and code != change.previous_tracking_code
        if entered or code_changed:
            notice = notice_from_order(order)
    logger.info(
        "Order %s status %s -> %s tracking=%s",
        order.id,
        change.previous_status,
        order.status,
        order.tracking_code,
    )
    return StatusUpdateResult(order=order, shipped_notice=notice)
