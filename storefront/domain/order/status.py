from __future__ import annotations

from storefront.domain.core.enums import GatewayPaymentStatus, OrderStatus

_GATEWAY_TO_ORDER_STATUS = {
    GatewayPaymentStatus.approved.value: OrderStatus.approved,
    GatewayPaymentStatus.rejected.value: OrderStatus.rejected,
}

# Origens permitidas para cada transição vinda do gateway. Pedido aprovado,
# enviado, entregue ou cancelado não volta atrás por causa de um webhook.
_GATEWAY_TRANSITION_SOURCES: dict[OrderStatus, tuple[OrderStatus, ...]] = {
    OrderStatus.approved: (OrderStatus.awaiting_payment, OrderStatus.rejected),
    OrderStatus.rejected: (OrderStatus.awaiting_payment,),
}


def order_status_for_gateway(gateway_status: str | None) -> OrderStatus:
    return _GATEWAY_TO_ORDER_STATUS.get((gateway_status or "").strip().lower(), OrderStatus.awaiting_payment)


def gateway_transition_sources(target: OrderStatus) -> tuple[OrderStatus, ...]:
    return _GATEWAY_TRANSITION_SOURCES.get(target, ())


def parse_order_status(value: str | None) -> OrderStatus | None:
    if not value:
        return None
    raw = value.strip()
    for status in OrderStatus:
        if raw == status.value or raw.lower() == status.name:
            return status
    return None
