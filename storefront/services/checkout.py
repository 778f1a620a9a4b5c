"""
Serviço de checkout: valida o carrinho, rateia o desconto, cria a preferência no
Mercado Pago e persiste o pedido aguardando pagamento.
O router de checkout deve apenas orquestrar (validar request, chamar este serviço, disparar notificações).
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from storefront import models, schemas
from storefront.db import settings
from storefront.domain.core.money import to_cents
from storefront.domain.order.pricing import CartLine, PricedLine, allocate_discount, cart_subtotal_cents
from storefront.errors import InvalidCart
from storefront.repository import OrderRepository
from storefront.services.notifications import notice_from_order
from storefront.services.order_message import OrderNotice
from storefront.services.payment_gateway import PaymentGateway, PreferenceItem, PreferenceRequest

logger = logging.getLogger(__name__)


@dataclass
class CheckoutResult:
    order_id: str
    payment_url: str
    notice: OrderNotice


def _gen_id() -> str:
    return str(uuid.uuid4())


def _cart_lines(payload: schemas.CheckoutIn) -> list[CartLine]:
    if not payload.itens:
        raise InvalidCart("Carrinho vazio")
    lines: list[CartLine] = []
    for item in payload.itens:
        if item.qty <= 0:
            raise InvalidCart(f"Quantidade inválida para {item.nome}")
        lines.append(
            CartLine(
                name=item.nome.strip(),
                unit_price_cents=to_cents(item.preco),
                quantity=item.qty,
                size=item.size,
                color=item.color,
                image_url=item.imagem,
                product_id=item.product_id,
            )
        )
    return lines


def _check_totals(lines: list[CartLine], shipping_cents: int, discount_cents: int, total_cents: int) -> int:
    subtotal = cart_subtotal_cents(lines)
    if discount_cents > subtotal:
        raise InvalidCart("Desconto maior que o valor dos produtos")
    expected = subtotal + shipping_cents - discount_cents
    if abs(expected - total_cents) > len(lines):
        raise InvalidCart("Total do carrinho não confere")
    return subtotal


def _build_order(
    order_id: str,
    payload: schemas.CheckoutIn,
    priced: list[PricedLine],
    subtotal_cents: int,
    shipping_cents: int,
    discount_cents: int,
    total_cents: int,
    payment_url: str,
) -> models.Order:
    customer = payload.cliente
    order = models.Order(
        id=order_id,
        customer_name=customer.nome,
        customer_email=str(customer.email),
        customer_address=customer.endereco,
        customer_phone=customer.telefone,
        customer_postal_code=customer.cep,
        subtotal_cents=subtotal_cents,
        shipping_cents=shipping_cents,
        discount_cents=discount_cents,
        total_cents=total_cents,
        status=models.OrderStatus.awaiting_payment.value,
        payment_url=payment_url,
    )
    order.items = [
        models.OrderItem(
            position=position,
            product_id=p.line.product_id,
            name=p.line.name,
            unit_price_cents=p.line.unit_price_cents,
            discounted_unit_price_cents=p.discounted_unit_price_cents,
            quantity=p.line.quantity,
            size=p.line.size,
            color=p.line.color,
            image_url=p.line.image_url,
        )
        for position, p in enumerate(priced)
    ]
    return order


def place_order(repo: OrderRepository, gateway: PaymentGateway, payload: schemas.CheckoutIn) -> CheckoutResult:
    lines = _cart_lines(payload)
    shipping_cents = to_cents(payload.frete)
    discount_cents = to_cents(payload.desconto)
    total_cents = to_cents(payload.total)
    subtotal_cents = _check_totals(lines, shipping_cents, discount_cents, total_cents)

    priced = allocate_discount(lines, discount_cents)
    order_id = _gen_id()

    # Falha aqui propaga PaymentGatewayError e nada é gravado.
    preference = gateway.create_preference(
        PreferenceRequest(
            external_reference=order_id,
            items=[
                PreferenceItem(
                    title=p.line.name,
                    quantity=p.line.quantity,
                    unit_price_cents=p.discounted_unit_price_cents,
                    picture_url=p.line.image_url,
                )
                for p in priced
            ],
            shipping_cents=shipping_cents,
            payer_name=payload.cliente.nome,
            payer_email=str(payload.cliente.email),
            back_urls=settings.mp_back_urls,
            notification_url=settings.mp_notification_url,
        )
    )

    order = repo.create(
        _build_order(
            order_id,
            payload,
            priced,
            subtotal_cents,
            shipping_cents,
            discount_cents,
            total_cents,
            preference.redirect_url,
        )
    )
    logger.info(
        "Order created id=%s preference=%s total_cents=%s items=%s",
        order.id,
        preference.id,
        order.total_cents,
        len(order.items),
    )
    return CheckoutResult(order_id=order.id, payment_url=preference.redirect_url, notice=notice_from_order(order))
