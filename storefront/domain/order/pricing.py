"""
Rateio proporcional do desconto do carrinho entre os itens.

O Mercado Pago só recebe preço unitário por item, então o desconto total precisa
virar um preço unitário menor em cada linha. A parcela de cada item é proporcional
ao preço de UMA unidade sobre o subtotal, e essa parcela é dividida pela quantidade:

    parcela = desconto * preco_unitario / subtotal
    preco_com_desconto = preco_unitario - parcela / quantidade

Valores em centavos; o resultado é arredondado para o centavo (half-up) e a
diferença de arredondamento entre itens não é redistribuída.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence


@dataclass(frozen=True)
class CartLine:
    name: str
    unit_price_cents: int
    quantity: int
    size: str | None = None
    color: str | None = None
    image_url: str | None = None
    product_id: str | None = None


@dataclass(frozen=True)
class PricedLine:
    line: CartLine
    discounted_unit_price_cents: int

    @property
    def total_cents(self) -> int:
        return self.discounted_unit_price_cents * self.line.quantity


def cart_subtotal_cents(lines: Sequence[CartLine]) -> int:
    return sum(line.unit_price_cents * line.quantity for line in lines)


def allocate_discount(lines: Sequence[CartLine], discount_cents: int) -> list[PricedLine]:
    subtotal = cart_subtotal_cents(lines)
    if subtotal <= 0 or discount_cents <= 0:
        return [PricedLine(line, line.unit_price_cents) for line in lines]

    priced: list[PricedLine] = []
    for line in lines:
        share = Decimal(discount_cents) * Decimal(line.unit_price_cents) / Decimal(subtotal)
        per_unit = share / Decimal(line.quantity)
        discounted = (Decimal(line.unit_price_cents) - per_unit).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        priced.append(PricedLine(line, max(int(discounted), 0)))
    return priced
