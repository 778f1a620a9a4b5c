"""
Repositório de pedidos: única porta de leitura/escrita de Order usada pelos serviços.

Mudanças de status usam UPDATE condicional (compare-and-set): webhooks concorrentes
para o mesmo pagamento ou duas marcações de envio simultâneas não disparam o e-mail duas vezes.
"""
from __future__ import annotations

import re
from typing import Iterable, NamedTuple

from fastapi import Depends
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront import models
from storefront.db import get_db
from storefront.errors import AmbiguousReference, Conflict, DuplicateOrderId, NotFound

MIN_REFERENCE_SUFFIX = 6
STATUS_UPDATE_ATTEMPTS = 3
_REFERENCE_CHARS = re.compile(r"^[0-9a-f-]+$")


class StatusChange(NamedTuple):
    previous_status: str
    previous_tracking_code: str | None
    order: models.Order


class OrderRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def create(self, order: models.Order) -> models.Order:
        if self.db.get(models.Order, order.id) is not None:
            raise DuplicateOrderId(order.id)
        self.db.add(order)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateOrderId(order.id) from exc
        self.db.refresh(order)
        return order

    def get(self, order_id: str) -> models.Order | None:
        return self.db.get(models.Order, order_id)

    def find_by_reference(self, reference: str) -> models.Order:
        ref = (reference or "").strip().lower()
        if not ref:
            raise NotFound("Pedido não encontrado.")

        exact = self.get(ref) or self.get(reference.strip())
        if exact is not None:
            return exact

        if len(ref) < MIN_REFERENCE_SUFFIX or not _REFERENCE_CHARS.match(ref):
            raise NotFound("Pedido não encontrado.")

        matches = (
            self.db.query(models.Order)
            .filter(func.lower(models.Order.id).like(f"%{ref}"))
            .limit(2)
            .all()
        )
        if not matches:
            raise NotFound("Pedido não encontrado.")
        if len(matches) > 1:
            raise AmbiguousReference()
        return matches[0]

    def list_recent(self, status: models.OrderStatus | None = None) -> list[models.Order]:
        query = self.db.query(models.Order)
        if status is not None:
            query = query.filter(models.Order.status == status.value)
        return query.order_by(models.Order.created_at.desc(), models.Order.id.desc()).all()

    def update_status(
        self,
        order_id: str,
        status: models.OrderStatus,
        tracking_code: str | None = None,
    ) -> StatusChange:
        order = self.get(order_id)
        if order is None:
            raise NotFound("Pedido não encontrado")
        # O UPDATE só vale se status e rastreio ainda forem os lidos; assim cada
        # estado anterior é visto por uma única requisição.
        for _ in range(STATUS_UPDATE_ATTEMPTS):
            previous_status, previous_code = order.status, order.tracking_code
            values: dict = {models.Order.status: status.value}
            if tracking_code is not None:
                values[models.Order.tracking_code] = tracking_code
            same_code = (
                models.Order.tracking_code.is_(None)
                if previous_code is None
                else models.Order.tracking_code == previous_code
            )
            updated = (
                self.db.query(models.Order)
                .filter(models.Order.id == order_id, models.Order.status == previous_status, same_code)
                .update(values, synchronize_session=False)
            )
            self.db.commit()
            self.db.refresh(order)
            if updated == 1:
                return StatusChange(previous_status, previous_code, order)
        raise Conflict("Pedido alterado por outra requisição, tente novamente")

    def transition_status(
        self,
        order_id: str,
        target: models.OrderStatus,
        allowed_from: Iterable[models.OrderStatus],
        payment_id: str | None = None,
    ) -> bool:
        sources = [status.value for status in allowed_from]
        if not sources:
            return False
        values: dict = {models.Order.status: target.value}
        if payment_id is not None:
            values[models.Order.payment_id] = payment_id
        updated = (
            self.db.query(models.Order)
            .filter(models.Order.id == order_id, models.Order.status.in_(sources))
            .update(values, synchronize_session=False)
        )
        self.db.commit()
        return updated == 1


def get_order_repository(db: Session = Depends(get_db)) -> OrderRepository:
    return OrderRepository(db)
