from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from storefront import models, schemas
from storefront.auth.dependencies import require_admin
from storefront.domain.order.status import parse_order_status
from storefront.errors import InvalidPayload
from storefront.repository import OrderRepository, get_order_repository
from storefront.services.notifications import OrderNotifier, get_notifier
from storefront.services.orders import update_order_status

router = APIRouter(prefix="/api", tags=["orders"])


@router.get("/public/orders/{reference}", response_model=schemas.PublicOrderOut)
def track_order(reference: str, repo: OrderRepository = Depends(get_order_repository)):
    order = repo.find_by_reference(reference)
    return schemas.PublicOrderOut.from_order(order)


@router.get("/orders", response_model=list[schemas.OrderOut])
def list_orders(
    status: Optional[str] = Query(default=None),
    repo: OrderRepository = Depends(get_order_repository),
    _admin: models.User = Depends(require_admin),
):
    status_filter = None
    if status:
        status_filter = parse_order_status(status)
        if status_filter is None:
            raise InvalidPayload(f"Status inválido: {status}")
    return [schemas.OrderOut.from_order(order) for order in repo.list_recent(status_filter)]


@router.put("/orders/{order_id}/status", response_model=schemas.OrderStatusOut)
def set_order_status(
    order_id: str,
    payload: schemas.OrderStatusIn,
    background: BackgroundTasks,
    repo: OrderRepository = Depends(get_order_repository),
    notifier: OrderNotifier = Depends(get_notifier),
    _admin: models.User = Depends(require_admin),
):
    result = update_order_status(repo, order_id, payload.status, payload.trackingCode)
    if result.shipped_notice is not None:
        background.add_task(notifier.order_shipped, result.shipped_notice)
    return schemas.OrderStatusOut(status=result.order.status, trackingCode=result.order.tracking_code)
