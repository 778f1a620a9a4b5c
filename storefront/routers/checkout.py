"""
Router de checkout: orquestra request/response e o e-mail de pedido recebido em background.
Toda a lógica de negócio e persistência está em storefront.services.checkout.
"""
from fastapi import APIRouter, BackgroundTasks, Depends

from storefront import schemas
from storefront.repository import OrderRepository, get_order_repository
from storefront.services.checkout import place_order
from storefront.services.notifications import OrderNotifier, get_notifier
from storefront.services.payment_gateway import PaymentGateway, get_payment_gateway

router = APIRouter(prefix="/api", tags=["checkout"])


@router.post("/checkout", response_model=schemas.CheckoutOut)
def checkout(
    payload: schemas.CheckoutIn,
    background: BackgroundTasks,
    repo: OrderRepository = Depends(get_order_repository),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: OrderNotifier = Depends(get_notifier),
):
    result = place_order(repo, gateway, payload)
    background.add_task(notifier.order_received, result.notice)
    return schemas.CheckoutOut(url=result.payment_url, orderId=result.order_id)
