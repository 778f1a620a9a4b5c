from fastapi import APIRouter

from storefront import schemas
from storefront.domain.core.money import from_cents

router = APIRouter(prefix="/api", tags=["shipping"])

# Tabela fixa: CEPs que começam com 0 (Grande SP) pagam a taxa local.
LOCAL_POSTAL_PREFIX = "0"
LOCAL_SHIPPING_CENTS = 1000
DEFAULT_SHIPPING_CENTS = 2500


def shipping_cents_for_postal_code(cep: str | None) -> int:
    digits = "".join(ch for ch in (cep or "") if ch.isdigit())
    return LOCAL_SHIPPING_CENTS if digits.startswith(LOCAL_POSTAL_PREFIX) else DEFAULT_SHIPPING_CENTS


@router.post("/shipping", response_model=schemas.ShippingQuoteOut)
def shipping_quote(payload: schemas.ShippingQuoteIn):
    return schemas.ShippingQuoteOut(price=from_cents(shipping_cents_for_postal_code(payload.cep)))
