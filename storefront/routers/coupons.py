import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront import models, schemas
from storefront.auth.dependencies import require_admin
from storefront.db import get_db
from storefront.domain.core.money import from_cents, to_cents
from storefront.errors import Conflict, InvalidPayload, NotFound

router = APIRouter(prefix="/api", tags=["coupons"])


def _normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


@router.post("/coupons", response_model=schemas.CouponOut, status_code=status.HTTP_201_CREATED)
def create_coupon(
    payload: schemas.CouponIn,
    db: Session = Depends(get_db),
    _admin: models.User = Depends(require_admin),
):
    code = _normalize_code(payload.code)
    if not code:
        raise InvalidPayload("Código do cupom obrigatório")
    if db.query(models.Coupon).filter(models.Coupon.code == code).first():
        raise Conflict("Cupom já existe")
    coupon = models.Coupon(
        id=str(uuid.uuid4()),
        code=code,
        discount_cents=to_cents(payload.discount),
        free_shipping=payload.freeShipping,
    )
    db.add(coupon)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("Cupom já existe") from exc
    db.refresh(coupon)
    return schemas.CouponOut.from_coupon(coupon)


@router.get("/coupons", response_model=list[schemas.CouponOut])
def list_coupons(db: Session = Depends(get_db), _admin: models.User = Depends(require_admin)):
    coupons = db.query(models.Coupon).order_by(models.Coupon.code.asc()).all()
    return [schemas.CouponOut.from_coupon(c) for c in coupons]


@router.delete("/coupons/{coupon_id}")
def delete_coupon(
    coupon_id: str,
    db: Session = Depends(get_db),
    _admin: models.User = Depends(require_admin),
):
    coupon = db.get(models.Coupon, coupon_id)
    if not coupon:
        raise NotFound("Cupom não encontrado")
    db.delete(coupon)
    db.commit()
    return {"ok": True}


@router.post("/validate-coupon", response_model=schemas.CouponValidateOut, response_model_exclude_none=True)
def validate_coupon(payload: schemas.CouponValidateIn, db: Session = Depends(get_db)):
    code = _normalize_code(payload.code)
    if not code:
        return schemas.CouponValidateOut(valid=False)
    coupon = db.query(models.Coupon).filter(func.upper(models.Coupon.code) == code).first()
    if not coupon:
        return schemas.CouponValidateOut(valid=False)
    return schemas.CouponValidateOut(
        valid=True,
        discount=from_cents(coupon.discount_cents),
        freeShipping=coupon.free_shipping,
    )
