import json
import logging
import math
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from storefront import models, schemas
from storefront.auth.dependencies import require_admin
from storefront.db import get_db
from storefront.domain.core.money import to_cents
from storefront.errors import InvalidPayload, NotFound
from storefront.services.images import save_product_gallery, save_product_image
from storefront.storage import StorageBackend, get_storage_backend

router = APIRouter(prefix="/api", tags=["catalog"])
logger = logging.getLogger(__name__)


def _json_list(raw: Optional[str], field: str) -> Optional[List[str]]:
    """Campos de lista chegam como JSON em multipart ("[\"P\",\"M\"]")."""
    if raw is None:
        return None
    if not raw.strip():
        return []
    try:
        value = json.loads(raw)
    except ValueError as exc:
        raise InvalidPayload(f"{field} deve ser uma lista JSON") from exc
    if not isinstance(value, list):
        raise InvalidPayload(f"{field} deve ser uma lista JSON")
    return [str(item).strip() for item in value if str(item).strip()]


def _parse_price(raw: str) -> int:
    try:
        price = float(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidPayload("preco inválido") from exc
    if not math.isfinite(price) or price < 0:
        raise InvalidPayload("preco inválido")
    return to_cents(price)


def _get_product_or_404(db: Session, product_id: str) -> models.Product:
    product = db.get(models.Product, product_id)
    if not product:
        raise NotFound("Produto não encontrado")
    return product


# Products


@router.get("/products", response_model=list[schemas.ProductOut])
def list_products(categoria: Optional[str] = None, db: Session = Depends(get_db)):
    query = db.query(models.Product)
    if categoria:
        query = query.filter(models.Product.category == categoria)
    products = query.order_by(models.Product.created_at.desc()).all()
    return [schemas.ProductOut.from_product(p) for p in products]


@router.get("/products/{product_id}", response_model=schemas.ProductOut)
def get_product(product_id: str, db: Session = Depends(get_db)):
    return schemas.ProductOut.from_product(_get_product_or_404(db, product_id))


@router.post("/products", status_code=status.HTTP_201_CREATED)
def create_product(
    nome: str = Form(...),
    preco: str = Form(...),
    categoria: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    material: Optional[str] = Form(default=None),
    sizes: Optional[str] = Form(default=None),
    colors: Optional[str] = Form(default=None),
    imagens: List[UploadFile] = File(default=[]),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage_backend),
    _admin: models.User = Depends(require_admin),
):
    if not nome.strip():
        raise InvalidPayload("nome obrigatório")
    product = models.Product(
        id=str(uuid.uuid4()),
        name=nome.strip(),
        price_cents=_parse_price(preco),
        category=categoria,
        description=description,
        material=material,
    )
    product.sizes = _json_list(sizes, "sizes") or []
    product.colors = _json_list(colors, "colors") or []
    product.images = save_product_gallery(storage, imagens) if imagens else []
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("Product created id=%s images=%s", product.id, len(product.images))
    return {"success": True, "produto": schemas.ProductOut.from_product(product)}


@router.put("/products/{product_id}")
def update_product(
    product_id: str,
    nome: Optional[str] = Form(default=None),
    preco: Optional[str] = Form(default=None),
    categoria: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    material: Optional[str] = Form(default=None),
    sizes: Optional[str] = Form(default=None),
    colors: Optional[str] = Form(default=None),
    images: Optional[str] = Form(default=None),
    imagens: List[UploadFile] = File(default=[]),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage_backend),
    _admin: models.User = Depends(require_admin),
):
    product = _get_product_or_404(db, product_id)
    if nome is not None:
        if not nome.strip():
            raise InvalidPayload("nome obrigatório")
        product.name = nome.strip()
    if preco is not None:
        product.price_cents = _parse_price(preco)
    if categoria is not None:
        product.category = categoria
    if description is not None:
        product.description = description
    if material is not None:
        product.material = material
    parsed_sizes = _json_list(sizes, "sizes")
    if parsed_sizes is not None:
        product.sizes = parsed_sizes
    parsed_colors = _json_list(colors, "colors")
    if parsed_colors is not None:
        product.colors = parsed_colors

    # Novas fotos substituem a galeria; sem upload, "images" diz quais urls ficam.
    previous = product.images
    if imagens:
        product.images = save_product_gallery(storage, imagens)
    else:
        kept = _json_list(images, "images")
        if kept is not None:
            product.images = kept
    db.commit()
    db.refresh(product)
    for url in set(previous) - set(product.images):
        storage.delete_by_url(url)
    return {"message": "Produto atualizado!", "produto": schemas.ProductOut.from_product(product)}


@router.delete("/products/{product_id}")
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage_backend),
    _admin: models.User = Depends(require_admin),
):
    product = _get_product_or_404(db, product_id)
    urls = product.images
    db.delete(product)
    db.commit()
    for url in urls:
        storage.delete_by_url(url)
    return {"message": "Removido"}


@router.post("/upload")
def upload_image(
    image: UploadFile = File(...),
    storage: StorageBackend = Depends(get_storage_backend),
    _admin: models.User = Depends(require_admin),
):
    return {"imageUrl": save_product_image(storage, image)}


# Categories


@router.get("/categories", response_model=list[schemas.CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    categories = (
        db.query(models.Category)
        .order_by(models.Category.display_order.asc(), models.Category.title.asc())
        .all()
    )
    return [schemas.CategoryOut.from_category(c) for c in categories]


@router.post("/categories", response_model=schemas.CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: schemas.CategoryIn,
    db: Session = Depends(get_db),
    _admin: models.User = Depends(require_admin),
):
    category = models.Category(
        id=str(uuid.uuid4()),
        title=payload.title.strip(),
        slug=(payload.categoria or "").strip() or None,
        display_order=payload.order,
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    return schemas.CategoryOut.from_category(category)


@router.delete("/categories/{category_id}")
def delete_category(
    category_id: str,
    db: Session = Depends(get_db),
    _admin: models.User = Depends(require_admin),
):
    category = db.get(models.Category, category_id)
    if not category:
        raise NotFound("Categoria não encontrada")
    db.delete(category)
    db.commit()
    return {"ok": True}
