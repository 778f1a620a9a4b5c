import logging
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront import models, schemas
from storefront.auth.dependencies import require_admin
from storefront.db import get_db
from storefront.errors import InvalidPayload, Unauthorized
from storefront.security import create_access_token, hash_password, verify_password

router = APIRouter(prefix="/api", tags=["auth"])
logger = logging.getLogger(__name__)

EMAIL_TAKEN = "Email já cadastrado"


@router.post("/register", response_model=schemas.MessageOut, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.RegisterIn, db: Session = Depends(get_db)):
    email = str(payload.email).strip().lower()
    if db.query(models.User).filter(models.User.email == email).first():
        raise InvalidPayload(EMAIL_TAKEN)
    user = models.User(
        id=str(uuid.uuid4()),
        name=payload.nome.strip(),
        email=email,
        password_hash=hash_password(payload.senha),
        is_admin=False,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise InvalidPayload(EMAIL_TAKEN) from exc
    return schemas.MessageOut(message="Registrado!")


@router.post("/login", response_model=schemas.LoginOut)
def login(payload: schemas.LoginIn, db: Session = Depends(get_db)):
    email = str(payload.email).strip().lower()
    user = db.query(models.User).filter(models.User.email == email).first()
    if not user or not verify_password(payload.senha, user.password_hash):
        logger.info("Login failed email=%s", email)
        raise Unauthorized("Credenciais inválidas")
    token = create_access_token({"sub": user.id, "is_admin": user.is_admin})
    return schemas.LoginOut(token=token, nome=user.name, isAdmin=user.is_admin)


@router.get("/users", response_model=list[schemas.UserOut])
def list_users(db: Session = Depends(get_db), _admin: models.User = Depends(require_admin)):
    users = db.query(models.User).order_by(models.User.created_at.desc()).all()
    return [schemas.UserOut.from_user(u) for u in users]
