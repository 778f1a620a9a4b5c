from fastapi import Depends, Header
from jose import JWTError
from pydantic import BaseModel
from sqlalchemy.orm import Session

from storefront import models
from storefront.db import get_db
from storefront.errors import Forbidden, Unauthorized
from storefront.security import decode_access_token


class TokenData(BaseModel):
    sub: str
    is_admin: bool = False


def _extract_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    value = authorization.strip()
    if value.lower().startswith("bearer "):
        value = value.split(" ", 1)[1].strip()
    return value or None


def _decode_token(token: str) -> TokenData:
    try:
        payload = decode_access_token(token)
    except JWTError as exc:
        raise Unauthorized("Token inválido ou expirado.") from exc

    sub = payload.get("sub")
    if not sub:
        raise Unauthorized("Token inválido ou expirado.")
    return TokenData(sub=sub, is_admin=bool(payload.get("is_admin")))


def get_current_user(
    db: Session = Depends(get_db),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> models.User:
    token = _extract_token(authorization)
    if not token:
        raise Unauthorized()

    token_data = _decode_token(token)
    user = db.get(models.User, token_data.sub)
    if not user:
        raise Unauthorized("Usuário não encontrado")
    return user


def require_admin(user: models.User = Depends(get_current_user)) -> models.User:
    if not user.is_admin:
        raise Forbidden()
    return user
