import os
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront import models
from storefront.db import SessionLocal
from storefront.security import hash_password

DEFAULT_CATEGORIES = [
    ("Camisetas", "camisetas"),
    ("Moletons", "moletons"),
    ("Calças", "calcas"),
    ("Acessórios", "acessorios"),
]


def uid() -> str:
    return str(uuid.uuid4())


def get_or_create_admin(db: Session, email: str, password: str, name: str = "Admin") -> models.User:
    email = email.strip().lower()
    user = db.scalar(select(models.User).where(models.User.email == email))
    if user:
        user.is_admin = True
        return user
    user = models.User(
        id=uid(),
        name=name,
        email=email,
        password_hash=hash_password(password),
        is_admin=True,
    )
    db.add(user)
    db.flush()
    return user


def get_or_create_category(db: Session, title: str, slug: str, order: int) -> models.Category:
    category = db.scalar(select(models.Category).where(models.Category.slug == slug))
    if category:
        category.display_order = order
        return category
    category = models.Category(id=uid(), title=title, slug=slug, display_order=order)
    db.add(category)
    db.flush()
    return category


def seed(db: Session) -> None:
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    if email and password:
        get_or_create_admin(db, email, password)
    for order, (title, slug) in enumerate(DEFAULT_CATEGORIES):
        get_or_create_category(db, title, slug, order)
    db.commit()


def main() -> None:
    db = SessionLocal()
    try:
        seed(db)
        print("Seed concluído.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
