from sqlalchemy import select

from scripts.seed import DEFAULT_CATEGORIES, seed
from storefront import models
from storefront.security import verify_password


def test_seed_is_idempotent(db, monkeypatch):
    monkeypatch.setenv("ADMIN_EMAIL", "Dono@Fatal.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "senha-do-dono")

    seed(db)
    seed(db)

    users = db.scalars(select(models.User)).all()
    assert [(u.email, u.is_admin) for u in users] == [("dono@fatal.com", True)]
    assert verify_password("senha-do-dono", users[0].password_hash)
    categories = db.scalars(select(models.Category).order_by(models.Category.display_order)).all()
    assert [(c.title, c.slug) for c in categories] == DEFAULT_CATEGORIES


def test_seed_without_admin_credentials(db, monkeypatch):
    monkeypatch.delenv("ADMIN_EMAIL", raising=False)
    monkeypatch.delenv("ADMIN_PASSWORD", raising=False)

    seed(db)

    assert db.scalars(select(models.User)).all() == []
