import json
from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from storefront.db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _load_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        return []
    return [str(item) for item in value] if isinstance(value, list) else []


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(String(120), nullable=False)
    slug: Mapped[str | None] = mapped_column(String(120), index=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class Product(Base):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    image_url: Mapped[str] = mapped_column(Text, default="", nullable=False)
    images_json: Mapped[str] = mapped_column(Text, default="[]", nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    material: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str | None] = mapped_column(String(120), index=True)
    sizes_json: Mapped[str] = mapped_column(Text, default="[]", nullable=False)
    colors_json: Mapped[str] = mapped_column(Text, default="[]", nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )

    @property
    def images(self) -> list[str]:
        return _load_list(self.images_json)

    @images.setter
    def images(self, value: list[str]) -> None:
        self.images_json = json.dumps(list(value or []))
        self.image_url = self.images[0] if self.images else ""

    @property
    def sizes(self) -> list[str]:
        return _load_list(self.sizes_json)

    @sizes.setter
    def sizes(self, value: list[str]) -> None:
        self.sizes_json = json.dumps(list(value or []))

    @property
    def colors(self) -> list[str]:
        return _load_list(self.colors_json)

    @colors.setter
    def colors(self, value: list[str]) -> None:
        self.colors_json = json.dumps(list(value or []))
