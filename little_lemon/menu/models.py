from __future__ import annotations

from decimal import Decimal
from urllib.parse import urljoin, urlparse

from pydantic import AliasChoices, BaseModel, Field, field_validator


class MenuItem(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    price: str = ""
    image: str = ""
    category: str = ""
    id: int | None = None

    @field_validator("price", mode="before")
    @classmethod
    def price_as_text(cls, value: object) -> object:
        if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("category")
    @classmethod
    def normalize_category(cls, value: str) -> str:
        return value.lower()


class RemoteMenuItem(BaseModel):
    """One element of the remote `menu` array; the two payload variants
    name the title field differently."""

    id: int | None = None
    title: str = Field(..., min_length=1, validation_alias=AliasChoices("title", "name"))
    description: str = ""
    price: str | int | float = ""
    image: str = ""
    category: str = ""

    def to_menu_item(self) -> MenuItem:
        return MenuItem(
            id=self.id,
            title=self.title,
            description=self.description,
            price=self.price,
            image=self.image,
            category=self.category,
        )


class MenuEnvelope(BaseModel):
    menu: list[RemoteMenuItem]


def resolve_image_url(image: str, base_url: str) -> str:
    if not image or urlparse(image).scheme:
        return image
    return urljoin(base_url, image)
