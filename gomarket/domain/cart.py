"""Cart line items and the snapshot codec."""
from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gomarket.core.exceptions import CartSnapshotException


class ProductDescriptor(BaseModel):
    """Product data as it arrives from the catalog, without a quantity."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Stable product identifier")
    title: str = Field(..., description="Display title")
    image_url: str = Field(..., alias="imageUrl", description="Product image URL")
    price: Union[int, float] = Field(..., description="Unit price, kept as supplied")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Catalog payloads sometimes carry numeric ids."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


DescriptorLike = Union[ProductDescriptor, Mapping[str, Any]]


@dataclass(frozen=True)
class CartItem:
    """Single line item in the cart."""

    id: str
    title: str
    image_url: str
    price: Union[int, float]
    quantity: int

    @classmethod
    def from_descriptor(cls, descriptor: ProductDescriptor, quantity: int = 1) -> CartItem:
        return cls(
            id=descriptor.id,
            title=descriptor.title,
            image_url=descriptor.image_url,
            price=descriptor.price,
            quantity=quantity,
        )

    def with_quantity(self, quantity: int) -> CartItem:
        return replace(self, quantity=quantity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "image_url": self.image_url,
            "price": self.price,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CartItem:
        return cls(
            id=data["id"],
            title=data["title"],
            image_url=data["image_url"],
            price=data["price"],
            quantity=data["quantity"],
        )


def to_descriptor(value: DescriptorLike) -> ProductDescriptor:
    """Accept either a descriptor or a plain catalog mapping."""
    if isinstance(value, ProductDescriptor):
        return value
    return ProductDescriptor.model_validate(dict(value))


def dump_cart(items: Iterable[CartItem]) -> str:
    """Serialize the full cart as a JSON array."""
    return json.dumps([item.to_dict() for item in items], ensure_ascii=False)


def load_cart(blob: str, key: str = "") -> tuple[CartItem, ...]:
    """Decode a snapshot produced by :func:`dump_cart`.

    Quantities and ids are taken as stored; the snapshot is trusted.
    """
    try:
        payload = json.loads(blob)
    except (TypeError, ValueError) as exc:
        raise CartSnapshotException(key, f"invalid JSON ({exc})") from exc

    if not isinstance(payload, list):
        raise CartSnapshotException(key, f"expected a list, got {type(payload).__name__}")

    items = []
    for index, raw in enumerate(payload):
        if not isinstance(raw, Mapping):
            raise CartSnapshotException(key, f"item {index} is not an object")
        try:
            items.append(CartItem.from_dict(raw))
        except KeyError as exc:
            raise CartSnapshotException(key, f"item {index} is missing field {exc}") from exc
    return tuple(items)
