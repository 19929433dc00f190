"""
Domain models for the catalog administration tool.

Defines the product schema aligned with the `products` table, the query
shapes (filter and sort) accepted by the list view, and the result
containers passed between the data sources, the cache and the CLI.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator


class Category(str, Enum):
    ELECTRONICS = "electronics"
    CLOTHING = "clothing"
    FOOD = "food"
    FURNITURE = "furniture"
    BOOKS = "books"


class ProductStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SOLDOUT = "soldout"


CATEGORY_LABELS: Dict[Category, str] = {
    Category.ELECTRONICS: "Electronics",
    Category.CLOTHING: "Clothing",
    Category.FOOD: "Food",
    Category.FURNITURE: "Furniture",
    Category.BOOKS: "Books",
}

STATUS_LABELS: Dict[ProductStatus, str] = {
    ProductStatus.ACTIVE: "On sale",
    ProductStatus.INACTIVE: "Hidden",
    ProductStatus.SOLDOUT: "Sold out",
}


class SortField(str, Enum):
    """Columns the list view may be sorted by."""

    ID = "id"
    PRICE = "price"
    STOCK = "stock"
    CREATED_AT = "createdAt"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


_SORT_FIELD_ALIASES = {"created_at": "createdAt", "createdat": "createdAt"}
_SORT_ORDER_ALIASES = {
    "asc": "asc",
    "ascend": "asc",
    "ascending": "asc",
    "desc": "desc",
    "descend": "desc",
    "descending": "desc",
}


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class Product(BaseModel):
    """
    Representation of a single row in the `products` table.

    `status == soldout` usually comes with `stock == 0`, but that is the
    producer's convention and is not validated here.
    """

    id: int = Field(..., description="Primary key.")
    name: str = Field(..., min_length=1, description="Display name.")
    category: Category = Field(..., description="Category tag.")
    price: int = Field(..., ge=0, description="Price in whole currency units.")
    stock: int = Field(0, ge=0, description="Units in stock.")
    status: ProductStatus = Field(ProductStatus.ACTIVE, description="Lifecycle status.")
    created_at: date = Field(..., alias="createdAt", description="Creation date.")
    updated_at: date = Field(..., alias="updatedAt", description="Last update date.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    @model_validator(mode="after")
    def _check_timestamps(self) -> "Product":
        if self.created_at > self.updated_at:
            raise ValueError("created_at must not be later than updated_at")
        return self


class ProductCreate(BaseModel):
    """Payload for adding a product; the store assigns id and dates."""

    name: str = Field(..., min_length=1)
    category: Category
    price: int = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    status: ProductStatus = ProductStatus.ACTIVE

    model_config = {"extra": "forbid"}


class ProductUpdate(BaseModel):
    """Partial update payload; unset fields keep their stored value."""

    name: Optional[str] = Field(None, min_length=1)
    category: Optional[Category] = None
    price: Optional[int] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    status: Optional[ProductStatus] = None

    model_config = {"extra": "forbid"}

    @field_validator("name", "category", "status", mode="before")
    @classmethod
    def _blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def changes(self) -> Dict[str, Any]:
        """Fields explicitly set to a value, as plain column values."""
        return self.model_dump(mode="json", exclude_none=True)


class QueryFilter(BaseModel):
    """
    List-view filter. Unset fields match everything.

    `name` is a case-insensitive substring match; `category` and `status`
    are exact matches. Blank strings count as unset.
    """

    name: Optional[str] = None
    category: Optional[Category] = None
    status: Optional[ProductStatus] = None

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("name", "category", "status", mode="before")
    @classmethod
    def _blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def matches(self, product: Product) -> bool:
        if self.name is not None and self.name.lower() not in product.name.lower():
            return False
        if self.category is not None and product.category != self.category:
            return False
        if self.status is not None and product.status != self.status:
            return False
        return True


class SortSpec(BaseModel):
    """Sort column and direction; defaults to ascending by id."""

    field: SortField = SortField.ID
    order: SortOrder = SortOrder.ASC

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("field", mode="before")
    @classmethod
    def _canonical_field(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        if value is None:
            return SortField.ID
        if isinstance(value, str):
            return _SORT_FIELD_ALIASES.get(value.lower(), value)
        return value

    @field_validator("order", mode="before")
    @classmethod
    def _canonical_order(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        if value is None:
            return SortOrder.ASC
        if isinstance(value, str):
            return _SORT_ORDER_ALIASES.get(value.lower(), value)
        return value

    @property
    def descending(self) -> bool:
        return self.order is SortOrder.DESC


@dataclass(frozen=True)
class QueryResult:
    """Records in scope for a query plus the store's full match count."""

    records: Tuple[Product, ...]
    total: int


@dataclass(frozen=True)
class PageResult:
    """One rendered page of the list view."""

    records: Tuple[Product, ...]
    total: int
    page: int
    page_size: int


__all__ = [
    "CATEGORY_LABELS",
    "STATUS_LABELS",
    "Category",
    "PageResult",
    "Product",
    "ProductCreate",
    "ProductStatus",
    "ProductUpdate",
    "QueryFilter",
    "QueryResult",
    "SortField",
    "SortOrder",
    "SortSpec",
]
