"""
In-memory product source.

Applies the same filter/sort/limit/page semantics as the PostgreSQL source
over a list held by the instance. Backs the CLI's `--demo` mode and the
unit tests; `latency` simulates a network round trip.
"""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Iterable, List, Optional

from catalog_admin.domain.models import (
    Category,
    Product,
    ProductStatus,
    QueryFilter,
    QueryResult,
    SortField,
    SortSpec,
)
from catalog_admin.sources.abstract import AbstractProductSource

_SORT_ATTRS = {
    SortField.ID: "id",
    SortField.PRICE: "price",
    SortField.STOCK: "stock",
    SortField.CREATED_AT: "created_at",
}


def _sample(
    pid: int, name: str, category: Category, price: int, stock: int,
    status: ProductStatus, created: str, updated: str,
) -> Product:
    return Product(
        id=pid,
        name=name,
        category=category,
        price=price,
        stock=stock,
        status=status,
        created_at=date.fromisoformat(created),
        updated_at=date.fromisoformat(updated),
    )


_E, _C, _FO, _FU, _B = (
    Category.ELECTRONICS,
    Category.CLOTHING,
    Category.FOOD,
    Category.FURNITURE,
    Category.BOOKS,
)
_ACT, _INA, _OUT = ProductStatus.ACTIVE, ProductStatus.INACTIVE, ProductStatus.SOLDOUT

SAMPLE_PRODUCTS: tuple[Product, ...] = (
    _sample(1, "MacBook Pro 14-inch", _E, 298000, 15, _ACT, "2024-01-15", "2024-03-01"),
    _sample(2, "iPhone 15 Pro", _E, 179800, 42, _ACT, "2024-02-10", "2024-03-05"),
    _sample(3, "Cashmere Sweater", _C, 35000, 8, _ACT, "2024-01-20", "2024-02-28"),
    _sample(4, "Organic Coffee Beans 1kg", _FO, 3500, 0, _OUT, "2024-02-01", "2024-03-10"),
    _sample(5, "Denim Jacket", _C, 18000, 23, _ACT, "2024-01-25", "2024-02-15"),
    _sample(6, "Nordic Dining Table", _FU, 89000, 5, _ACT, "2024-02-05", "2024-03-08"),
    _sample(7, "Wireless Earbuds", _E, 28000, 67, _ACT, "2024-01-30", "2024-03-02"),
    _sample(8, "Intro to Programming", _B, 3200, 120, _ACT, "2024-02-15", "2024-02-20"),
    _sample(9, "Leather Business Bag", _C, 45000, 12, _ACT, "2024-01-18", "2024-02-25"),
    _sample(10, "Ergonomic Office Chair", _FU, 68000, 0, _OUT, "2024-02-08", "2024-03-12"),
    _sample(11, "Smartwatch", _E, 52000, 35, _ACT, "2024-02-20", "2024-03-06"),
    _sample(12, "Matcha Set", _FO, 8500, 18, _ACT, "2024-01-22", "2024-02-18"),
    _sample(13, "Vintage Wine", _FO, 25000, 6, _INA, "2024-02-12", "2024-03-01"),
    _sample(14, "Design Thinking Handbook", _B, 2800, 45, _ACT, "2024-01-28", "2024-02-22"),
    _sample(15, "Modern Sofa 3-seater", _FU, 158000, 3, _ACT, "2024-02-18", "2024-03-09"),
    _sample(16, "4K Monitor 27-inch", _E, 65000, 28, _ACT, "2024-02-25", "2024-03-11"),
    _sample(17, "Organic Tea Set", _FO, 4200, 55, _ACT, "2024-01-12", "2024-02-10"),
    _sample(18, "Wool Coat", _C, 78000, 0, _OUT, "2024-02-03", "2024-03-07"),
    _sample(19, "AI Technology Explained", _B, 4500, 32, _ACT, "2024-02-28", "2024-03-04"),
    _sample(20, "Standing Desk", _FU, 45000, 14, _ACT, "2024-01-08", "2024-02-12"),
)


class InMemoryProductSource(AbstractProductSource):
    """Filter, sort and slice an in-memory product list."""

    name: str = "memory"

    def __init__(self, products: Optional[Iterable[Product]] = None, latency: float = 0.0) -> None:
        self.products: List[Product] = list(SAMPLE_PRODUCTS if products is None else products)
        self.latency = latency
        self.calls = 0

    def _select(self, query_filter: QueryFilter, sort: SortSpec) -> List[Product]:
        matched = sorted((p for p in self.products if query_filter.matches(p)), key=lambda p: p.id)
        attr = _SORT_ATTRS[sort.field]
        # Stable sort keeps id order among equal values, in both directions.
        matched.sort(key=lambda p: getattr(p, attr), reverse=sort.descending)
        return matched

    async def query(
        self,
        query_filter: QueryFilter,
        sort: SortSpec,
        limit: int,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> QueryResult:
        self.calls += 1
        if self.latency:
            await asyncio.sleep(self.latency)
        matched = self._select(query_filter, sort)
        offset, count = self.window(limit, page, page_size)
        return QueryResult(records=tuple(matched[offset : offset + count]), total=len(matched))


__all__ = ["SAMPLE_PRODUCTS", "InMemoryProductSource"]
