"""
Spreadsheet encoding for bulk exports.

Writes CSV with a UTF-8 byte-order mark so spreadsheet programs detect the
encoding, human labels in the header row and for category/status cells,
and ISO dates. Product names that would read as a formula are prefixed
with a quote.
"""

from __future__ import annotations

import asyncio
import csv
import io
from datetime import date
from pathlib import Path
from typing import Optional, Protocol, Sequence, runtime_checkable

from catalog_admin.domain.models import CATEGORY_LABELS, STATUS_LABELS, Product

EXPORT_COLUMNS = (
    ("id", "ID"),
    ("name", "Name"),
    ("category", "Category"),
    ("price", "Price"),
    ("stock", "Stock"),
    ("status", "Status"),
    ("created_at", "Created"),
    ("updated_at", "Updated"),
)


@runtime_checkable
class ExportEncoder(Protocol):
    extension: str

    async def encode(self, records: Sequence[Product]) -> bytes:
        ...


# Leading characters spreadsheet programs read as the start of a formula.
_FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")


def neutralize_text(value: str) -> str:
    """Prefix a quote so free text is never evaluated as a formula."""
    if value.startswith(_FORMULA_PREFIXES):
        return "'" + value
    return value


def _row(product: Product) -> list:
    return [
        product.id,
        neutralize_text(product.name),
        CATEGORY_LABELS.get(product.category, product.category.value),
        product.price,
        product.stock,
        STATUS_LABELS.get(product.status, product.status.value),
        product.created_at.isoformat(),
        product.updated_at.isoformat(),
    ]


class CsvExportEncoder:
    """Encode products as a labelled CSV document."""

    extension: str = "csv"

    def encode_sync(self, records: Sequence[Product]) -> bytes:
        buffer = io.StringIO(newline="")
        writer = csv.writer(buffer)
        writer.writerow([label for _, label in EXPORT_COLUMNS])
        writer.writerows(_row(p) for p in records)
        return buffer.getvalue().encode("utf-8-sig")

    async def encode(self, records: Sequence[Product]) -> bytes:
        # Exports can hold up to the export hard cap; keep the event loop free.
        return await asyncio.to_thread(self.encode_sync, records)


def default_export_filename(today: Optional[date] = None, extension: str = "csv") -> str:
    today = today or date.today()
    return f"products_{today:%Y%m%d}.{extension}"


def write_artifact(payload: bytes, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)
    return path


__all__ = [
    "EXPORT_COLUMNS",
    "CsvExportEncoder",
    "ExportEncoder",
    "default_export_filename",
    "neutralize_text",
    "write_artifact",
]
