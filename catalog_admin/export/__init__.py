"""Bulk export: uncached fetch plus spreadsheet encoding."""

from catalog_admin.export.encoder import (
    EXPORT_COLUMNS,
    CsvExportEncoder,
    ExportEncoder,
    default_export_filename,
    write_artifact,
)
from catalog_admin.export.exporter import DEFAULT_EXPORT_HARD_CAP, BulkExporter

__all__ = [
    "DEFAULT_EXPORT_HARD_CAP",
    "EXPORT_COLUMNS",
    "BulkExporter",
    "CsvExportEncoder",
    "ExportEncoder",
    "default_export_filename",
    "write_artifact",
]
