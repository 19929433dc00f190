import csv
import io
from datetime import date

import pytest

from catalog_admin.domain.models import Category, ProductStatus
from catalog_admin.export.encoder import (
    EXPORT_COLUMNS,
    CsvExportEncoder,
    ExportEncoder,
    default_export_filename,
    write_artifact,
)


def _parse(payload: bytes):
    return list(csv.reader(io.StringIO(payload.decode("utf-8-sig"), newline="")))


def test_payload_starts_with_bom(product_factory):
    payload = CsvExportEncoder().encode_sync([product_factory(1)])
    assert payload.startswith(b"\xef\xbb\xbf")


def test_header_and_labelled_cells(product_factory):
    product = product_factory(
        4,
        name="Organic Coffee, Dark Roast",
        category=Category.FOOD,
        status=ProductStatus.SOLDOUT,
        stock=0,
    )
    rows = _parse(CsvExportEncoder().encode_sync([product]))

    assert rows[0] == [label for _, label in EXPORT_COLUMNS]
    assert rows[1] == [
        "4",
        "Organic Coffee, Dark Roast",
        "Food",
        "400",
        "0",
        "Sold out",
        product.created_at.isoformat(),
        product.updated_at.isoformat(),
    ]


@pytest.mark.parametrize(
    "name",
    ['=HYPERLINK("http://example.invalid","x")', "+1+2", "-2+3", "@SUM(A1)", "\tTabbed", "\rReturn"],
)
def test_formula_like_names_are_quoted(product_factory, name):
    rows = _parse(CsvExportEncoder().encode_sync([product_factory(1, name=name)]))
    assert rows[1][1] == "'" + name


def test_plain_names_are_untouched(product_factory):
    rows = _parse(CsvExportEncoder().encode_sync([product_factory(1, name="Wool Coat - Grey")]))
    assert rows[1][1] == "Wool Coat - Grey"


def test_empty_input_still_has_header():
    rows = _parse(CsvExportEncoder().encode_sync([]))
    assert len(rows) == 1


@pytest.mark.asyncio
async def test_async_encode_matches_sync(product_factory):
    encoder = CsvExportEncoder()
    records = [product_factory(i) for i in range(1, 6)]
    assert await encoder.encode(records) == encoder.encode_sync(records)


def test_encoder_satisfies_protocol():
    assert isinstance(CsvExportEncoder(), ExportEncoder)


def test_default_filename():
    assert default_export_filename(date(2024, 3, 1)) == "products_20240301.csv"
    assert default_export_filename(date(2024, 12, 31), extension="xlsx") == "products_20241231.xlsx"


def test_write_artifact_creates_parent_dirs(tmp_path):
    target = tmp_path / "a" / "b" / "out.csv"
    assert write_artifact(b"data", target) == target
    assert target.read_bytes() == b"data"
