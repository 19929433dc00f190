"""
Pytest configuration for the catalog administration tool.

Provides fixtures for:
- Building products for unit tests
- Database connection management
- Test data seeding
- Settings override for integration tests
"""

from __future__ import annotations

import os
import tempfile
from datetime import date, timedelta
from pathlib import Path
from typing import Callable, Generator

import psycopg
import pytest

from catalog_admin.config import Settings
from catalog_admin.domain.models import Category, Product, ProductStatus
from catalog_admin.infrastructure.schema import ensure_schema

_CATEGORIES = list(Category)


@pytest.fixture
def product_factory() -> Callable[..., Product]:
    """
    Build products with predictable defaults.

    `product_factory(7)` gives id 7, name "Product 7", a category cycling
    through the enum, price 100 * id, and dates one day apart.
    """

    def make(pid: int, **overrides) -> Product:
        created = date(2024, 1, 1) + timedelta(days=pid)
        fields = {
            "id": pid,
            "name": f"Product {pid}",
            "category": _CATEGORIES[pid % len(_CATEGORIES)],
            "price": 100 * pid,
            "stock": pid % 7,
            "status": ProductStatus.ACTIVE,
            "created_at": created,
            "updated_at": created,
        }
        fields.update(overrides)
        return Product(**fields)

    return make


@pytest.fixture
def unit_settings(tmp_path: Path) -> Settings:
    """Settings with small caps and files under tmp_path."""
    return Settings(
        view_hard_cap=10_000,
        export_hard_cap=100_000,
        default_fetch_limit=1_000,
        default_page_size=10,
        preferences_path=tmp_path / "prefs.json",
        export_dir=tmp_path / "exports",
    )


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "catalog_admin"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def db_schema_initialized(db_connection: psycopg.Connection) -> bool:
    """
    Ensure the products table exists.
    """
    ensure_schema(db_connection)
    return True


@pytest.fixture(scope="function")
def clean_products_table(db_connection: psycopg.Connection, db_schema_initialized: bool):
    """
    Empty the products table before and after each test function.
    """
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.products RESTART IDENTITY;")
    db_connection.commit()
    yield
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.products RESTART IDENTITY;")
    db_connection.commit()


@pytest.fixture(scope="function")
def seeded_db_small(
    db_connection: psycopg.Connection,
    clean_products_table,
    test_dsn: str,
) -> int:
    """
    Seed a small catalog (100 products) for quick integration tests.

    Returns the number of products seeded.
    """
    from scripts.seed_products import _copy_into_db, _generate_products_csv

    with tempfile.TemporaryDirectory() as tmpdir:
        csv_path = Path(tmpdir) / "products.csv"
        _generate_products_csv(csv_path, rows=100, batch_size=50, seed=42)
        return _copy_into_db(test_dsn, csv_path)
