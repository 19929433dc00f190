"""
Product seeding script for the catalog administration tool.

Generates deterministic pseudo-random products from per-category name
templates, writes them to CSV, and loads them into Postgres with COPY.
"""

from __future__ import annotations

import csv
import random
import sys
import tempfile
import time
from datetime import date, timedelta
from pathlib import Path

import psycopg
import typer

from catalog_admin.config import build_dsn
from catalog_admin.infrastructure.schema import ensure_schema

app = typer.Typer(help="Generate sample products and load them into Postgres (CSV + COPY).")

PRODUCT_TEMPLATES: dict[str, list[str]] = {
    "electronics": [
        "Wireless Earbuds", "Smartwatch", "Tablet", "Laptop", "Monitor",
        "Keyboard", "Mouse", "Webcam", "Speaker", "Headphones",
        "Charger", "Power Bank", "USB Hub", "SSD", "Memory Card",
        "Smartphone", "Gaming PC", "Projector", "Router", "NAS",
    ],
    "clothing": [
        "T-Shirt", "Jeans", "Jacket", "Coat", "Sweater",
        "Hoodie", "Shirt", "Skirt", "Dress", "Cardigan",
        "Down Jacket", "Trench Coat", "Chinos", "Slacks", "Blouse",
        "Polo Shirt", "Sweatshirt", "Vest", "Shorts", "Leggings",
    ],
    "food": [
        "Organic Coffee", "Tea Set", "Matcha", "Wine", "Olive Oil",
        "Honey", "Chocolate", "Mixed Nuts", "Dried Fruit", "Granola",
        "Pasta Set", "Spice Set", "Jam", "Maple Syrup", "Green Tea",
        "Herbal Tea", "Cookies", "Cheese", "Sausage", "Bacon",
    ],
    "furniture": [
        "Office Chair", "Desk", "Sofa", "Bed", "Bookshelf",
        "TV Stand", "Dining Table", "Cabinet", "Shelf", "Dresser",
        "Side Table", "Recliner", "Stool", "Hanger Rack", "Shoe Rack",
        "Computer Desk", "Gaming Chair", "Floor Lamp", "Carpet", "Cushion",
    ],
    "books": [
        "Intro to Programming", "Business Book", "Novel", "Cookbook", "Travel Guide",
        "Technical Book", "Self-Help Book", "Comic", "Picture Book", "Dictionary",
        "Intro to AI", "Data Science", "Web Development", "Design Thinking", "Marketing",
        "Intro to Psychology", "History Book", "Popular Science", "Health Book", "Investing 101",
    ],
}

BRANDS = ["Premium", "Standard", "Pro", "Basic", "Deluxe", "Eco", "High-End", "Entry"]
ADJECTIVES = ["Quality", "Latest", "Popular", "Limited", "Select", "Recommended", "New", "Classic"]
# Weighted: two thirds active.
STATUSES = ["active", "active", "active", "active", "inactive", "soldout"]

PRICE_RANGES: dict[str, tuple[int, int]] = {
    "electronics": (3_000, 300_000),
    "clothing": (2_000, 100_000),
    "food": (500, 30_000),
    "furniture": (5_000, 200_000),
    "books": (800, 10_000),
}

CREATED_FROM = date(2023, 1, 1)
CREATED_UNTIL = date(2024, 6, 1)
UPDATED_UNTIL = date(2024, 12, 31)

CSV_HEADER = ["name", "category", "price", "stock", "status", "created_at", "updated_at"]


def _random_date(rng: random.Random, start: date, end: date) -> date:
    return start + timedelta(days=rng.randint(0, (end - start).days))


def _generate_product(rng: random.Random) -> list[str]:
    category = rng.choice(sorted(PRODUCT_TEMPLATES))
    base = rng.choice(PRODUCT_TEMPLATES[category])
    brand = rng.choice(BRANDS)
    adjective = rng.choice(ADJECTIVES)
    name = rng.choice(
        [
            f"{base} {brand}",
            f"{adjective} {base}",
            f"{brand} {base} {rng.randint(1, 9)}",
            f"{base} Ver.{rng.randint(1, 5)}",
            f"{adjective} {base} {brand}",
        ]
    )

    low, high = PRICE_RANGES[category]
    price = round(rng.randint(low, high) / 100) * 100
    status = rng.choice(STATUSES)
    stock = 0 if status == "soldout" else rng.randint(0, 200)

    created_at = _random_date(rng, CREATED_FROM, CREATED_UNTIL)
    updated_at = _random_date(rng, created_at, UPDATED_UNTIL)
    return [
        name,
        category,
        str(price),
        str(stock),
        status,
        created_at.isoformat(),
        updated_at.isoformat(),
    ]


def _generate_products_csv(csv_path: Path, rows: int, batch_size: int, seed: int) -> None:
    rng = random.Random(seed)

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)

        buffer: list[list[str]] = []
        for _ in range(rows):
            buffer.append(_generate_product(rng))
            if len(buffer) >= batch_size:
                writer.writerows(buffer)
                buffer.clear()
        if buffer:
            writer.writerows(buffer)


def _copy_into_db(dsn: str, csv_path: Path, truncate: bool = False) -> int:
    """Load the CSV with COPY; returns the number of rows in the table afterwards."""
    with psycopg.connect(dsn) as conn:
        ensure_schema(conn)
        with conn.cursor() as cur:
            if truncate:
                cur.execute("TRUNCATE TABLE public.products RESTART IDENTITY;")
            with cur.copy(
                f"""
                COPY public.products ({", ".join(CSV_HEADER)})
                FROM STDIN WITH (FORMAT csv, HEADER TRUE)
                """
            ) as copy:
                with csv_path.open("r", encoding="utf-8") as f:
                    for line in f:
                        copy.write(line)
            cur.execute("SELECT COUNT(*) FROM public.products;")
            count = cur.fetchone()[0]
        conn.commit()
    return count


@app.command()
def main(
    rows: int = typer.Option(
        1_000,
        "--rows",
        "-r",
        help="Number of products to generate.",
    ),
    batch_size: int = typer.Option(
        500,
        "--batch-size",
        "-b",
        help="Batch size for CSV buffering during generation.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Optional CSV output path (if omitted, a temp file will be used).",
    ),
    dsn: str | None = typer.Option(
        None,
        "--dsn",
        help="Optional DSN override for Postgres.",
    ),
    truncate: bool = typer.Option(
        True,
        "--truncate/--append",
        help="Clear existing products before loading.",
    ),
    no_load: bool = typer.Option(
        False,
        "--no-load",
        help="Only generate CSV; skip loading into Postgres.",
    ),
) -> None:
    """
    Generate sample products and optionally load them into Postgres using COPY.
    """
    start = time.perf_counter()
    if output:
        csv_path = output
        csv_path.parent.mkdir(parents=True, exist_ok=True)
    else:
        tmpdir = Path(tempfile.mkdtemp(prefix="catalog_seed_"))
        csv_path = tmpdir / "products.csv"

    typer.echo(f"Generating {rows:,} products -> {csv_path} (seed={seed})")
    _generate_products_csv(csv_path, rows=rows, batch_size=batch_size, seed=seed)
    typer.echo(f"CSV generation completed in {time.perf_counter() - start:.2f}s")

    if no_load:
        typer.echo("Skipping load (no-load flag set).")
        return

    typer.echo("Loading CSV into Postgres via COPY...")
    count = _copy_into_db(dsn or build_dsn(), csv_path, truncate=truncate)
    typer.echo(f"Load completed in {time.perf_counter() - start:.2f}s; table now holds {count:,} products.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
