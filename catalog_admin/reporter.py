from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from catalog_admin.cache.coordinator import CoordinatorStats
from catalog_admin.cache.slicer import page_count
from catalog_admin.domain.models import (
    CATEGORY_LABELS,
    STATUS_LABELS,
    PageResult,
    Product,
    ProductStatus,
)

_STATUS_STYLES = {
    ProductStatus.ACTIVE: "green",
    ProductStatus.INACTIVE: "dim",
    ProductStatus.SOLDOUT: "red",
}


def format_price(price: int) -> str:
    return f"¥{price:,}"


def _status_cell(product: Product) -> str:
    style = _STATUS_STYLES.get(product.status, "")
    return f"[{style}]{STATUS_LABELS[product.status]}[/{style}]" if style else STATUS_LABELS[product.status]


def _stock_cell(product: Product) -> str:
    return f"[red]{product.stock}[/red]" if product.stock == 0 else str(product.stock)


def build_page_table(page: PageResult, stats: Optional[CoordinatorStats] = None) -> Table:
    """
    Render one list-view page as a rich table.

    The caption shows the visible range out of the reported total and, when
    `stats` is given, how many views were served from cache.
    """
    pages = page_count(page.total, page.page_size)
    first = (page.page - 1) * page.page_size + 1 if page.records else 0
    last = first + len(page.records) - 1 if page.records else 0
    caption = f"Showing {first}-{last} of {page.total:,} | page {page.page}/{max(pages, 1)}"
    if stats is not None:
        caption += f" | cache hits {stats.hits}, fetches {stats.misses}"

    table = Table(title="Products", box=box.ROUNDED, caption=caption)
    table.add_column("ID", justify="right", style="cyan", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Category")
    table.add_column("Price", justify="right", style="magenta")
    table.add_column("Stock", justify="right")
    table.add_column("Status")
    table.add_column("Created", style="dim")
    table.add_column("Updated", style="dim")

    for product in page.records:
        table.add_row(
            str(product.id),
            product.name,
            CATEGORY_LABELS[product.category],
            format_price(product.price),
            _stock_cell(product),
            _status_cell(product),
            product.created_at.isoformat(),
            product.updated_at.isoformat(),
        )
    return table


def print_page(
    page: PageResult,
    stats: Optional[CoordinatorStats] = None,
    console: Optional[Console] = None,
) -> None:
    console = console or Console()
    if not page.records:
        console.print("[yellow]No products on this page.[/yellow]")
        if page.total:
            console.print(f"[dim]{page.total:,} products in scope.[/dim]")
        return
    console.print(build_page_table(page, stats))


def print_product(product: Product, console: Optional[Console] = None) -> None:
    console = console or Console()
    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("ID", str(product.id))
    table.add_row("Name", product.name)
    table.add_row("Category", CATEGORY_LABELS[product.category])
    table.add_row("Price", format_price(product.price))
    table.add_row("Stock", _stock_cell(product))
    table.add_row("Status", _status_cell(product))
    table.add_row("Created", product.created_at.isoformat())
    table.add_row("Updated", product.updated_at.isoformat())
    console.print(table)
