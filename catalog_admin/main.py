from __future__ import annotations

import asyncio
import sys
from contextlib import asynccontextmanager, contextmanager
from pathlib import Path
from typing import AsyncIterator, Iterator, List, Optional

import typer
from rich.console import Console

from catalog_admin.config import get_settings
from catalog_admin.domain.models import (
    Category,
    ProductStatus,
    QueryFilter,
    SortField,
    SortOrder,
    SortSpec,
)
from catalog_admin.errors import (
    CatalogError,
    EmptyResult,
    InvalidInput,
    ProductNotFound,
    RemoteFailure,
)
from catalog_admin.infrastructure.db_factory import get_sync_connection
from catalog_admin.infrastructure.schema import ensure_schema
from catalog_admin.preferences import JsonFilePreferenceStore, load_fetch_limit, save_fetch_limit
from catalog_admin.reporter import print_page, print_product
from catalog_admin.repository import ProductRepository
from catalog_admin.service import CatalogService
from catalog_admin.sources.abstract import ProductSource
from catalog_admin.sources.memory import InMemoryProductSource
from catalog_admin.sources.postgres import PostgresProductSource
from catalog_admin.utils.logging import configure_logging

app = typer.Typer(help="Product catalog administration CLI.")
console = Console()

NameOpt = typer.Option(None, "--name", "-n", help="Case-insensitive name substring.")
CategoryOpt = typer.Option(None, "--category", "-c", help="Exact category.")
StatusOpt = typer.Option(None, "--status", help="Exact status.")
SortOpt = typer.Option(SortField.ID, "--sort", help="Sort column.")
OrderOpt = typer.Option(SortOrder.ASC, "--order", help="Sort direction.")
LimitOpt = typer.Option(
    None, "--limit", "-l", help="Records in scope for this view (default: saved fetch limit)."
)
PageSizeOpt = typer.Option(None, "--page-size", help="Rows per page (default from settings).")
DemoOpt = typer.Option(False, "--demo", help="Use the built-in sample catalog instead of Postgres.")


def _fail(message: str, code: int) -> None:
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code)


@contextmanager
def _cli_errors() -> Iterator[None]:
    """Map catalog errors to messages and exit codes."""
    try:
        yield
    except InvalidInput as exc:
        _fail(f"Invalid input: {exc}", 2)
    except ProductNotFound as exc:
        _fail(str(exc), 1)
    except RemoteFailure as exc:
        _fail(f"Store unavailable: {exc}", 1)
    except CatalogError as exc:
        _fail(str(exc), 1)


@asynccontextmanager
async def _open_source(demo: bool) -> AsyncIterator[ProductSource]:
    if demo:
        yield InMemoryProductSource()
        return
    source = PostgresProductSource()
    try:
        yield source
    finally:
        await source.close()


def _service(source: ProductSource) -> CatalogService:
    settings = get_settings()
    return CatalogService(source, preferences=JsonFilePreferenceStore(settings.preferences_path))


def _query(
    name: Optional[str],
    category: Optional[Category],
    status: Optional[ProductStatus],
    sort: SortField,
    order: SortOrder,
) -> tuple[QueryFilter, SortSpec]:
    return QueryFilter(name=name, category=category, status=status), SortSpec(field=sort, order=order)


@app.callback()
def configure(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging.")) -> None:
    settings = get_settings()
    configure_logging(level="DEBUG" if verbose else settings.log_level, json_logs=settings.log_json)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    fetch_limit = load_fetch_limit(
        JsonFilePreferenceStore(settings.preferences_path), settings.default_fetch_limit
    )
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"fetch_limit={fetch_limit} page_size={settings.default_page_size} "
        f"view_cap={settings.view_hard_cap} export_cap={settings.export_hard_cap} | "
        f"prefs={settings.preferences_path} exports={settings.export_dir}"
    )


@app.command("list")
def list_products(
    name: Optional[str] = NameOpt,
    category: Optional[Category] = CategoryOpt,
    status: Optional[ProductStatus] = StatusOpt,
    sort: SortField = SortOpt,
    order: SortOrder = OrderOpt,
    limit: Optional[int] = LimitOpt,
    page: int = typer.Option(1, "--page", "-p", help="1-indexed page."),
    page_size: Optional[int] = PageSizeOpt,
    demo: bool = DemoOpt,
) -> None:
    """
    Show one page of the product list.
    """
    query_filter, spec = _query(name, category, status, sort, order)

    async def _run():
        async with _open_source(demo) as source:
            service = _service(source)
            return await service.request_view(query_filter, spec, limit, page, page_size)

    with _cli_errors():
        result = asyncio.run(_run())
    if result is not None:
        print_page(result, console=console)


@app.command()
def browse(
    name: Optional[str] = NameOpt,
    category: Optional[Category] = CategoryOpt,
    status: Optional[ProductStatus] = StatusOpt,
    sort: SortField = SortOpt,
    order: SortOrder = OrderOpt,
    limit: Optional[int] = LimitOpt,
    page_size: Optional[int] = PageSizeOpt,
    demo: bool = DemoOpt,
) -> None:
    """
    Page through the list interactively.

    Page changes are served from the cached window; only `r` refetches.
    """
    query_filter, spec = _query(name, category, status, sort, order)

    async def _run() -> None:
        async with _open_source(demo) as source:
            service = _service(source)
            page = 1
            result = await service.request_view(query_filter, spec, limit, page, page_size)
            while result is not None:
                print_page(result, service.coordinator.stats, console=console)
                choice = typer.prompt("[n]ext [p]rev [g N]oto [r]eload [q]uit", default="n")
                command, _, arg = choice.strip().lower().partition(" ")
                if command == "q":
                    return
                if command == "r":
                    page = 1
                    result = await service.reload(query_filter, spec, limit, page_size)
                    continue
                if command == "n":
                    page += 1
                elif command == "p":
                    page = max(page - 1, 1)
                elif command == "g" and arg.strip().isdigit():
                    page = max(int(arg), 1)
                else:
                    console.print("[yellow]Unknown command.[/yellow]")
                    continue
                result = await service.request_view(query_filter, spec, limit, page, page_size)

    with _cli_errors():
        asyncio.run(_run())


@app.command()
def export(
    name: Optional[str] = NameOpt,
    category: Optional[Category] = CategoryOpt,
    status: Optional[ProductStatus] = StatusOpt,
    sort: SortField = SortOpt,
    order: SortOrder = OrderOpt,
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Target file (default: EXPORT_DIR/products_YYYYMMDD.csv)."
    ),
    demo: bool = DemoOpt,
) -> None:
    """
    Export every matching product to a spreadsheet file.
    """
    query_filter, spec = _query(name, category, status, sort, order)

    async def _run():
        async with _open_source(demo) as source:
            return await _service(source).export_to_file(query_filter, spec, output)

    with _cli_errors():
        try:
            path, rows = asyncio.run(_run())
        except EmptyResult as notice:
            typer.secho(f"Nothing to export: {notice}", fg=typer.colors.YELLOW)
            return
    typer.echo(f"Exported {rows:,} products to {path}")


@app.command()
def show(product_id: int = typer.Argument(..., help="Product id.")) -> None:
    """
    Show a single product.
    """
    with _cli_errors():
        product = ProductRepository().get(product_id)
    print_product(product, console=console)


@app.command()
def add(
    name: str = typer.Option(..., "--name", "-n"),
    category: Category = typer.Option(..., "--category", "-c"),
    price: int = typer.Option(..., "--price"),
    stock: int = typer.Option(0, "--stock"),
    status: ProductStatus = typer.Option(ProductStatus.ACTIVE, "--status"),
) -> None:
    """
    Add a product.
    """
    payload = {"name": name, "category": category, "price": price, "stock": stock, "status": status}
    with _cli_errors():
        product = ProductRepository().create(payload)
    typer.echo(f"Created product {product.id}.")
    print_product(product, console=console)


@app.command()
def update(
    product_id: int = typer.Argument(..., help="Product id."),
    name: Optional[str] = typer.Option(None, "--name", "-n"),
    category: Optional[Category] = typer.Option(None, "--category", "-c"),
    price: Optional[int] = typer.Option(None, "--price"),
    stock: Optional[int] = typer.Option(None, "--stock"),
    status: Optional[ProductStatus] = typer.Option(None, "--status"),
) -> None:
    """
    Change some fields of a product.
    """
    payload = {"name": name, "category": category, "price": price, "stock": stock, "status": status}
    with _cli_errors():
        product = ProductRepository().update(product_id, payload)
    print_product(product, console=console)


@app.command()
def delete(product_ids: List[int] = typer.Argument(..., help="One or more product ids.")) -> None:
    """
    Delete one or more products.
    """
    repo = ProductRepository()
    with _cli_errors():
        if len(product_ids) == 1:
            deleted = [repo.delete(product_ids[0]).id]
        else:
            deleted = repo.delete_many(product_ids)
    missing = sorted(set(product_ids) - set(deleted))
    typer.echo(f"Deleted {len(deleted)} product(s): {', '.join(map(str, deleted)) or '-'}")
    if missing:
        typer.secho(f"Not found: {', '.join(map(str, missing))}", fg=typer.colors.YELLOW)


@app.command()
def limit(value: Optional[int] = typer.Argument(None, help="New fetch limit to save.")) -> None:
    """
    Show or save the fetch limit used by list views.
    """
    settings = get_settings()
    prefs = JsonFilePreferenceStore(settings.preferences_path)
    if value is None:
        typer.echo(f"fetch_limit={load_fetch_limit(prefs, settings.default_fetch_limit)}")
        return
    with _cli_errors():
        saved = save_fetch_limit(prefs, value)
    typer.echo(f"fetch_limit={saved} (saved to {settings.preferences_path})")


@app.command("init-db")
def init_db() -> None:
    """
    Create the products table and indexes if missing.
    """
    conn = get_sync_connection()
    try:
        ensure_schema(conn)
    finally:
        conn.close()
    typer.echo("Schema ready.")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
