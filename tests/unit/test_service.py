import asyncio

import pytest

from catalog_admin.domain.models import QueryResult
from catalog_admin.errors import EmptyResult, InvalidInput, RemoteFailure
from catalog_admin.preferences import InMemoryPreferenceStore
from catalog_admin.service import CatalogService
from catalog_admin.sources.memory import InMemoryProductSource

SAMPLE_SIZE = 20


class _SlowForSource(InMemoryProductSource):
    """Answers queries for one category after a delay, everything else at once."""

    def __init__(self, slow_category, delay):
        super().__init__()
        self.slow_category = slow_category
        self.delay = delay

    async def query(self, query_filter, sort, limit, page=None, page_size=None):
        if query_filter.category is not None and query_filter.category.value == self.slow_category:
            await asyncio.sleep(self.delay)
        return await super().query(query_filter, sort, limit, page, page_size)


class _BrokenSource:
    name = "broken"

    async def query(self, query_filter, sort, limit, page=None, page_size=None):
        raise RemoteFailure("store unreachable")


@pytest.fixture
def source():
    return InMemoryProductSource()


@pytest.fixture
def service(source, unit_settings):
    return CatalogService(source, preferences=InMemoryPreferenceStore(), settings=unit_settings)


@pytest.mark.asyncio
async def test_first_page_of_default_view(service):
    page = await service.request_view()

    assert [p.id for p in page.records] == list(range(1, 11))
    assert page.total == SAMPLE_SIZE
    assert (page.page, page.page_size) == (1, 10)


@pytest.mark.asyncio
async def test_filter_and_sort_reach_the_source(service):
    page = await service.request_view({"category": "books"}, {"field": "price", "order": "desc"}, 100)

    assert [p.id for p in page.records] == [19, 8, 14]
    assert page.total == 3


@pytest.mark.asyncio
async def test_page_changes_are_served_from_cache(service, source):
    pages = [await service.request_view(None, None, 100, page=n) for n in (1, 2, 3)]

    assert source.calls == 1
    assert [p.id for p in pages[1].records] == list(range(11, 21))
    assert pages[2].records == ()
    assert all(p.total == SAMPLE_SIZE for p in pages)


@pytest.mark.asyncio
async def test_total_is_clamped_to_the_fetch_limit(service):
    first = await service.request_view(None, None, 15, page=1)
    second = await service.request_view(None, None, 15, page=2)

    assert first.total == 15
    assert [p.id for p in second.records] == [11, 12, 13, 14, 15]


@pytest.mark.asyncio
async def test_total_is_clamped_to_the_view_hard_cap(source, unit_settings):
    settings = unit_settings.model_copy(update={"view_hard_cap": 5})
    service = CatalogService(source, settings=settings)

    page = await service.request_view(None, None, 1_000, page=1, page_size=3)

    assert page.total == 5
    assert [p.id for p in (await service.request_view(None, None, 1_000, page=2, page_size=3)).records] == [4, 5]


@pytest.mark.asyncio
async def test_stored_fetch_limit_is_the_default(source, unit_settings):
    prefs = InMemoryPreferenceStore({"fetch_limit": "5"})
    service = CatalogService(source, preferences=prefs, settings=unit_settings)

    page = await service.request_view()

    assert service.fetch_limit == 5
    assert page.total == 5


@pytest.mark.asyncio
async def test_set_fetch_limit_changes_next_view(service, source):
    await service.request_view()
    service.set_fetch_limit(3)
    page = await service.request_view()

    assert page.total == 3
    assert source.calls == 2


@pytest.mark.asyncio
async def test_sharp_s_and_ss_are_separate_views(product_factory, unit_settings):
    source = InMemoryProductSource([product_factory(1, name="Straße Map")])
    service = CatalogService(source, settings=unit_settings)

    exact = await service.request_view({"name": "Straße"}, None, 100)
    expanded = await service.request_view({"name": "STRASSE"}, None, 100)

    assert source.calls == 2
    assert [p.id for p in exact.records] == [1]
    assert expanded.records == ()
    assert expanded.total == 0


@pytest.mark.asyncio
async def test_invalid_paging_fails_before_io(service, source):
    with pytest.raises(InvalidInput):
        await service.request_view(None, None, 10, page=0)
    with pytest.raises(InvalidInput):
        await service.request_view(None, None, 10, page_size=0)

    assert source.calls == 0


@pytest.mark.asyncio
async def test_reload_refetches_and_returns_first_page(service, source):
    await service.request_view(None, None, 100, page=2)
    page = await service.reload(None, None, 100)

    assert source.calls == 2
    assert page.page == 1


@pytest.mark.asyncio
async def test_superseded_view_returns_none(unit_settings):
    source = _SlowForSource("books", delay=0.05)
    service = CatalogService(source, settings=unit_settings)

    stale, fresh = await asyncio.gather(
        service.request_view({"category": "books"}, None, 100),
        service.request_view({"category": "food"}, None, 100),
    )

    assert stale is None
    assert {p.category.value for p in fresh.records} == {"food"}


@pytest.mark.asyncio
async def test_remote_failure_propagates(unit_settings):
    service = CatalogService(_BrokenSource(), settings=unit_settings)

    with pytest.raises(RemoteFailure):
        await service.request_view()
    assert service.coordinator.cache.get() is None


@pytest.mark.asyncio
async def test_export_bypasses_view_cache(service):
    records = await service.request_export({"status": "soldout"}, None)

    assert [p.id for p in records] == [4, 10, 18]
    assert service.coordinator.cache.get() is None


@pytest.mark.asyncio
async def test_export_does_not_disturb_cached_view(service, source):
    await service.request_view(None, None, 100)
    before = service.coordinator.cache.get()

    await service.request_export({"category": "food"}, None)

    assert service.coordinator.cache.get() is before


@pytest.mark.asyncio
async def test_export_respects_export_cap_not_fetch_limit(source, unit_settings):
    settings = unit_settings.model_copy(update={"export_hard_cap": 7})
    service = CatalogService(source, preferences=InMemoryPreferenceStore({"fetch_limit": "2"}), settings=settings)

    records = await service.request_export()

    assert len(records) == 7


@pytest.mark.asyncio
async def test_empty_export_raises_notice(service):
    with pytest.raises(EmptyResult):
        await service.request_export({"name": "definitely not in the catalog"})


@pytest.mark.asyncio
async def test_export_to_file_writes_csv(service, tmp_path):
    target = tmp_path / "out" / "books.csv"

    path, rows = await service.export_to_file({"category": "books"}, {"field": "price"}, target)

    assert path == target
    assert rows == 3
    text = target.read_bytes().decode("utf-8-sig")
    lines = text.splitlines()
    assert lines[0].startswith("ID,Name,Category")
    assert lines[1].startswith("14,Design Thinking Handbook,Books,2800")


@pytest.mark.asyncio
async def test_export_to_file_default_path_uses_export_dir(service, unit_settings):
    path, _ = await service.export_to_file({"category": "food"})

    assert path.parent == unit_settings.export_dir
    assert path.name.startswith("products_") and path.suffix == ".csv"
    assert path.exists()
