import json

import pytest

from catalog_admin.cache.normalizer import KEY_SCHEMA, coerce_sort, normalize
from catalog_admin.domain.models import Category, QueryFilter, SortField, SortOrder, SortSpec
from catalog_admin.errors import CatalogError, InvalidInput


def test_key_ignores_parameter_insertion_order():
    a = normalize({"name": "mac", "category": "electronics"}, {"field": "price", "order": "desc"}, 50)
    b = normalize({"category": "electronics", "name": "mac"}, {"order": "desc", "field": "price"}, 50)
    assert a == b


def test_model_and_mapping_inputs_share_a_key():
    from_models = normalize(
        QueryFilter(category=Category.BOOKS), SortSpec(field=SortField.STOCK, order=SortOrder.DESC), 10
    )
    from_dicts = normalize({"category": "books"}, {"field": "stock", "order": "desc"}, 10)
    assert from_models == from_dicts


@pytest.mark.parametrize("blank", [{"name": ""}, {"name": "   "}, {"name": None}, {}, None])
def test_blank_filter_values_are_absent(blank):
    assert normalize(blank, None, 100) == normalize({}, None, 100)


def test_name_match_is_case_insensitive_in_key():
    assert normalize({"name": "MacBook"}, None, 10) == normalize({"name": "macbook"}, None, 10)


def test_name_lowering_does_not_merge_distinct_letters():
    # "ß".lower() stays "ß"; only casefold would turn it into "ss".
    assert normalize({"name": "ß"}, None, 10) != normalize({"name": "ss"}, None, 10)
    assert normalize({"name": "Straße"}, None, 10) != normalize({"name": "STRASSE"}, None, 10)


def test_default_sort_equals_explicit_id_ascending():
    explicit = normalize(None, {"field": "id", "order": "asc"}, 10)
    assert normalize(None, None, 10) == explicit
    assert normalize(None, {"field": ""}, 10) == explicit
    assert normalize(None, {}, 10) == explicit


def test_sort_aliases_collapse():
    assert normalize(None, {"field": "created_at", "order": "descend"}, 10) == normalize(
        None, {"field": "createdAt", "order": "desc"}, 10
    )
    assert coerce_sort({"order": "ASCENDING"}).order is SortOrder.ASC


def test_key_layout_follows_schema():
    key = normalize({"category": "books"}, {"field": "price", "order": "desc"}, 50)
    assert json.loads(key) == [None, "books", None, "price", "desc", 50]
    assert len(json.loads(key)) == len(KEY_SCHEMA)
    assert " " not in key


def test_distinct_queries_get_distinct_keys():
    base = normalize({"category": "books"}, None, 100)
    assert normalize({"category": "food"}, None, 100) != base
    assert normalize({"category": "books"}, None, 200) != base
    assert normalize({"category": "books"}, {"order": "desc"}, 100) != base


def test_non_ascii_names_are_kept_verbatim():
    key = normalize({"name": "Café"}, None, 10)
    assert "café" in key


@pytest.mark.parametrize("limit", [0, -5, 1.5, "10", True, None])
def test_invalid_limit_rejected(limit):
    with pytest.raises(InvalidInput):
        normalize(None, None, limit)


@pytest.mark.parametrize(
    "query_filter, sort",
    [
        ({"category": "toys"}, None),
        ({"status": "archived"}, None),
        ({"color": "red"}, None),
        (None, {"field": "name"}),
        (None, {"order": "sideways"}),
    ],
)
def test_invalid_filter_or_sort_rejected(query_filter, sort):
    with pytest.raises(InvalidInput) as excinfo:
        normalize(query_filter, sort, 10)
    assert isinstance(excinfo.value, CatalogError)
    assert isinstance(excinfo.value, ValueError)
