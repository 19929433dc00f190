"""
Canonical cache keys for list-view queries.

`normalize` turns a (filter, sort, limit) triple into a compact JSON string
whose field order is fixed by `KEY_SCHEMA`, so two logically identical
queries always serialize identically regardless of how their parameters
were built. Validation happens here, before any I/O.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from catalog_admin.domain.models import QueryFilter, SortSpec
from catalog_admin.errors import InvalidInput

CacheKey = str

FilterInput = Union[QueryFilter, Mapping[str, Any], None]
SortInput = Union[SortSpec, Mapping[str, Any], None]

KEY_SCHEMA = (
    "filter.name",
    "filter.category",
    "filter.status",
    "sort.field",
    "sort.order",
    "limit",
)


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(part) for part in err["loc"]) or "value"
    return f"{loc}: {err['msg']}"


def coerce_filter(raw: FilterInput) -> QueryFilter:
    """Validate a filter given as a model, a mapping, or None."""
    if raw is None:
        return QueryFilter()
    if isinstance(raw, QueryFilter):
        return raw
    try:
        return QueryFilter.model_validate(dict(raw))
    except ValidationError as exc:
        raise InvalidInput(f"Invalid filter ({_first_error(exc)})") from exc


def coerce_sort(raw: SortInput) -> SortSpec:
    """Validate a sort spec given as a model, a mapping, or None."""
    if raw is None:
        return SortSpec()
    if isinstance(raw, SortSpec):
        return raw
    try:
        return SortSpec.model_validate(dict(raw))
    except ValidationError as exc:
        raise InvalidInput(f"Invalid sort ({_first_error(exc)})") from exc


def validate_limit(limit: Any) -> int:
    """Reject anything but a positive int. No clamping."""
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidInput(f"limit must be a positive integer, got {limit!r}")
    if limit <= 0:
        raise InvalidInput(f"limit must be a positive integer, got {limit}")
    return limit


def normalize(query_filter: FilterInput, sort: SortInput, limit: Any) -> CacheKey:
    """
    Derive the canonical cache key for a list-view query.

    Raises
    ------
    InvalidInput
        If the filter or sort does not validate, or `limit` is not a
        positive integer.
    """
    qf = coerce_filter(query_filter)
    spec = coerce_sort(sort)
    values: list[Optional[Any]] = [
        qf.name.lower() if qf.name is not None else None,
        qf.category.value if qf.category is not None else None,
        qf.status.value if qf.status is not None else None,
        spec.field.value,
        spec.order.value,
        validate_limit(limit),
    ]
    return json.dumps(values, ensure_ascii=False, separators=(",", ":"))


__all__ = [
    "KEY_SCHEMA",
    "CacheKey",
    "FilterInput",
    "SortInput",
    "coerce_filter",
    "coerce_sort",
    "normalize",
    "validate_limit",
]
