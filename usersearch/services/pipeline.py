"""Server-side query pipeline: offset, filter, sort, limit.

Stages always run in that order and each consumes the previous stage's
output. Parameters arrive as the raw query-string values and are parsed by
the stage that needs them, so a malformed ``limit`` is only reported once the
earlier stages have passed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Sequence

from usersearch.domain.models import OrderBy, OrderField, Record
from usersearch.services.exceptions import BadOrderFieldError, ParamError, RangeError

ABOUT_PREFIX = "about="
NAME_PREFIX = "name="

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")

_SORT_KEYS = {
    OrderField.ID: lambda record: record.id,
    OrderField.NAME: lambda record: record.name,
    OrderField.AGE: lambda record: record.age,
}


@dataclass(slots=True, frozen=True)
class SearchQuery:
    """Raw query parameters; ``None`` means the parameter was not sent."""

    limit: str | None = None
    offset: str | None = None
    query: str | None = None
    order_field: str | None = None
    order_by: str | None = None

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> "SearchQuery":
        return cls(
            limit=params.get("limit"),
            offset=params.get("offset"),
            query=params.get("query"),
            order_field=params.get("order_field"),
            order_by=params.get("order_by"),
        )


def run_query(records: Sequence[Record], query: SearchQuery) -> list[Record]:
    """Apply ``query`` to ``records`` and return the resulting page.

    ``records`` is never modified.
    """

    result = list(records)
    result = apply_offset(result, query.offset)
    result = apply_filter(result, query.query)
    result = apply_sort(result, query.order_field, query.order_by)
    return apply_limit(result, query.limit)


def apply_offset(records: list[Record], raw_offset: str | None) -> list[Record]:
    if not raw_offset:
        return records
    offset = _parse_int(raw_offset, "Offset convert to int")
    if offset < 0:
        raise ParamError("Offset must not be negative")
    if offset >= len(records):
        raise RangeError("offset is out of range for the list of users")
    return records[offset:]


def apply_filter(records: list[Record], raw_query: str | None) -> list[Record]:
    if not raw_query:
        return records
    if raw_query.startswith(ABOUT_PREFIX):
        needle = raw_query[len(ABOUT_PREFIX):]
        return [record for record in records if needle in record.about]
    if raw_query.startswith(NAME_PREFIX):
        needle = raw_query[len(NAME_PREFIX):]
        return [record for record in records if needle in record.name]
    # Unrecognized prefixes filter nothing.
    return records


def apply_sort(
    records: list[Record], order_field: str | None, raw_order_by: str | None
) -> list[Record]:
    if order_field and order_field not in OrderField.ALL:
        raise BadOrderFieldError(order_field)

    order_by = _parse_order_by(raw_order_by)
    if order_by is OrderBy.AS_IS:
        return records

    key = _SORT_KEYS[order_field or OrderField.NAME]
    return sorted(records, key=key, reverse=order_by is OrderBy.DESC)


def apply_limit(records: list[Record], raw_limit: str | None) -> list[Record]:
    if not raw_limit:
        return records
    limit = _parse_int(raw_limit, "Limit convert to int")
    if limit < 0:
        raise ParamError("Limit convert to int")
    return records[: min(limit, len(records))]


def _parse_order_by(raw_order_by: str | None) -> OrderBy:
    if not raw_order_by:
        return OrderBy.AS_IS
    value = _parse_int(raw_order_by, "OrderBy convert to int")
    try:
        return OrderBy(value)
    except ValueError as exc:
        raise ParamError("OrderBy must be one of -1, 0, 1") from exc


def _parse_int(raw: str, message: str) -> int:
    # ASCII digits with an optional sign; no "_" separators or whitespace
    if not _INT_PATTERN.fullmatch(raw):
        raise ParamError(message)
    return int(raw)


__all__ = [
    "ABOUT_PREFIX",
    "NAME_PREFIX",
    "SearchQuery",
    "apply_filter",
    "apply_limit",
    "apply_offset",
    "apply_sort",
    "run_query",
]
