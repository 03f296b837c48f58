"""Filtered, sorted and paginated listings built from query-string parameters.

Query strings look like ``?average_cost[lte]=10000&housing=true&select=name,careers
&sort=-average_cost&page=2&limit=10``. Reserved parameters shape the result,
every other parameter filters on a record field.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Union, get_args, get_origin

from beanie import Document
from pydantic import BaseModel
from bson import ObjectId

from ..config import get_settings
from ..logging import get_logger
from ..models.schemas import BootcampListEnvelope, PageRef

settings = get_settings()
logger = get_logger("devcamper.advanced_results")

RESERVED_PARAMS = {"select", "sort", "page", "limit"}
OPERATORS = {"gt", "gte", "lt", "lte", "in", "ne"}
DEFAULT_SORT = "-created_at"
HIDDEN_FIELDS = {"publisher_slot", "revision_id"}

_FILTER_PARAM = re.compile(r"^(?P<field>\w+)(?:\[(?P<op>\w+)\])?$")
_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")


class ListQueryError(ValueError):
    """Raised for query parameters that cannot be turned into a store query."""


@dataclass
class ListQuery:
    """A parsed listing request."""
    filter: dict[str, Any] = field(default_factory=dict)
    projection: Optional[dict[str, int]] = None
    sort: list[tuple[str, int]] = field(default_factory=list)
    page: int = 1
    limit: int = 25

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def _scalar_type(annotation: Any) -> type:
    """Reduce ``Optional[X]`` and ``list[X]`` annotations to ``X``."""
    origin = get_origin(annotation)
    if origin is Union:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        return _scalar_type(args[0]) if len(args) == 1 else str
    if origin in (list, set, tuple):
        args = get_args(annotation)
        return _scalar_type(args[0]) if args else str
    if origin is not None:
        return origin
    return annotation if isinstance(annotation, type) else str


def field_types(model: type[BaseModel]) -> dict[str, type]:
    """Filterable fields of ``model`` mapped to the type their values compare as."""
    return {
        name: _scalar_type(info.annotation)
        for name, info in model.model_fields.items()
        if name not in HIDDEN_FIELDS and name != "id"
    }


def coerce_value(raw: str, kind: type, name: str = "value") -> Any:
    """Turn a query-string value into the type stored for a field."""
    if kind is bool:
        lowered = raw.lower()
        if lowered not in ("true", "false"):
            raise ListQueryError(f"{name} must be true or false")
        return lowered == "true"
    if kind in (int, float):
        if not _NUMBER.match(raw):
            raise ListQueryError(f"{name} must be a number")
        return float(raw) if "." in raw else int(raw)
    if kind is datetime:
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            raise ListQueryError(f"{name} must be an ISO 8601 timestamp")
    return raw


def _store_field(name: str, allowed: Mapping[str, type]) -> str:
    if name == "id":
        return "_id"
    if name not in allowed:
        raise ListQueryError(f"Unknown field: {name}")
    return name


def _filter_value(store_field: str, raw: str, allowed: Mapping[str, type]) -> Any:
    if store_field == "_id":
        if not ObjectId.is_valid(raw):
            raise ListQueryError(f"Invalid id: {raw}")
        return ObjectId(raw)
    return coerce_value(raw, allowed[store_field], store_field)


def build_filter(params: Iterable[tuple[str, str]], allowed: Mapping[str, type]) -> dict[str, Any]:
    """Build a Mongo filter from non-reserved query parameters."""
    query: dict[str, Any] = {}
    for key, raw in params:
        if key in RESERVED_PARAMS:
            continue
        match = _FILTER_PARAM.match(key)
        if not match:
            raise ListQueryError(f"Malformed filter: {key}")

        store_field = _store_field(match.group("field"), allowed)
        op = match.group("op")
        if op is None:
            query[store_field] = _filter_value(store_field, raw, allowed)
            continue
        if op not in OPERATORS:
            raise ListQueryError(f"Unsupported operator: {op}")

        if op == "in":
            value = [_filter_value(store_field, part, allowed) for part in raw.split(",") if part]
        else:
            value = _filter_value(store_field, raw, allowed)
        condition = query.setdefault(store_field, {})
        if not isinstance(condition, dict):
            raise ListQueryError(f"Conflicting filters for: {match.group('field')}")
        condition[f"${op}"] = value
    return query


def build_sort(sort: Optional[str], allowed: Mapping[str, type]) -> list[tuple[str, int]]:
    spec = []
    for part in (sort or DEFAULT_SORT).split(","):
        part = part.strip()
        if not part:
            continue
        direction = -1 if part.startswith("-") else 1
        spec.append((_store_field(part.lstrip("-"), allowed), direction))
    return spec


def build_projection(select: Optional[str], allowed: Mapping[str, type]) -> Optional[dict[str, int]]:
    if not select:
        return None
    fields = [_store_field(name.strip(), allowed) for name in select.split(",") if name.strip()]
    # "id" alone still narrows the result to ids
    return {name: 1 for name in fields if name != "_id"} or {"_id": 1}


def parse_list_query(
    params: Iterable[tuple[str, str]],
    allowed: Mapping[str, type],
    select: Optional[str] = None,
    sort: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = None,
) -> ListQuery:
    """Parse listing parameters into a ListQuery."""
    if page < 1:
        raise ListQueryError("page must be at least 1")
    if limit is None:
        limit = settings.pagination_default_limit
    if limit < 1:
        raise ListQueryError("limit must be at least 1")

    return ListQuery(
        filter=build_filter(params, allowed),
        projection=build_projection(select, allowed),
        sort=build_sort(sort, allowed),
        page=page,
        limit=min(limit, settings.pagination_max_limit),
    )


def serialize_record(raw: dict[str, Any]) -> dict[str, Any]:
    """Shape a raw store record for callers."""
    record = {"id": str(raw["_id"])}
    for key, value in raw.items():
        if key == "_id" or key in HIDDEN_FIELDS:
            continue
        record[key] = value
    return record


async def advanced_results(model: type[Document], query: ListQuery) -> BootcampListEnvelope:
    """Run a ListQuery against ``model``'s collection."""
    collection = model.get_motor_collection()

    total = await collection.count_documents(query.filter)
    cursor = collection.find(
        query.filter,
        query.projection,
        sort=query.sort or None,
        skip=query.skip,
        limit=query.limit,
    )
    records = [serialize_record(raw) for raw in await cursor.to_list(length=query.limit)]

    pagination: dict[str, PageRef] = {}
    if query.page * query.limit < total:
        pagination["next"] = PageRef(page=query.page + 1, limit=query.limit)
    if query.skip > 0:
        pagination["prev"] = PageRef(page=query.page - 1, limit=query.limit)

    logger.debug(
        "listing_served",
        model=model.__name__,
        filter=str(query.filter),
        page=query.page,
        count=len(records),
        total=total,
    )
    return BootcampListEnvelope(
        count=len(records),
        total=total,
        pagination=pagination,
        data=records,
    )
