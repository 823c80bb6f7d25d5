"""
Shared list-query handling: page/limit bounds, sort validation and the
``pagination`` block returned with every list response.
"""

import math
from dataclasses import dataclass
from typing import Any, Optional, Type

from beanie import Document
from fastapi import Query
from pydantic import BaseModel

from callcoach_backend.exceptions import InvalidRequestError
from callcoach_backend.utils.casing import to_snake_path

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass
class ListParams:
    page: int = 1
    limit: int = DEFAULT_LIMIT
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def list_params(
    page: int = Query(1, ge=1, description="Page number, starting at 1"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Items per page"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="camelCase field path"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", description="'asc' or 'desc'"),
) -> ListParams:
    """FastAPI dependency collecting the common list query parameters."""
    return ListParams(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)


def _has_field_path(model: Type[BaseModel], path: str) -> bool:
    current: Any = model
    for part in path.split("."):
        fields = getattr(current, "model_fields", None)
        if not fields or part not in fields:
            return False
        annotation = fields[part].annotation
        current = _unwrap_model(annotation)
    return True


def _unwrap_model(annotation: Any) -> Any:
    # Optional[X] / List[X] -> X so nested paths can be followed
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    for arg in getattr(annotation, "__args__", ()) or ():
        found = _unwrap_model(arg)
        if found is not None:
            return found
    return None


def build_sort(model: Type[Document], params: ListParams, default_field: str) -> str:
    """
    Beanie sort expression (``"-field"`` for descending).

    ``sortBy`` is camelCase and must name a field of ``model``; ``sortOrder``
    ``asc`` sorts ascending, anything else descending.
    """
    if params.sort_by:
        field = to_snake_path(params.sort_by)
        if field in ("id", "_id"):
            field = "_id"
        elif not _has_field_path(model, field):
            raise InvalidRequestError(message=f"Invalid sort field: {params.sort_by}")
    else:
        field = default_field

    return field if params.sort_order == "asc" else f"-{field}"


def pagination_block(params: ListParams, total_items: int) -> dict:
    total_pages = math.ceil(total_items / params.limit) if total_items else 0
    return {
        "current": params.page,
        "total": total_pages,
        "limit": params.limit,
        "totalItems": total_items,
        "hasNext": params.page < total_pages,
        "hasPrev": params.page > 1,
    }


async def paginate(
    model: Type[Document],
    query_filter: dict,
    params: ListParams,
    default_sort: str,
) -> tuple[list, dict]:
    """Run a filtered, sorted, paged find and return ``(documents, pagination)``."""
    sort = build_sort(model, params, default_sort)
    documents = (
        await model.find(query_filter)
        .sort(sort)
        .skip(params.skip)
        .limit(params.limit)
        .to_list()
    )
    total_items = await model.find(query_filter).count()
    return documents, pagination_block(params, total_items)
