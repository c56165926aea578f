"""
Response envelope helpers.

Every successful endpoint answers with:

    {"success": true, "message": "...", "statusCode": 200, "data": ...}

Paginated lists add ``pagination: {page, limit, total, pages}``. Pydantic
models anywhere inside ``data`` are dumped with their camelCase aliases.
"""

import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from backend.app.schemas.common import Pagination


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, dict):
        return {key: _dump(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_dump(item) for item in value]
    return value


def success_response(message: str, data: Optional[Any] = None, status_code: int = 200) -> Dict[str, Any]:
    response = {
        "success": True,
        "message": message,
        "statusCode": status_code,
    }
    if data is not None:
        response["data"] = _dump(data)
    return response


def paginated_response(
    items: List[Any],
    page: int,
    limit: int,
    total: int,
    message: str = "Data retrieved successfully"
) -> Dict[str, Any]:
    pagination = Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)
    return {
        "success": True,
        "message": message,
        "statusCode": 200,
        "data": _dump(items),
        "pagination": pagination.model_dump(),
    }
