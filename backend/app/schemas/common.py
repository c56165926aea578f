"""
Shared schema building blocks.

All API payloads use camelCase field names on the wire and snake_case in
Python. Datetimes are normalised to naive UTC before they reach the database.
"""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UTCDatetime = Annotated[datetime, AfterValidator(_to_naive_utc)]


class CamelModel(BaseModel):
    """Base model that accepts and emits camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class StrictCamelModel(CamelModel):
    """Request body that rejects unknown fields."""

    model_config = ConfigDict(extra="forbid")


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
