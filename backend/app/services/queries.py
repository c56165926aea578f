"""
Small query helpers shared by the services.
"""

from typing import Any, Dict, List, Tuple, Type

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import ResourceNotFoundError


async def get_or_404(db: AsyncSession, model: Type, object_id: int, resource: str):
    """Load ``model`` by primary key or raise a 404 named after ``resource``."""
    result = await db.execute(select(model).where(model.id == object_id))
    instance = result.scalar_one_or_none()
    if instance is None:
        raise ResourceNotFoundError(resource, object_id)
    return instance


async def paginate(
    db: AsyncSession, stmt: Select, page: int, limit: int, scalars: bool = True
) -> Tuple[List[Any], int]:
    """
    Run ``stmt`` for one page and count the full result.

    Single-entity statements return model instances; pass ``scalars=False``
    to get row tuples when selecting several entities.

    Returns:
        (rows for the page, total matching rows)
    """
    total = await db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    result = await db.execute(stmt.offset((page - 1) * limit).limit(limit))
    rows = result.scalars().all() if scalars else result.all()
    return list(rows), total or 0


async def count_by(db: AsyncSession, column, *criteria) -> Dict[str, int]:
    """Count rows grouped by an enum/str column, keyed by its string value."""
    stmt = select(column, func.count()).group_by(column)
    if criteria:
        stmt = stmt.where(*criteria)
    result = await db.execute(stmt)
    return {getattr(key, "value", key): count for key, count in result.all()}


async def count_where(db: AsyncSession, model: Type, *criteria) -> int:
    stmt = select(func.count()).select_from(model)
    if criteria:
        stmt = stmt.where(*criteria)
    return await db.scalar(stmt) or 0


def like(term: str) -> str:
    """Build a case-insensitive substring pattern for ``ilike``."""
    return f"%{term.strip()}%"
