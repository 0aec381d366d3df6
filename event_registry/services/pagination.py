from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from event_registry.schemas.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


def normalize_page(page: int | None, limit: int | None) -> tuple[int, int]:
    """Clamp page to >= 1 and limit to 1..MAX_PAGE_SIZE."""
    page = max(1, page or 1)
    limit = min(max(1, limit or DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)
    return page, limit


def count_rows(db: Session, stmt: Select) -> int:
    """Count the rows ``stmt`` would return, ignoring ordering."""
    total = db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    return int(total or 0)


def page_slice(stmt: Select, page: int, limit: int) -> Select:
    return stmt.offset((page - 1) * limit).limit(limit)
