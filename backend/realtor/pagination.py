from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass
class Page:
    items: list[Any]
    current_page: int
    page_size: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0

    def meta(self) -> dict[str, int]:
        return {
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "total": self.total,
            "pageSize": self.page_size,
        }


def paginate(db: Session, stmt: Select, *, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Page:
    """
    Run `stmt` (a `select(Entity)...` with filters and ordering) for one page.

    The total is counted over the same filters, ignoring ordering.
    """
    page = max(1, int(page))
    limit = max(1, min(MAX_PAGE_SIZE, int(limit)))
    total = db.execute(select(func.count()).select_from(stmt.order_by(None).subquery())).scalar_one()
    rows = db.execute(stmt.offset((page - 1) * limit).limit(limit)).unique().scalars().all()
    return Page(items=list(rows), current_page=page, page_size=limit, total=int(total or 0))
