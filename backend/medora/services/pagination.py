"""Offset pagination shared by every list endpoint."""
import math
from typing import List, Tuple

from sqlalchemy.orm import Query

from medora.schemas.common import Pagination


def paginate(query: Query, page: int, limit: int) -> Tuple[List, Pagination]:
    """Run count + page queries. totalPages is ceil(total / limit)."""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, Pagination(
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if limit else 0,
    )
