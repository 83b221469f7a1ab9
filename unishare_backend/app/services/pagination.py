import math

from sqlalchemy.orm import Query

from app.schemas.common import Pagination


def paginate(query: Query, page: int, limit: int) -> tuple[list, Pagination]:
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, Pagination(
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit),
    )
