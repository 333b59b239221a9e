from typing import Tuple, List, Any
from sqlalchemy.orm import Query

from app.config import settings


def normalize_page(page: int = 1, limit: int = settings.DEFAULT_PAGE_SIZE) -> Tuple[int, int]:
    """Clamp page to >= 1 and limit to [1, MAX_PAGE_SIZE]"""
    page = max(page or 1, 1)
    if not limit or limit < 1:
        limit = settings.DEFAULT_PAGE_SIZE
    return page, min(limit, settings.MAX_PAGE_SIZE)


def paginate_query(query: Query, page: int = 1, limit: int = settings.DEFAULT_PAGE_SIZE) -> Tuple[int, List[Any]]:
    """
    Helper function to paginate SQLAlchemy queries in the database.
    Returns a tuple of (total_count, items)
    """
    page, limit = normalize_page(page, limit)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return total, items
