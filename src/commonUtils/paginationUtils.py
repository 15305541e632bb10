import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Type

from beanie import Document

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

# Largest skip the server accepts (signed 64-bit)
MAX_SKIP = 2 ** 63 - 1

_LEADING_INT = re.compile(r"^\s*(-?)\+?(\d+)")


@dataclass(frozen=True)
class PagePlan:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def _positive_int(raw: Any, default: int) -> int:
    """Parse the leading integer of ``raw`` (``"3.5"`` is 3), falling back to ``default``."""
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        value = raw
    else:
        match = _LEADING_INT.match(str(raw))
        if not match or match.group(1):
            return default
        digits = match.group(2)
        # Anything this long is past every page; keeps int() off huge digit strings
        value = int(digits) if len(digits) <= 20 else MAX_SKIP
    return value if value > 0 else default


def plan_page(page: Any = None, limit: Any = None) -> PagePlan:
    """Limit is capped at MAX_LIMIT; page is capped so the skip stays representable."""
    limit = min(_positive_int(limit, DEFAULT_LIMIT), MAX_LIMIT)
    page = min(_positive_int(page, DEFAULT_PAGE), MAX_SKIP // limit + 1)
    return PagePlan(page=page, limit=limit)


def build_meta(plan: PagePlan, total: int, count: int) -> Dict[str, int]:
    return {
        "count": count,
        "total": total,
        "totalPages": math.ceil(total / plan.limit),
        "currentPage": plan.page,
        "itemsPerPage": plan.limit,
    }


async def fetch_page(
        model: Type[Document],
        predicate: Dict[str, Any],
        plan: PagePlan,
        sort: Optional[List[Tuple[str, int]]] = None,
) -> Tuple[List[Document], Dict[str, int]]:
    """Run ``predicate`` against ``model`` windowed by ``plan``; total is counted unwindowed."""
    total = await model.find(predicate).count()

    query = model.find(predicate)
    if sort:
        query = query.sort(*sort)
    items = await query.skip(plan.skip).limit(plan.limit).to_list()

    return items, build_meta(plan, total, len(items))
