from __future__ import annotations

import math
from dataclasses import dataclass

from portal.schemas.common import PaginationOut


@dataclass(frozen=True)
class PageInfo:
    limit: int
    offset: int
    total_count: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total_count

    @property
    def page(self) -> int:
        return self.offset // self.limit + 1

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.limit)

    def to_out(self) -> PaginationOut:
        return PaginationOut(
            limit=self.limit,
            offset=self.offset,
            page=self.page,
            total_pages=self.total_pages,
        )


def page_info(*, total_count: int, limit: int, offset: int) -> PageInfo:
    if limit < 1:
        raise ValueError("limit must be >= 1")
    if offset < 0:
        raise ValueError("offset must be >= 0")
    return PageInfo(limit=limit, offset=offset, total_count=total_count)
