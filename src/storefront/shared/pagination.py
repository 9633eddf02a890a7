"""Page of repository results with the metadata listings return."""

import math
from dataclasses import dataclass


@dataclass
class Page:
    items: list
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def metadata(self, noun: str) -> dict:
        return {
            "current_page": self.page,
            "total_pages": self.total_pages,
            f"total_{noun}": self.total,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }
