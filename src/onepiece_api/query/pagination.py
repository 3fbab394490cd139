# src/onepiece_api/query/pagination.py
import math
from dataclasses import dataclass, field
from typing import Dict, Any, List

import pandas as pd


@dataclass(frozen=True)
class PaginationInfo:
    page: int
    limit: int
    total_items: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def compute(cls, page: int, limit: int, total_items: int) -> "PaginationInfo":
        """Derive page counts and navigation flags from the requested window and the match count."""
        total_pages = math.ceil(total_items / limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            total_items=total_items,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "totalItems": self.total_items,
            "totalPages": self.total_pages,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev
        }


@dataclass
class PaginatedResult:
    """One page of serialized entities plus its pagination metadata."""

    items: List[Dict[str, Any]] = field(default_factory=list)
    pagination: PaginationInfo = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": self.items,
            "pagination": self.pagination.to_dict() if self.pagination else None
        }

    def to_dataframe(self) -> pd.DataFrame:
        """
        Flatten the page into a DataFrame.

        Nested related rows become dotted columns (``race.name``); list-valued
        projections are kept as-is in a single cell.
        """
        if not self.items:
            return pd.DataFrame()
        return pd.json_normalize(self.items, sep=".")
