# src/onepiece_api/query/__init__.py
from .filter_builder import (
    FilterBuilder,
    FilterKind,
    FilterSpec,
    RangeSpec,
    Condition,
    Operator,
    QueryOptions,
    QueryDescriptor
)
from .pagination import PaginationInfo, PaginatedResult

__all__ = [
    'FilterBuilder',
    'FilterKind',
    'FilterSpec',
    'RangeSpec',
    'Condition',
    'Operator',
    'QueryOptions',
    'QueryDescriptor',
    'PaginationInfo',
    'PaginatedResult'
]
