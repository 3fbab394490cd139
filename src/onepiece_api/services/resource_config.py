# src/onepiece_api/services/resource_config.py
"""
Declarative description of a catalog resource.

A ``ResourceConfig`` is plain data: the model, the writable fields with their
validation rules, search/sort/filter settings, the delete guards, the
related rows projected on reads and the junction rows listed per entity.
``ResourceService`` interprets it.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple

from onepiece_api.core.exceptions import ErrorCode
from onepiece_api.query.filter_builder import FilterBuilder, FilterSpec, RangeSpec


class FieldKind(str, Enum):
    TEXT = "text"
    INTEGER = "integer"
    CHOICE = "choice"
    REFERENCE = "reference"


@dataclass(frozen=True)
class FieldSpec:
    """
    A writable column.

    ``REFERENCE`` fields hold the id of a row in ``references`` (a table name)
    and are checked for existence before writing.
    """

    name: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    max_length: Optional[int] = None
    min_value: Optional[int] = None
    choices: Tuple[str, ...] = ()
    references: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name.replace("_", " ")


@dataclass(frozen=True)
class ReferenceGuard:
    """Rows in ``table`` whose ``column`` points at the entity block its deletion."""

    table: str
    column: str
    error_code: ErrorCode = ErrorCode.IN_USE


@dataclass(frozen=True)
class Include:
    """Related rows serialized under ``key`` on read, restricted to ``fields``."""

    key: str
    attribute: str
    fields: Tuple[str, ...] = ('id', 'name')
    many: bool = False


@dataclass(frozen=True)
class Listing:
    """
    Rows of a junction table pointing at the entity, served under ``/{id}/<path>``.

    Each row carries its own columns plus the ``include`` projection of the
    entity it links to. ``order_by`` holds ``(column, "asc"|"desc")`` pairs.
    """

    path: str
    model: Any
    column: str
    include: Include
    order_by: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class ResourceConfig:
    key: str
    label: str
    model: Any
    fields: Tuple[FieldSpec, ...]
    search_columns: Tuple[str, ...] = ('name',)
    sortable: Tuple[str, ...] = ('name', 'created_at', 'updated_at')
    default_sort: str = 'name'
    filters: Tuple[FilterSpec, ...] = ()
    ranges: Tuple[RangeSpec, ...] = ()
    guards: Tuple[ReferenceGuard, ...] = ()
    includes: Tuple[Include, ...] = ()
    listings: Tuple[Listing, ...] = ()
    builder: FilterBuilder = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'builder', FilterBuilder(
            search_columns=self.search_columns,
            sortable=self.sortable,
            default_sort=self.default_sort,
            filters=self.filters,
            ranges=self.ranges
        ))

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.fields)

    def get_listing(self, path: str) -> Optional[Listing]:
        for listing in self.listings:
            if listing.path == path:
                return listing
        return None
