# src/onepiece_api/query/filter_builder.py
"""
Turns raw query-string parameters into a validated query description.

``QueryOptions.from_params`` coerces pagination, search and sorting; the
``FilterBuilder`` of a resource validates its filters and produces a
``QueryDescriptor``, which knows how to render itself as SQLAlchemy clauses.
Pagination values are clamped, never rejected. Invalid filters raise
``InvalidFieldError`` with an ``INVALID_<PARAM>`` code.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import and_, or_, asc, desc

from onepiece_api.core.exceptions import InvalidFieldError

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

ASC = "ASC"
DESC = "DESC"

TRUE_VALUES = ('true', '1', 'yes')
FALSE_VALUES = ('false', '0', 'no')

RESERVED_PARAMS = ('page', 'limit', 'search', 'sortBy', 'sortOrder', 'sort_by', 'sort_order')


class FilterKind(str, Enum):
    ID = "id"
    AMOUNT = "amount"
    CHOICE = "choice"
    FLAG = "flag"


class Operator(str, Enum):
    EQ = "eq"
    NE = "ne"
    GE = "ge"
    LE = "le"


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class FilterSpec:
    """
    One accepted filter parameter.

    ``FLAG`` filters compare ``column`` against ``flag_value``: true means equal,
    false means not equal (``is_alive`` on the character status column).
    """

    param: str
    column: str
    kind: FilterKind
    choices: Tuple[str, ...] = ()
    flag_value: Any = None
    operator: Operator = Operator.EQ


@dataclass(frozen=True)
class RangeSpec:
    """A ``min_<name>``/``max_<name>`` pair over one numeric column."""

    name: str
    column: str

    @property
    def min_param(self) -> str:
        return f"min_{self.name}"

    @property
    def max_param(self) -> str:
        return f"max_{self.name}"


@dataclass(frozen=True)
class Condition:
    column: str
    operator: Operator
    value: Any


@dataclass
class QueryOptions:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    search: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    filters: Dict[str, str] = field(default_factory=dict)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "QueryOptions":
        """
        Build options from loosely typed query parameters.

        Args:
            params (Mapping[str, Any]): Raw query parameters

        Returns:
            QueryOptions: Page >= 1, limit in [1, 100], trimmed search
        """
        page = _to_int(params.get('page'))
        if page is None or page < 1:
            page = DEFAULT_PAGE

        limit = _to_int(params.get('limit'))
        if limit is None:
            limit = DEFAULT_LIMIT
        limit = min(MAX_LIMIT, max(1, limit))

        search = params.get('search')
        search = str(search).strip() if search is not None else None

        filters = {
            key: value for key, value in params.items()
            if key not in RESERVED_PARAMS and value is not None
        }

        return cls(
            page=page,
            limit=limit,
            search=search or None,
            sort_by=params.get('sortBy', params.get('sort_by')),
            sort_order=params.get('sortOrder', params.get('sort_order')),
            filters=filters
        )


@dataclass
class QueryDescriptor:
    """Validated, store-independent description of a list query."""

    conditions: List[Condition]
    search_columns: Sequence[str]
    search_term: Optional[str]
    sort_by: str
    sort_order: str
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def where_clause(self, model):
        """
        Render conditions and search as one SQLAlchemy boolean clause.

        Returns ``None`` when nothing restricts the query.
        """
        clauses = []
        for condition in self.conditions:
            column = getattr(model, condition.column)
            if condition.operator == Operator.EQ:
                clauses.append(column == condition.value)
            elif condition.operator == Operator.NE:
                clauses.append(column != condition.value)
            elif condition.operator == Operator.GE:
                clauses.append(column >= condition.value)
            elif condition.operator == Operator.LE:
                clauses.append(column <= condition.value)

        if self.search_term and self.search_columns:
            clauses.append(or_(*[
                getattr(model, name).contains(self.search_term, autoescape=True)
                for name in self.search_columns
            ]))

        if not clauses:
            return None
        return and_(*clauses)

    def order_by(self, model) -> list:
        direction = desc if self.sort_order == DESC else asc
        order = [direction(getattr(model, self.sort_by))]
        if self.sort_by != 'id':
            order.append(asc(model.id))
        return order


class FilterBuilder:
    """
    Validates query options for one resource.

    Constructed from the resource's search columns, sort whitelist and filter
    specs; ``build`` is pure and raises on the first invalid filter.
    """

    def __init__(self, search_columns: Sequence[str] = (), sortable: Sequence[str] = ('name',),
                 default_sort: str = 'name', filters: Sequence[FilterSpec] = (),
                 ranges: Sequence[RangeSpec] = ()):
        self.search_columns = tuple(search_columns)
        self.sortable = tuple(sortable)
        self.default_sort = default_sort
        self.filters = tuple(filters)
        self.ranges = tuple(ranges)

    def resolve_sort(self, sort_by: Optional[str], sort_order: Optional[str]) -> Tuple[str, str]:
        """Whitelisted column and direction; anything unknown falls back silently."""
        column = sort_by if sort_by in self.sortable else self.default_sort
        order = str(sort_order).upper() if sort_order else ASC
        if order not in (ASC, DESC):
            order = ASC
        return column, order

    def _parse_filter(self, spec: FilterSpec, raw: Any) -> Condition:
        text = str(raw).strip()

        if spec.kind == FilterKind.ID:
            value = _to_int(text)
            if value is None or value < 1:
                raise InvalidFieldError(spec.param, value=raw)
            return Condition(spec.column, spec.operator, value)

        if spec.kind == FilterKind.AMOUNT:
            value = _to_int(text)
            if value is None or value < 0:
                raise InvalidFieldError(spec.param, value=raw)
            return Condition(spec.column, spec.operator, value)

        if spec.kind == FilterKind.CHOICE:
            value = text.lower()
            if value not in spec.choices:
                raise InvalidFieldError(
                    spec.param,
                    f"Invalid {spec.param}. Must be one of: {', '.join(spec.choices)}",
                    raw
                )
            return Condition(spec.column, spec.operator, value)

        lowered = text.lower()
        if lowered in TRUE_VALUES:
            return Condition(spec.column, Operator.EQ, spec.flag_value)
        if lowered in FALSE_VALUES:
            return Condition(spec.column, Operator.NE, spec.flag_value)
        raise InvalidFieldError(spec.param, f"Invalid {spec.param}. Must be true or false", raw)

    def build(self, options: QueryOptions) -> QueryDescriptor:
        """
        Validate filters and produce a query descriptor.

        Args:
            options (QueryOptions): Coerced request options

        Returns:
            QueryDescriptor: Conditions, search, sort and window

        Raises:
            InvalidFieldError: For the first filter or range that fails validation
        """
        conditions = []
        params = options.filters

        for spec in self.filters:
            raw = params.get(spec.param)
            if raw is None or str(raw).strip() == "":
                continue
            conditions.append(self._parse_filter(spec, raw))

        for spec in self.ranges:
            bounds = {}
            for param, operator in ((spec.min_param, Operator.GE), (spec.max_param, Operator.LE)):
                raw = params.get(param)
                if raw is None or str(raw).strip() == "":
                    continue
                value = _to_int(raw)
                if value is None or value < 0:
                    raise InvalidFieldError(param, value=raw)
                bounds[operator] = value
                conditions.append(Condition(spec.column, operator, value))

            if Operator.GE in bounds and Operator.LE in bounds and bounds[Operator.GE] > bounds[Operator.LE]:
                raise InvalidFieldError(
                    f"{spec.name}_range",
                    f"{spec.min_param} cannot be greater than {spec.max_param}",
                    {spec.min_param: bounds[Operator.GE], spec.max_param: bounds[Operator.LE]}
                )

        sort_by, sort_order = self.resolve_sort(options.sort_by, options.sort_order)

        logger.debug(f"Built query: {len(conditions)} condition(s), search={options.search!r}, "
                     f"sort={sort_by} {sort_order}, page={options.page}, limit={options.limit}")

        return QueryDescriptor(
            conditions=conditions,
            search_columns=self.search_columns,
            search_term=options.search,
            sort_by=sort_by,
            sort_order=sort_order,
            page=options.page,
            limit=options.limit
        )
