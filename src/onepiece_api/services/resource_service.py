# src/onepiece_api/services/resource_service.py
import logging
import re
from datetime import date, datetime
from typing import Dict, Any, Mapping, Optional, Union

from sqlalchemy import select, delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from onepiece_api.core.interfaces import DatabaseConnectionInterface, RepositoryInterface
from onepiece_api.core.exceptions import (
    InvalidIdError,
    InvalidFieldError,
    MissingFieldError,
    NoFieldsProvidedError,
    NotFoundError,
    DuplicateNameError,
    InUseError
)
from onepiece_api.database.error_handler import DatabaseErrorHandler
from onepiece_api.database.models import Base
from onepiece_api.query.filter_builder import QueryOptions
from onepiece_api.query.pagination import PaginationInfo, PaginatedResult
from onepiece_api.services.resource_config import FieldKind, FieldSpec, ResourceConfig

logger = logging.getLogger(__name__)

_MISSING = object()

# ASCII only: str.isdigit and int() also accept other Unicode digits
_ID_TEXT = re.compile(r"[0-9]+")
_INTEGER_TEXT = re.compile(r"-?[0-9]+")


def parse_id(value: Any, label: str = "resource") -> int:
    """
    Validate an entity id.

    Raises:
        InvalidIdError: Unless ``value`` is a positive integer or its decimal text
    """
    if isinstance(value, bool):
        raise InvalidIdError(value, label)
    if isinstance(value, int):
        entity_id = value
    else:
        text = str(value).strip() if value is not None else ""
        if not _ID_TEXT.fullmatch(text):
            raise InvalidIdError(value, label)
        entity_id = int(text)
    if entity_id < 1:
        raise InvalidIdError(value, label)
    return entity_id


def _serialize_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _project(obj: Any, fields) -> Optional[Dict[str, Any]]:
    if obj is None:
        return None
    return {name: _serialize_value(getattr(obj, name)) for name in fields}


def serialize_row(obj: Any, includes=()) -> Dict[str, Any]:
    """Column values of ``obj`` plus the ``Include`` projections of its related rows."""
    data = {column.name: _serialize_value(getattr(obj, column.name))
            for column in obj.__table__.columns}

    for include in includes:
        related = getattr(obj, include.attribute)
        if include.many:
            data[include.key] = [_project(item, include.fields) for item in related]
        else:
            data[include.key] = _project(related, include.fields)
    return data


class ResourceService(RepositoryInterface):
    """
    CRUD operations for one catalog resource, driven entirely by its ``ResourceConfig``.

    Every public operation opens its own session; store errors are converted by
    ``DatabaseErrorHandler`` before they leave the service.
    """

    def __init__(self, connection: DatabaseConnectionInterface, config: ResourceConfig,
                 error_handler: Optional[DatabaseErrorHandler] = None):
        self._connection = connection
        self.config = config
        self._error_handler = error_handler or DatabaseErrorHandler()

    @property
    def model(self):
        return self.config.model

    def _session(self) -> Session:
        return self._connection.get_session()

    def _fail(self, session: Session, error: SQLAlchemyError, operation: str, **context):
        session.rollback()
        context.setdefault("resource", self.config.label)
        return self._error_handler.handle_error(error, f"{operation} {self.config.key}", context)

    # Serialization

    def serialize(self, obj: Any) -> Dict[str, Any]:
        return serialize_row(obj, self.config.includes)

    def _load_options(self):
        return [selectinload(getattr(self.model, include.attribute)) for include in self.config.includes]

    # Validation

    def _clean_value(self, spec: FieldSpec, value: Any) -> Any:
        """
        Coerce one incoming value. Blank text becomes ``None``.

        Raises:
            InvalidFieldError: On a type, length, range or enum violation
        """
        if value is None:
            return None

        if spec.kind == FieldKind.TEXT:
            if not isinstance(value, str):
                raise InvalidFieldError(spec.name, f"{spec.label.capitalize()} must be a string", value)
            value = value.strip()
            if not value:
                return None
            if spec.max_length and len(value) > spec.max_length:
                raise InvalidFieldError(
                    spec.name,
                    f"{spec.label.capitalize()} must be at most {spec.max_length} characters",
                    value
                )
            return value

        if spec.kind == FieldKind.CHOICE:
            if not isinstance(value, str):
                raise InvalidFieldError(spec.name, value=value)
            value = value.strip().lower()
            if not value:
                return None
            if value not in spec.choices:
                raise InvalidFieldError(
                    spec.name,
                    f"Invalid {spec.label}. Must be one of: {', '.join(spec.choices)}",
                    value
                )
            return value

        if isinstance(value, str):
            text = value.strip()
            if not text:
                return None
            if not _INTEGER_TEXT.fullmatch(text):
                raise InvalidFieldError(spec.name, f"{spec.label.capitalize()} must be an integer", value)
            value = int(text)
        elif isinstance(value, bool) or not isinstance(value, int):
            raise InvalidFieldError(spec.name, f"{spec.label.capitalize()} must be an integer", value)

        if spec.kind == FieldKind.REFERENCE and value < 1:
            raise InvalidFieldError(spec.name, f"Invalid {spec.label}", value)
        if spec.min_value is not None and value < spec.min_value:
            raise InvalidFieldError(
                spec.name,
                f"{spec.label.capitalize()} must be greater than or equal to {spec.min_value}",
                value
            )
        return value

    def _collect(self, data: Mapping[str, Any], creating: bool) -> Dict[str, Any]:
        values = {}
        for spec in self.config.fields:
            raw = data.get(spec.name, _MISSING)
            if raw is _MISSING:
                if creating and spec.required:
                    raise MissingFieldError(spec.name)
                continue

            value = self._clean_value(spec, raw)
            if value is None:
                if spec.required:
                    if creating:
                        raise MissingFieldError(spec.name)
                    raise InvalidFieldError(spec.name, f"{spec.label.capitalize()} cannot be empty", raw)
                if spec.kind == FieldKind.CHOICE or spec.name in ('bounty', 'total_bounty'):
                    # Non-nullable columns with store defaults
                    if creating:
                        continue
                    raise InvalidFieldError(spec.name, f"{spec.label.capitalize()} cannot be empty", raw)
            values[spec.name] = value
        return values

    def _check_references(self, session: Session, values: Dict[str, Any]) -> None:
        for spec in self.config.fields:
            if spec.kind != FieldKind.REFERENCE or values.get(spec.name) is None:
                continue
            table = Base.metadata.tables[spec.references]
            exists = session.execute(
                select(table.c.id).where(table.c.id == values[spec.name])
            ).first()
            if exists is None:
                raise InvalidFieldError(
                    spec.name,
                    f"Referenced {spec.label.replace(' id', '')} with ID {values[spec.name]} does not exist",
                    values[spec.name]
                )

    def _check_duplicate(self, session: Session, name: str, exclude_id: Optional[int] = None) -> None:
        stmt = select(self.model.id).where(self.model.name == name)
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        if session.execute(stmt).first() is not None:
            raise DuplicateNameError(self.config.label, name)

    def _get_or_404(self, session: Session, entity_id: int):
        obj = session.get(self.model, entity_id, options=self._load_options())
        if obj is None:
            raise NotFoundError(self.config.label, entity_id)
        return obj

    # Operations

    def list(self, params: Union[QueryOptions, Mapping[str, Any]]) -> PaginatedResult:
        """
        List entities matching search and filters, one page at a time.

        Args:
            params (Union[QueryOptions, Mapping[str, Any]]): Options or raw query parameters

        Returns:
            PaginatedResult: Items of the requested page and pagination metadata

        Raises:
            InvalidFieldError: When a filter does not validate
        """
        options = params if isinstance(params, QueryOptions) else QueryOptions.from_params(params)
        descriptor = self.config.builder.build(options)
        where = descriptor.where_clause(self.model)

        count_stmt = select(func.count()).select_from(self.model)
        stmt = select(self.model).options(*self._load_options())
        if where is not None:
            count_stmt = count_stmt.where(where)
            stmt = stmt.where(where)
        stmt = stmt.order_by(*descriptor.order_by(self.model)).offset(descriptor.offset).limit(descriptor.limit)

        session = self._session()
        try:
            total = session.execute(count_stmt).scalar_one()
            items = [self.serialize(obj) for obj in session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            raise self._fail(session, e, "list") from e
        finally:
            session.close()

        return PaginatedResult(
            items=items,
            pagination=PaginationInfo.compute(descriptor.page, descriptor.limit, total)
        )

    def get_by_id(self, entity_id: Any) -> Dict[str, Any]:
        entity_id = parse_id(entity_id, self.config.label)
        session = self._session()
        try:
            return self.serialize(self._get_or_404(session, entity_id))
        except SQLAlchemyError as e:
            raise self._fail(session, e, "get", id=entity_id) from e
        finally:
            session.close()

    def list_related(self, entity_id: Any, path: str) -> Dict[str, Any]:
        """
        Junction rows pointing at one entity, e.g. the members of an organization.

        Args:
            entity_id (Any): Id of the owning entity, validated like ``get_by_id``
            path (str): Name of a configured ``Listing``

        Returns:
            Dict[str, Any]: ``{<label>: {id, name}, <path>: [rows]}``

        Raises:
            InvalidIdError, NotFoundError
        """
        listing = self.config.get_listing(path)
        if listing is None:
            raise ValueError(f"{self.config.key} has no '{path}' listing")
        entity_id = parse_id(entity_id, self.config.label)

        order = [getattr(listing.model, column).desc() if direction == 'desc'
                 else getattr(listing.model, column).asc()
                 for column, direction in listing.order_by]
        stmt = (
            select(listing.model)
            .options(selectinload(getattr(listing.model, listing.include.attribute)))
            .where(getattr(listing.model, listing.column) == entity_id)
            .order_by(*order, listing.model.id)
        )

        session = self._session()
        try:
            owner = session.get(self.model, entity_id)
            if owner is None:
                raise NotFoundError(self.config.label, entity_id)
            rows = [serialize_row(row, (listing.include,)) for row in session.execute(stmt).scalars().all()]
            owner_data = {'id': owner.id, 'name': owner.name}
        except SQLAlchemyError as e:
            raise self._fail(session, e, f"list {path} of", id=entity_id) from e
        finally:
            session.close()

        return {self.config.label: owner_data, path: rows}

    def create(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Validate and insert a new entity.

        Returns:
            Dict[str, Any]: The stored row including store-assigned defaults

        Raises:
            MissingFieldError: A required field is absent or blank
            InvalidFieldError: A value or a referenced id is invalid
            DuplicateNameError: The name is already taken
        """
        values = self._collect(data or {}, creating=True)

        session = self._session()
        try:
            self._check_references(session, values)
            self._check_duplicate(session, values['name'])

            obj = self.model(**values)
            session.add(obj)
            session.flush()
            session.refresh(obj)
            result = self.serialize(obj)
            session.commit()
        except SQLAlchemyError as e:
            raise self._fail(session, e, "create", name=values.get('name')) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        logger.info(f"Created {self.config.label} {result['id']}: {result['name']}")
        return result

    def update(self, entity_id: Any, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update; only the supplied writable fields are written.

        Raises:
            InvalidIdError, NotFoundError, NoFieldsProvidedError,
            InvalidFieldError, DuplicateNameError
        """
        entity_id = parse_id(entity_id, self.config.label)
        data = data or {}
        if not any(name in data for name in self.config.field_names):
            raise NoFieldsProvidedError()

        values = self._collect(data, creating=False)

        session = self._session()
        try:
            obj = self._get_or_404(session, entity_id)
            self._check_references(session, values)
            if 'name' in values:
                self._check_duplicate(session, values['name'], exclude_id=entity_id)

            for name, value in values.items():
                setattr(obj, name, value)
            session.flush()
            session.refresh(obj)
            result = self.serialize(obj)
            session.commit()
        except SQLAlchemyError as e:
            raise self._fail(session, e, "update", id=entity_id, name=values.get('name')) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        logger.info(f"Updated {self.config.label} {entity_id}: {', '.join(sorted(values))}")
        return result

    def delete(self, entity_id: Any) -> None:
        """
        Delete an entity nothing references. Never cascades.

        Raises:
            InvalidIdError, NotFoundError
            InUseError: When any delete guard counts referencing rows
        """
        entity_id = parse_id(entity_id, self.config.label)

        session = self._session()
        try:
            exists = session.execute(select(self.model.id).where(self.model.id == entity_id)).first()
            if exists is None:
                raise NotFoundError(self.config.label, entity_id)

            for guard in self.config.guards:
                table = Base.metadata.tables[guard.table]
                count = session.execute(
                    select(func.count()).select_from(table).where(table.c[guard.column] == entity_id)
                ).scalar_one()
                if count > 0:
                    raise InUseError(self.config.label, guard.table, count, guard.error_code)

            session.execute(delete(self.model).where(self.model.id == entity_id))
            session.commit()
        except SQLAlchemyError as e:
            raise self._fail(session, e, "delete", id=entity_id) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        logger.info(f"Deleted {self.config.label} {entity_id}")

    def export_csv(self, params: Union[QueryOptions, Mapping[str, Any]]) -> str:
        """Current page of ``list`` rendered as CSV."""
        return self.list(params).to_dataframe().to_csv(index=False)
