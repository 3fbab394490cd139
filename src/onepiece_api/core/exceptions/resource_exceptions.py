# src/onepiece_api/core/exceptions/resource_exceptions.py
from typing import Any

from onepiece_api.core.exceptions.custom_exceptions import OnePieceApiError, ErrorCode


class NotFoundError(OnePieceApiError):
    """Raised when an entity id does not exist."""

    status_code = 404

    def __init__(self, resource_label: str, entity_id: Any):
        self.resource_label = resource_label
        self.entity_id = entity_id
        super().__init__(f"{resource_label.capitalize()} with ID {entity_id} not found", ErrorCode.NOT_FOUND)


class DuplicateNameError(OnePieceApiError):
    """Raised when a name is already taken within its table."""

    status_code = 409

    def __init__(self, resource_label: str, name: str = ""):
        self.resource_label = resource_label
        self.name = name
        super().__init__(f"A {resource_label} with this name already exists", ErrorCode.DUPLICATE_NAME)


class InUseError(OnePieceApiError):
    """Raised when a delete is blocked because other rows reference the entity."""

    status_code = 409

    def __init__(self, resource_label: str, referencing_table: str, count: int,
                 error_code: ErrorCode = ErrorCode.IN_USE):
        self.resource_label = resource_label
        self.referencing_table = referencing_table
        self.count = count
        super().__init__(
            f"Cannot delete {resource_label} because it is referenced by "
            f"{count} row(s) in {referencing_table}",
            error_code
        )
