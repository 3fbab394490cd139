from abc import ABC, abstractmethod
from typing import Dict, Any, Mapping


class RepositoryInterface(ABC):
    """Abstract base class for a resource repository."""

    @abstractmethod
    def list(self, params: Mapping[str, Any]):
        """List entities using loosely-typed query parameters.

        Args:
            params (Mapping[str, Any]): page, limit, search, sortBy, sortOrder and filters.

        Returns:
            PaginatedResult: Items and pagination metadata.
        """
        pass

    @abstractmethod
    def get_by_id(self, entity_id: Any) -> Dict[str, Any]:
        """Fetch one entity by its id."""
        pass

    @abstractmethod
    def create(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Validate and persist a new entity."""
        pass

    @abstractmethod
    def update(self, entity_id: Any, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Apply a partial update to an existing entity."""
        pass

    @abstractmethod
    def delete(self, entity_id: Any) -> None:
        """Delete an entity that nothing references."""
        pass
