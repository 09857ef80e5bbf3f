# backend/chatline/repositories/base_repository.py
"""
Base Repository Pattern for the Chatline backend

Provides the foundation for all repository classes with:
- Common CRUD operations
- Type safety with generics
- Flushing only; transactions are managed by services
- Translation of SQLAlchemy failures into the storage error taxonomy

The repository pattern separates data access from business logic,
making the code more testable and maintainable.
"""

import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import DatabaseRequestError, RepositoryException

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)


def translate_db_error(exc: SQLAlchemyError, action: str) -> RepositoryException:
    """
    Map a SQLAlchemy failure onto the repository error taxonomy.

    Integrity violations are known, classifiable failures. Any other
    driver-level error is an unclassified database request failure.
    """
    if isinstance(exc, IntegrityError):
        return RepositoryException(f"Integrity constraint violated while trying to {action}: {exc}")
    if isinstance(exc, DBAPIError):
        return DatabaseRequestError(f"Database rejected request to {action}: {exc}")
    return RepositoryException(f"Failed to {action}: {exc}")


class BaseRepository(Generic[T]):
    """
    Concrete base repository implementation with common data access patterns.

    This class provides default implementations for CRUD operations and
    can be extended by specific repositories to add custom queries.

    Attributes:
        db: SQLAlchemy session
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize repository with database session and model.

        Args:
            db: SQLAlchemy session (managed by service layer)
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key."""
        try:
            return self.db.query(self.model).filter(self.model.id == id).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting {self.model.__name__} by id {id}: {str(e)}")
            raise translate_db_error(e, f"retrieve {self.model.__name__}") from e

    def create(self, **kwargs: Any) -> T:
        """
        Create a new entity.

        Note: Does NOT commit - transaction management is handled by the caller.
        """
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()  # Get ID without committing
            return entity
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self.model.__name__}: {str(e)}")
            self.db.rollback()
            raise translate_db_error(e, f"create {self.model.__name__}") from e

    def update(self, id: str, **kwargs: Any) -> Optional[T]:
        """
        Update an existing entity.

        Only updates provided fields, preserves others.
        """
        try:
            entity = self.get_by_id(id)
            if not entity:
                return None

            for key, value in kwargs.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)

            self.db.flush()
            return entity
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating {self.model.__name__} {id}: {str(e)}")
            self.db.rollback()
            raise translate_db_error(e, f"update {self.model.__name__}") from e

    def exists(self, **kwargs: Any) -> bool:
        """Check if an entity exists with given criteria."""
        try:
            return self.db.query(self.model).filter_by(**kwargs).first() is not None
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking existence: {str(e)}")
            raise translate_db_error(e, "check existence") from e

    def find_one_by(self, **kwargs: Any) -> Optional[T]:
        """
        Find a single entity by given criteria.

        Args:
            **kwargs: Filter criteria (exact match)

        Returns:
            First matching entity or None
        """
        try:
            return self.db.query(self.model).filter_by(**kwargs).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding one by criteria: {str(e)}")
            raise translate_db_error(e, "find record") from e

    def bulk_create(self, entities: List[Dict[str, Any]]) -> List[T]:
        """
        Create multiple entities in one flush.

        Args:
            entities: List of entity data dictionaries

        Returns:
            List of created entities
        """
        try:
            db_entities = [self.model(**data) for data in entities]
            self.db.add_all(db_entities)
            self.db.flush()
            return db_entities
        except SQLAlchemyError as e:
            self.logger.error(f"Error bulk creating: {str(e)}")
            self.db.rollback()
            raise translate_db_error(e, f"bulk create {self.model.__name__}") from e
