"""
Base class for the SQLAlchemy repositories.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gev_api.common.exceptions import StorageError

logger = logging.getLogger(__name__)


class SqlRepository:
    """Holds the request session and turns driver errors into StorageError."""

    def __init__(self, session: Session):
        self.session = session

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Commit failed: %s", e)
            raise StorageError() from e

    def save(self, instance):
        """Add, commit and refresh a single mapped instance."""
        self.session.add(instance)
        self.commit()
        self.session.refresh(instance)
        return instance

    def remove(self, instance) -> None:
        self.session.delete(instance)
        self.commit()

    def rollback(self) -> None:
        self.session.rollback()
