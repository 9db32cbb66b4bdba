"""Generic data access shared by the NewsNexus repositories."""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsnexus.utils.logging import get_logger

ModelType = TypeVar("ModelType")

LOGGER = get_logger(__name__)


class BaseRepository(Generic[ModelType]):
    """Primary-key lookups, table scans and inserts for one mapped model.

    Repositories only flush. Commit and rollback belong to the calling
    service so that a state transition touching several tables stays atomic.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        self.session = session
        self.model = model
        self.logger = LOGGER

    def _log_failure(self, action: str, error: SQLAlchemyError, **context: Any) -> None:
        self.logger.error(
            f"{self.model.__name__} {action} failed",
            exc_info=True,
            extra={"error": str(error), **context},
        )

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        try:
            return await self.session.get(self.model, id)
        except SQLAlchemyError as e:
            self._log_failure("lookup", e, id=id)
            raise

    async def get_all(
        self,
        skip: int = 0,
        limit: Optional[int] = 200,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[ModelType]:
        """Rows ordered by id.

        Args:
            skip: Rows to skip before the first returned one
            limit: Maximum rows to return; ``None`` returns the whole table
            filters: Column equality filters; unknown column names are ignored
        """
        query = select(self.model)
        for column, value in (filters or {}).items():
            if hasattr(self.model, column):
                query = query.where(getattr(self.model, column) == value)
        query = query.order_by(self.model.id).offset(skip)
        if limit is not None:
            query = query.limit(limit)

        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            self._log_failure("scan", e, skip=skip, limit=limit)
            raise
        return list(result.scalars().all())

    async def create(self, **values: Any) -> ModelType:
        """Insert a row and flush so its generated id is available."""
        instance = self.model(**values)
        self.session.add(instance)
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            self._log_failure("insert", e)
            raise
        return instance
