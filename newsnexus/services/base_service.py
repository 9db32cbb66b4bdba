import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsnexus.core.config import settings
from newsnexus.core.database import is_transient_db_error
from newsnexus.core.exceptions import AppError, PersistenceError
from newsnexus.utils.logging import get_logger

LOGGER = get_logger(__name__)


class BaseService(ABC):
    """Base class for application services.

    Provides a standardized execution flow with validation, error handling
    and retry of transient persistence faults.
    """

    def __init__(
        self,
        session: AsyncSession,
        logger: Optional[logging.Logger] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        """Initialize the service.

        Args:
            session: Database session owned by the caller (one per request)
            logger: Optional logger; defaults to the module logger
            max_retries: Attempts for transient persistence faults
            retry_delay: Seconds to wait between attempts
        """
        self.session = session
        self.logger = logger or LOGGER
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.retry_delay = settings.retry_delay if retry_delay is None else retry_delay

    async def execute(self, *args, **kwargs) -> Any:
        """Execute the service logic.

        This template method handles:
        1. Input validation
        2. Core logic execution, retried on transient persistence faults
        3. Standardized error handling

        Raises:
            AppError: If execution fails
        """
        self.validate(*args, **kwargs)
        return await self._call(self.run, *args, **kwargs)

    async def _call(self, operation: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """Await an operation, retrying transient persistence faults.

        Any error that is not an ``AppError`` is logged and wrapped.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return await operation(*args, **kwargs)

            except PersistenceError as e:
                if not e.transient or attempt >= max(self.max_retries, 1):
                    raise
                self.logger.warning(
                    f"Transient persistence fault, retrying in {self.retry_delay}s",
                    extra={
                        "service": self.__class__.__name__,
                        "attempt": attempt,
                        "max_retries": self.max_retries,
                    },
                )
                await asyncio.sleep(self.retry_delay)

            except AppError:
                raise

            except Exception as e:
                self.logger.error(
                    f"Service execution failed: {str(e)}",
                    exc_info=True,
                    extra={"service": self.__class__.__name__},
                )
                raise AppError(f"Service execution failed: {str(e)}", original_error=e)

    def validate(self, *args, **kwargs):
        """Validate service input.

        Override this method to implement custom validation logic.

        Raises:
            ValidationError: If input is invalid
        """
        pass

    @abstractmethod
    async def run(self, *args, **kwargs) -> Any:
        """Run the core service logic.

        Must be implemented by subclasses.
        """
        pass

    async def _rollback(self) -> None:
        await self.session.rollback()

    def _persistence_error(self, message: str, error: SQLAlchemyError) -> PersistenceError:
        """Wrap a SQLAlchemy error, flagging dropped connections as transient."""
        transient = not isinstance(error, IntegrityError) and is_transient_db_error(error)
        self.logger.error(
            f"{message}: {str(error)}",
            exc_info=True,
            extra={"service": self.__class__.__name__, "transient": transient},
        )
        return PersistenceError(message, original_error=error, transient=transient)
