"""
Base Service.

Base class for services providing common patterns for business logic.
Services orchestrate repositories, wrap storage failures and log their
operations with context.

Usage:
    from notekeep.services.base import BaseService

    class TagService(BaseService):
        def __init__(self, repository: NoteRepository) -> None:
            super().__init__()
            self.repository = repository

        def rename(self, old: str, new: str) -> None:
            self._log_operation("Renaming tag", old=old, new=new)
            self._execute_storage_operation("rename_tag", self._rename, old, new)
"""

from collections.abc import Callable
from typing import Any, TypeVar

from notekeep.core.exceptions import StorageError
from notekeep.core.logging import get_logger

T = TypeVar("T")


class BaseService:
    """
    Base class for all services.

    Provides:
    - Logging context bound to the concrete service module
    - Error wrapping for storage operations

    Subclasses should:
    - Call super().__init__() in their __init__
    - Keep references to repositories they orchestrate
    """

    def __init__(self) -> None:
        self._logger = get_logger(self.__class__.__module__)

    def _execute_storage_operation(
        self,
        operation: str,
        func: Callable[..., T],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """
        Run a storage-backed operation with error handling.

        Args:
            operation: Description of the operation for logging
            func: Callable to execute
            *args: Positional arguments for func
            **kwargs: Keyword arguments for func

        Returns:
            Result of func

        Raises:
            StorageError: For any failure of the backing store
        """
        try:
            return func(*args, **kwargs)
        except StorageError as e:
            self._logger.error(
                "Storage error",
                extra={"operation": operation, "error": e.message},
            )
            raise
        except OSError as e:
            self._logger.error(
                "Storage I/O error",
                extra={"operation": operation, "error": str(e)},
            )
            raise StorageError(f"Storage operation failed: {operation}") from e

    def _log_operation(
        self,
        operation: str,
        **context: Any,
    ) -> None:
        """
        Log a service operation with context.

        Args:
            operation: Description of the operation
            **context: Additional context to include in log
        """
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(
        self,
        message: str,
        **context: Any,
    ) -> None:
        """
        Log debug information.

        Args:
            message: Debug message
            **context: Additional context to include in log
        """
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )
