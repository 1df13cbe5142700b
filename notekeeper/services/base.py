"""
Base Service.

Base class for services that front a remote dependency. Provides logging
context and the error wrapping that turns any remote failure into the
operation-specific failure type the caller understands.

Usage:
    from notekeeper.services.base import BaseService

    class TagService(BaseService):
        async def load_tags(self) -> list[Tag]:
            return await self._execute_remote_operation(
                "list_tags", self.store.list_tags(), LoadFailure,
            )
"""

import asyncio
from collections.abc import Awaitable
from typing import Any, TypeVar

from notekeeper.core.exceptions import RemoteFailure, StoreError
from notekeeper.core.logging import get_logger

T = TypeVar("T")


class BaseService:
    """
    Base class for all services.

    Provides:
    - Logging context
    - Per-call timeout for remote operations
    - Error wrapping for remote operations

    Subclasses should:
    - Call super().__init__(request_timeout) in their __init__
    - Route every remote call through _execute_remote_operation
    """

    def __init__(self, request_timeout: float | None = None) -> None:
        """
        Initialize the service.

        Args:
            request_timeout: Seconds before a remote call counts as failed.
                None waits indefinitely.
        """
        self._request_timeout = request_timeout
        self._logger = get_logger(self.__class__.__module__)

    @property
    def request_timeout(self) -> float | None:
        return self._request_timeout

    async def _execute_remote_operation(
        self,
        operation: str,
        coro: Awaitable[T],
        failure_cls: type[RemoteFailure],
    ) -> T:
        """
        Execute a remote operation with timeout and error handling.

        Args:
            operation: Description of the operation for logging
            coro: Awaitable performing the remote call
            failure_cls: RemoteFailure subclass to raise on any failure

        Returns:
            Result of the awaitable

        Raises:
            RemoteFailure: failure_cls, chained to the underlying error
        """
        try:
            if self._request_timeout is None:
                return await coro
            async with asyncio.timeout(self._request_timeout):
                return await coro
        except StoreError as e:
            self._logger.warning(
                "Remote store error",
                extra={"operation": operation, "error": str(e), "status_code": e.status_code},
            )
            raise failure_cls() from e
        except TimeoutError as e:
            self._logger.warning(
                "Remote call timed out",
                extra={"operation": operation, "timeout": self._request_timeout},
            )
            raise failure_cls() from e
        except Exception as e:
            self._logger.error(
                "Unexpected remote error",
                extra={"operation": operation, "error": repr(e)},
            )
            raise failure_cls() from e

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
