"""
Base use case classes for the application layer.
Provides common patterns and structure for use case implementations.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TypeVar, Generic, List
from dataclasses import dataclass
from datetime import datetime, timezone
import logging

from pydantic import ValidationError as PydanticValidationError

from invoiceme.domain.events import DomainEvent, EventDispatcher
from invoiceme.domain.models.base import BaseEntity, DomainException, ValidationError
from invoiceme.domain.repositories.unit_of_work import UnitOfWork


logger = logging.getLogger(__name__)


T = TypeVar('T')
R = TypeVar('R')


@dataclass
class UseCaseResult(Generic[T]):
    """Result wrapper for use case operations."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def success_result(cls, data: T, metadata: Optional[Dict[str, Any]] = None) -> "UseCaseResult[T]":
        """Create a successful result."""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def error_result(
        cls,
        error: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> "UseCaseResult[T]":
        """Create an error result."""
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            details=details,
            metadata=metadata
        )

    @classmethod
    def from_exception(cls, exc: Exception) -> "UseCaseResult[T]":
        """
        Create error result from exception.
        Domain errors keep their specific code and contextual details
        (current status, requested amount, balance) for the caller.
        """
        if isinstance(exc, DomainException):
            payload = exc.to_dict()
            return cls.error_result(payload["message"], payload["code"], payload["details"])
        elif isinstance(exc, PydanticValidationError):
            return cls.error_result(
                "Invalid request",
                ValidationError.default_code,
                {"errors": exc.errors(include_url=False, include_context=False)}
            )
        else:
            return cls.error_result(str(exc), "UNKNOWN_ERROR")


class BaseUseCase(ABC, Generic[T, R]):
    """
    Base class for all use cases.
    Provides common structure and error handling.
    """

    def __init__(self):
        self.execution_start: Optional[datetime] = None
        self.execution_end: Optional[datetime] = None

    async def execute(self, request: T) -> UseCaseResult[R]:
        """
        Execute the use case with proper error handling and logging.
        """
        self.execution_start = datetime.now(timezone.utc)
        use_case_name = self.__class__.__name__

        try:
            # Validate input
            await self._validate_request(request)

            # Execute business logic
            result = await self._execute_business_logic(request)

            self.execution_end = datetime.now(timezone.utc)
            execution_time = (self.execution_end - self.execution_start).total_seconds()

            return UseCaseResult.success_result(
                result,
                metadata={
                    "execution_time_seconds": execution_time,
                    "executed_at": self.execution_end.isoformat()
                }
            )

        except Exception as exc:
            self.execution_end = datetime.now(timezone.utc)
            execution_time = (self.execution_end - self.execution_start).total_seconds()

            if isinstance(exc, (DomainException, PydanticValidationError)):
                logger.warning(f"{use_case_name} rejected: {exc}")
            else:
                logger.exception(f"{use_case_name} failed unexpectedly")

            error_result = UseCaseResult.from_exception(exc)
            error_result.metadata = {
                "execution_time_seconds": execution_time,
                "failed_at": self.execution_end.isoformat(),
                "exception_type": type(exc).__name__
            }

            return error_result

    async def _validate_request(self, request: T) -> None:
        """
        Validate the request. Override in subclasses if needed.
        """
        if hasattr(request, 'model_validate'):
            # Pydantic models
            request.model_validate(request.model_dump())
        elif hasattr(request, 'validate'):
            # Custom validation
            request.validate()

    @abstractmethod
    async def _execute_business_logic(self, request: T) -> R:
        """
        Execute the core business logic. Must be implemented by subclasses.
        """
        pass


class QueryUseCase(BaseUseCase[T, R]):
    """
    Base class for query use cases (read operations).
    """
    pass


class CommandUseCase(BaseUseCase[T, R]):
    """
    Base class for command use cases (write operations).

    The command runs inside the unit of work. Events recorded by the
    aggregates it touched are published only after a successful commit;
    on failure the unit of work is rolled back and nothing is published.
    """

    def __init__(self, unit_of_work: UnitOfWork, event_dispatcher: Optional[EventDispatcher] = None):
        super().__init__()
        self.unit_of_work = unit_of_work
        self.event_dispatcher = event_dispatcher
        self.events: List[DomainEvent] = []

    async def _execute_business_logic(self, request: T) -> R:
        """
        Execute command with transaction handling.
        """
        self.events.clear()

        try:
            result = await self._execute_command_logic(request)
            await self.unit_of_work.commit()
        except Exception:
            await self.unit_of_work.rollback()
            self.events.clear()
            raise

        # Publish domain events
        await self._publish_events()

        return result

    @abstractmethod
    async def _execute_command_logic(self, request: T) -> R:
        """Execute the command logic. Must be implemented by subclasses."""
        pass

    def _collect_events(self, *aggregates: BaseEntity) -> None:
        """Take the events recorded on ``aggregates`` for publication after commit."""
        for aggregate in aggregates:
            self.events.extend(aggregate.pull_events())

    async def _publish_events(self) -> None:
        """Publish collected domain events."""
        events = list(self.events)
        self.events.clear()

        if self.event_dispatcher is None:
            logger.debug(f"No event dispatcher configured; dropping {len(events)} event(s)")
            return

        await self.event_dispatcher.dispatch_all(events)


class PaginatedQueryUseCase(QueryUseCase[T, R]):
    """
    Base class for paginated query use cases.
    """

    def __init__(self, default_page_size: int = 20, max_page_size: int = 100):
        super().__init__()
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    async def _validate_request(self, request: T) -> None:
        """Validate paginated request."""
        await super()._validate_request(request)

        if hasattr(request, 'page_size'):
            page_size = self.page_size_for(request)
            if page_size > self.max_page_size:
                raise ValidationError(f"Page size cannot exceed {self.max_page_size}", "page_size")
            if page_size < 1:
                raise ValidationError("Page size must be positive", "page_size")

    def page_size_for(self, request: T) -> int:
        """Page size the caller asked for, or the configured default."""
        if "page_size" in request.model_fields_set:
            return request.page_size
        return self.default_page_size
