"""Event processor: run the handler for one claimed event and record the outcome.

The handler's writes and the PROCESSED mark commit in one transaction. A
failed attempt is rolled back and recorded in a fresh transaction: the lease
is released, the attempt counter incremented, and the event dead-lettered
once attempts are exhausted. Both writes are guarded by lock ownership, so
a worker whose lease expired never overwrites the new owner's state.
"""

from collections.abc import Callable
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from operations.application.services.event_dispatch import HandlerContext, HandlerRegistry
from operations.core.tenant_context import set_tenant_id
from operations.domain.entities.event import EventEntity
from operations.domain.enums import EventStatus, ProcessingOutcome
from operations.domain.exceptions import (
    HandlerException,
    TransientStorageException,
    ValidationException,
)
from operations.shared.telemetry.logging import get_logger
from operations.shared.telemetry.tracing import TracedOperation, traced
from operations.shared.utils.datetime import utc_now

logger = get_logger(__name__)

type ContextFactory = Callable[[AsyncSession, datetime], HandlerContext]


class _LeaseLost(Exception):
    """The guarded write matched no row; another worker owns the event now."""


class EventProcessor:
    """Processes claimed events one at a time."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        handlers: HandlerRegistry,
        context_factory: ContextFactory,
        max_processing_attempts: int,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if max_processing_attempts < 1:
            raise ValidationException(
                "max_processing_attempts must be >= 1", field="max_processing_attempts"
            )
        self.session_factory = session_factory
        self.handlers = handlers
        self.context_factory = context_factory
        self.max_processing_attempts = max_processing_attempts
        self.clock = clock

    @traced("events.process")
    async def process(self, event: EventEntity) -> ProcessingOutcome:
        """Process one event leased to this worker and return what happened.

        Handler failures never propagate; they become RETRY or DEAD_LETTERED.
        Raises TransientStorageException only when the failed attempt itself
        cannot be recorded (the lease then expires and the event is retried).
        """
        if event.lock_name is None or event.locked is None or event.status is not EventStatus.QUEUED:
            raise ValidationException(
                f"Event {event.id} must be queued and claimed before processing",
                field="lock_name",
            )
        lock_name = event.lock_name
        set_tenant_id(event.tenant_id)
        try:
            await self._run_handler(event, lock_name)
        except _LeaseLost:
            return self._lease_lost(event, lock_name)
        except Exception as e:
            failure = HandlerException(event.id, event.type.value, e)
            return await self._record_failure(event, lock_name, failure)
        logger.debug("Processed event %s (%s)", event.id, event.type.value)
        return ProcessingOutcome.PROCESSED

    async def _run_handler(self, event: EventEntity, lock_name: str) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                now = self.clock()
                context = self.context_factory(session, now)
                handler = self.handlers.get(event.handler_key)
                if handler is None:
                    logger.debug(
                        "No handler for %s/%s; marking event %s processed",
                        event.object_type.value,
                        event.type.value,
                        event.id,
                    )
                else:
                    with TracedOperation(
                        "events.handle",
                        {
                            "event.id": event.id,
                            "event.type": event.type.value,
                            "event.object_type": event.object_type.value,
                        },
                    ):
                        await handler.handle(event, context)
                done = event.after_success(self.clock())
                if not await context.events.apply_transition(
                    done, lock_name, event.locked
                ):
                    raise _LeaseLost()

    async def _record_failure(
        self, event: EventEntity, lock_name: str, failure: HandlerException
    ) -> ProcessingOutcome:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    now = self.clock()
                    failed = event.after_failure(now, self.max_processing_attempts)
                    context = self.context_factory(session, now)
                    if not await context.events.apply_transition(
                        failed, lock_name, event.locked
                    ):
                        raise _LeaseLost()
        except _LeaseLost:
            return self._lease_lost(event, lock_name)
        except SQLAlchemyError as e:
            raise TransientStorageException("record failed event attempt", cause=e) from e

        if failed.status is EventStatus.FAILED:
            logger.error(
                "Dead-lettered event %s (%s) for tenant %s after %d attempt(s): %s",
                event.id,
                event.type.value,
                event.tenant_id,
                failed.processing_attempts,
                failure.message,
            )
            return ProcessingOutcome.DEAD_LETTERED
        logger.warning(
            "Event %s (%s) failed attempt %d of %d; will retry: %s",
            event.id,
            event.type.value,
            failed.processing_attempts,
            self.max_processing_attempts,
            failure.message,
        )
        return ProcessingOutcome.RETRY

    @staticmethod
    def _lease_lost(event: EventEntity, lock_name: str) -> ProcessingOutcome:
        logger.warning(
            "Lost lease on event %s held by %s; leaving it to its new owner",
            event.id,
            lock_name,
        )
        return ProcessingOutcome.LOCK_LOST
