from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Callable, Dict, Optional, Protocol, Set

logger = logging.getLogger(__name__)

# Instant meetings are accounted slightly in the future so they can still be
# cancelled before usage lands.
INSTANT_USAGE_DELAY = timedelta(seconds=10)


class BillingBackend(Protocol):
    def increase_usage(self, owner_id: int, usage: Dict[str, Any]) -> Any:  # pragma: no cover - interface
        ...

    def cancel_usage(self, booking_uid: str) -> Any:  # pragma: no cover - interface
        ...


@dataclass(frozen=True)
class UsageEvent:
    owner_id: int
    booking_uid: str
    effective_time: datetime
    from_reschedule: Optional[bool] = None

    def to_usage_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "bookingUid": self.booking_uid,
            "startTime": self.effective_time.isoformat(),
        }
        if self.from_reschedule is not None:
            payload["fromReschedule"] = self.from_reschedule
        return payload


class BillingService:
    """Issues usage accounting calls after successful booking operations.

    Calls are best-effort: nothing here retries or compensates. ``emit_*``
    methods are awaited by the caller; ``fire_usage`` schedules an
    independent task whose failure is only logged.
    """

    def __init__(self, backend: BillingBackend, clock: Callable[[], datetime] | None = None) -> None:
        self._backend = backend
        self._clock = clock or (lambda: datetime.now(UTC))
        self._pending: Set[asyncio.Task] = set()

    def instant_effective_time(self) -> datetime:
        return self._clock() + INSTANT_USAGE_DELAY

    async def emit_usage(self, event: UsageEvent) -> None:
        logger.info("Increasing usage for user %s (booking %s)", event.owner_id, event.booking_uid)
        await asyncio.to_thread(self._backend.increase_usage, event.owner_id, event.to_usage_payload())

    async def emit_cancellation(self, booking_uid: str) -> None:
        logger.info("Cancelling usage for booking %s", booking_uid)
        await asyncio.to_thread(self._backend.cancel_usage, booking_uid)

    def fire_usage(self, event: UsageEvent) -> asyncio.Task:
        task = asyncio.create_task(self.emit_usage(event))
        self._pending.add(task)
        task.add_done_callback(self._on_fired_done)
        return task

    def _on_fired_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Background usage accounting failed", exc_info=error)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for fire-and-forget accounting tasks still in flight."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
