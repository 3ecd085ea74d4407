from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Protocol

from src.schemas.booking import SUCCESS_STATUS, BookingStatus
from src.services.errors import NotFoundError

DEFAULT_PAGE_SIZE = 10


class BookingReader(Protocol):
    def get_bookings(self, *, status: str, skip: int, take: int, user_id: int) -> Any:  # pragma: no cover
        ...

    def get_booking_info(self, booking_uid: str) -> Optional[Dict[str, Any]]:  # pragma: no cover
        ...

    def get_booking_for_reschedule(self, booking_uid: str) -> Optional[Dict[str, Any]]:  # pragma: no cover
        ...


class BookingQueryService:
    """Read-only booking lookups; these bypass the orchestration graph."""

    def __init__(self, engine: BookingReader) -> None:
        self._engine = engine

    async def list_bookings(
        self,
        user_id: int,
        status: BookingStatus,
        limit: Optional[int] = None,
        cursor: Optional[int] = None,
    ) -> Dict[str, Any]:
        bookings = await asyncio.to_thread(
            self._engine.get_bookings,
            status=status.value,
            skip=0 if cursor is None else cursor,
            take=DEFAULT_PAGE_SIZE if limit is None else limit,
            user_id=user_id,
        )
        return {"status": SUCCESS_STATUS, "data": bookings}

    async def get_booking(self, booking_uid: str) -> Dict[str, Any]:
        booking = await asyncio.to_thread(self._engine.get_booking_info, booking_uid)
        if not booking:
            raise NotFoundError(f"Booking with UID={booking_uid} does not exist.")
        return {"status": SUCCESS_STATUS, "data": booking}

    async def get_booking_for_reschedule(self, booking_uid: str) -> Dict[str, Any]:
        booking = await asyncio.to_thread(self._engine.get_booking_for_reschedule, booking_uid)
        if not booking:
            raise NotFoundError(f"Booking with UID={booking_uid} does not exist.")
        return {"status": SUCCESS_STATUS, "data": booking}
