from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

SUCCESS_STATUS = "success"


class BookingStatus(str, Enum):
    UPCOMING = "upcoming"
    RECURRING = "recurring"
    PAST = "past"
    CANCELLED = "cancelled"
    UNCONFIRMED = "unconfirmed"


class _EngineModel(BaseModel):
    """Base for payloads forwarded to the engine; unknown fields pass through."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_engine_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class CreateBookingInput(_EngineModel):
    start: str = Field(..., description="ISO start time of the requested slot")
    end: Optional[str] = None
    event_type_id: int = Field(..., alias="eventTypeId")
    time_zone: Optional[str] = Field(default=None, alias="timeZone")
    language: Optional[str] = None
    responses: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    org_slug: Optional[str] = Field(default=None, alias="orgSlug")
    location_url: Optional[str] = Field(default=None, alias="locationUrl")


class CreateRecurringBookingInput(CreateBookingInput):
    recurring_event_id: Optional[str] = Field(default=None, alias="recurringEventId")
    recurring_count: Optional[int] = Field(default=None, alias="recurringCount")


class CancelBookingInput(_EngineModel):
    cancellation_reason: Optional[str] = Field(default=None, alias="cancellationReason")
    all_remaining_bookings: Optional[bool] = Field(default=None, alias="allRemainingBookings")


class NoShowAttendee(BaseModel):
    email: str
    no_show: bool = Field(..., alias="noShow")

    model_config = ConfigDict(populate_by_name=True)


class MarkNoShowInput(BaseModel):
    attendees: Optional[List[NoShowAttendee]] = None
    no_show_host: Optional[bool] = Field(default=None, alias="noShowHost")

    model_config = ConfigDict(populate_by_name=True)


class BookingResult(BaseModel):
    """Fields of an engine booking result that accounting depends on."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    user_id: Optional[int] = Field(default=None, alias="userId")
    uid: Optional[str] = None
    start_time: Optional[datetime] = Field(default=None, alias="startTime")
    from_reschedule: Optional[bool] = Field(default=None, alias="fromReschedule")


class InstantMeetingResult(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    user_id: Optional[int] = Field(default=None, alias="userId")
    booking_uid: Optional[str] = Field(default=None, alias="bookingUid")


class CancellationResult(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    booking_id: Optional[int] = Field(default=None, alias="bookingId")
    booking_uid: Optional[str] = Field(default=None, alias="bookingUid")
    only_removed_attendee: bool = Field(
        default=False,
        validation_alias=AliasChoices("onlyRemovedAttendee", "onlyAttendeeRemoved"),
    )


class ApiResponse(BaseModel):
    status: str = SUCCESS_STATUS
    data: Any = None
