from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query, status

from src.app.config import Settings
from src.app.dependencies import (
    get_booking_query_service,
    get_credential_resolver,
    get_orchestrator,
    get_settings,
)
from src.orchestrator.graph import BookingOrchestrator
from src.orchestrator.operations import Operation
from src.orchestrator.state import BookingFlowState
from src.schemas.booking import (
    ApiResponse,
    BookingStatus,
    CancelBookingInput,
    CreateBookingInput,
    CreateRecurringBookingInput,
    MarkNoShowInput,
)
from src.services.bookings import BookingQueryService
from src.services.credentials import CredentialResolver
from src.services.errors import UnauthorizedError

PARTNER_CLIENT_ID_HEADER = "x-partner-client-id"

router = APIRouter()
bookings_router = APIRouter(prefix="/v2/bookings", tags=["bookings"])


async def require_user_id(
    authorization: Optional[str] = Header(default=None),
    resolver: CredentialResolver = Depends(get_credential_resolver),
) -> int:
    user_id = await resolver.resolve_owner(authorization)
    if user_id is None:
        raise UnauthorizedError()
    return user_id


@router.get("/health", status_code=status.HTTP_200_OK)
def health(settings: Settings = Depends(get_settings)) -> dict:
    return {"app": settings.app_name, "status": "ok"}


@bookings_router.get("", response_model=ApiResponse)
async def list_bookings(
    status_filter: BookingStatus = Query(..., alias="status"),
    limit: Optional[int] = Query(default=None, ge=1, le=250),
    cursor: Optional[int] = Query(default=None, ge=0),
    user_id: int = Depends(require_user_id),
    service: BookingQueryService = Depends(get_booking_query_service),
) -> dict:
    return await service.list_bookings(user_id=user_id, status=status_filter, limit=limit, cursor=cursor)


@bookings_router.get("/{booking_uid}", response_model=ApiResponse)
async def get_booking(
    booking_uid: str,
    service: BookingQueryService = Depends(get_booking_query_service),
) -> dict:
    return await service.get_booking(booking_uid)


@bookings_router.get("/{booking_uid}/reschedule", response_model=ApiResponse)
async def get_booking_for_reschedule(
    booking_uid: str,
    service: BookingQueryService = Depends(get_booking_query_service),
) -> dict:
    return await service.get_booking_for_reschedule(booking_uid)


@bookings_router.post("", response_model=ApiResponse)
async def create_booking(
    payload: CreateBookingInput,
    authorization: Optional[str] = Header(default=None),
    partner_id: Optional[str] = Header(default=None, alias=PARTNER_CLIENT_ID_HEADER),
    orchestrator: BookingOrchestrator = Depends(get_orchestrator),
) -> dict:
    state = BookingFlowState(
        operation=Operation.CREATE,
        payload=payload.to_engine_payload(),
        credential=authorization,
        partner_id=partner_id,
        location_override=payload.location_url,
    )
    return await orchestrator.run(state)


@bookings_router.post("/recurring", response_model=ApiResponse)
async def create_recurring_booking(
    payload: List[CreateRecurringBookingInput],
    authorization: Optional[str] = Header(default=None),
    partner_id: Optional[str] = Header(default=None, alias=PARTNER_CLIENT_ID_HEADER),
    orchestrator: BookingOrchestrator = Depends(get_orchestrator),
) -> dict:
    state = BookingFlowState(
        operation=Operation.CREATE_RECURRING,
        payload=[item.to_engine_payload() for item in payload],
        credential=authorization,
        partner_id=partner_id,
    )
    return await orchestrator.run(state)


@bookings_router.post("/instant", response_model=ApiResponse)
async def create_instant_booking(
    payload: CreateBookingInput,
    authorization: Optional[str] = Header(default=None),
    partner_id: Optional[str] = Header(default=None, alias=PARTNER_CLIENT_ID_HEADER),
    orchestrator: BookingOrchestrator = Depends(get_orchestrator),
) -> dict:
    state = BookingFlowState(
        operation=Operation.CREATE_INSTANT,
        payload=payload.to_engine_payload(),
        credential=authorization,
        partner_id=partner_id,
    )
    return await orchestrator.run(state)


@bookings_router.post("/{booking_id}/cancel", response_model=ApiResponse)
async def cancel_booking(
    booking_id: str,
    payload: Optional[CancelBookingInput] = None,
    authorization: Optional[str] = Header(default=None),
    partner_id: Optional[str] = Header(default=None, alias=PARTNER_CLIENT_ID_HEADER),
    orchestrator: BookingOrchestrator = Depends(get_orchestrator),
) -> dict:
    state = BookingFlowState(
        operation=Operation.CANCEL,
        payload=payload.to_engine_payload() if payload else {},
        credential=authorization,
        partner_id=partner_id,
        booking_id=booking_id,
    )
    return await orchestrator.run(state)


@bookings_router.post("/{booking_uid}/mark-no-show", response_model=ApiResponse)
async def mark_no_show(
    booking_uid: str,
    payload: MarkNoShowInput,
    authorization: Optional[str] = Header(default=None),
    orchestrator: BookingOrchestrator = Depends(get_orchestrator),
) -> dict:
    state = BookingFlowState(
        operation=Operation.MARK_NO_SHOW,
        payload=payload.model_dump(by_alias=True, exclude_none=True),
        credential=authorization,
        booking_uid=booking_uid,
    )
    return await orchestrator.run(state)


router.include_router(bookings_router)
