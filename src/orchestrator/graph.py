from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional, Protocol

from langgraph.graph import END, START, StateGraph
from pydantic import BaseModel, ValidationError

from src.orchestrator.context import RequestContextAssembler
from src.orchestrator.operations import Operation
from src.orchestrator.state import BookingFlowState
from src.schemas.booking import (
    SUCCESS_STATUS,
    BookingResult,
    CancellationResult,
    InstantMeetingResult,
)
from src.services.billing import BillingService, UsageEvent
from src.services.errors import ClassifiedError, NotFoundError, classify

logger = logging.getLogger(__name__)


class BookingEngine(Protocol):
    def create_booking(self, request: Dict[str, Any]) -> Dict[str, Any]:  # pragma: no cover - interface
        ...

    def create_recurring_booking(self, request: Dict[str, Any]) -> List[Dict[str, Any]]:  # pragma: no cover
        ...

    def create_instant_meeting(self, request: Dict[str, Any]) -> Dict[str, Any]:  # pragma: no cover
        ...

    def cancel_booking(self, request: Dict[str, Any]) -> Dict[str, Any]:  # pragma: no cover
        ...

    def mark_no_show(self, request: Dict[str, Any]) -> Dict[str, Any]:  # pragma: no cover
        ...


def _as_mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _billing_view(model: type[BaseModel], value: Any) -> Optional[BaseModel]:
    """Read the accounting fields of an engine result, or None when they are malformed."""
    try:
        return model.model_validate(_as_mapping(value))
    except ValidationError as exc:
        logger.warning("Skipping usage accounting for malformed %s: %s", model.__name__, exc)
        return None


def _parse_booking_id(value: Optional[str]) -> Optional[int]:
    booking_id = (value or "").strip()
    if not (booking_id.isascii() and booking_id.isdecimal()):
        return None
    return int(booking_id)


class BookingOrchestrator:
    """LangGraph state machine dispatching one booking write per request."""

    NODES = {
        Operation.CREATE: "create",
        Operation.CREATE_RECURRING: "create_recurring",
        Operation.CREATE_INSTANT: "create_instant",
        Operation.CANCEL: "cancel",
        Operation.MARK_NO_SHOW: "mark_no_show",
    }

    def __init__(
        self,
        engine: BookingEngine,
        assembler: RequestContextAssembler,
        billing_service: BillingService,
    ) -> None:
        self._engine = engine
        self._assembler = assembler
        self._billing = billing_service
        self._graph = self._build_graph().compile()

    def _build_graph(self) -> StateGraph:
        graph = StateGraph(BookingFlowState)

        graph.add_node("create", self._create_node)
        graph.add_node("create_recurring", self._recurring_node)
        graph.add_node("create_instant", self._instant_node)
        graph.add_node("cancel", self._cancel_node)
        graph.add_node("mark_no_show", self._no_show_node)

        graph.add_conditional_edges(START, self._operation_router, self.NODES)
        for node in self.NODES.values():
            graph.add_edge(node, END)

        return graph

    def _operation_router(self, state: BookingFlowState) -> Operation:
        return state.operation

    async def _create_node(self, state: BookingFlowState) -> Dict[str, Any]:
        context = await self._assembler.assemble(
            state.payload,
            state.credential,
            state.partner_id,
            state.location_override,
        )
        booking = await asyncio.to_thread(self._engine.create_booking, context.to_engine_request())

        outcome = _billing_view(BookingResult, booking)
        if outcome and outcome.user_id and outcome.uid and outcome.start_time:
            await self._billing.emit_usage(
                UsageEvent(
                    owner_id=outcome.user_id,
                    booking_uid=outcome.uid,
                    effective_time=outcome.start_time,
                    from_reschedule=outcome.from_reschedule,
                )
            )
        return {"result": booking, "completed": True}

    async def _recurring_node(self, state: BookingFlowState) -> Dict[str, Any]:
        context = await self._assembler.assemble(state.payload, state.credential, state.partner_id)
        bookings = await asyncio.to_thread(self._engine.create_recurring_booking, context.to_engine_request())

        # Each usage call runs on its own; none is awaited here.
        for booking in bookings or []:
            outcome = _billing_view(BookingResult, booking)
            if outcome and outcome.user_id and outcome.uid and outcome.start_time:
                self._billing.fire_usage(
                    UsageEvent(
                        owner_id=outcome.user_id,
                        booking_uid=outcome.uid,
                        effective_time=outcome.start_time,
                    )
                )
        return {"result": bookings, "completed": True}

    async def _instant_node(self, state: BookingFlowState) -> Dict[str, Any]:
        principal_id = await self._assembler.resolve_principal(state.credential, sentinel_fallback=True)
        context = await self._assembler.assemble(
            state.payload,
            state.credential,
            state.partner_id,
            principal_id=principal_id,
        )
        meeting = await asyncio.to_thread(self._engine.create_instant_meeting, context.to_engine_request())

        outcome = _billing_view(InstantMeetingResult, meeting)
        if outcome and outcome.user_id and outcome.booking_uid:
            await self._billing.emit_usage(
                UsageEvent(
                    owner_id=outcome.user_id,
                    booking_uid=outcome.booking_uid,
                    effective_time=self._billing.instant_effective_time(),
                )
            )
        return {"result": meeting, "completed": True}

    async def _cancel_node(self, state: BookingFlowState) -> Dict[str, Any]:
        payload = {**_as_mapping(state.payload), "id": _parse_booking_id(state.booking_id)}
        context = await self._assembler.assemble(payload, state.credential, state.partner_id)
        response = await asyncio.to_thread(self._engine.cancel_booking, context.to_engine_request())

        outcome = _billing_view(CancellationResult, response)
        if outcome is None:
            return {"result": response, "completed": True}
        if not outcome.only_removed_attendee and outcome.booking_uid:
            await self._billing.emit_cancellation(outcome.booking_uid)
        return {
            "result": {
                "bookingId": outcome.booking_id,
                "bookingUid": outcome.booking_uid,
                "onlyRemovedAttendee": outcome.only_removed_attendee,
            },
            "completed": True,
        }

    async def _no_show_node(self, state: BookingFlowState) -> Dict[str, Any]:
        user_id = await self._assembler.resolve_principal(state.credential, sentinel_fallback=False)
        payload = _as_mapping(state.payload)
        request = {
            "bookingUid": state.booking_uid,
            "attendees": payload.get("attendees"),
            "noShowHost": payload.get("noShowHost"),
            "userId": user_id,
        }
        response = await asyncio.to_thread(self._engine.mark_no_show, request)
        return {"result": response, "completed": True}

    def _check_preconditions(self, state: BookingFlowState) -> None:
        if state.operation is Operation.CANCEL:
            booking_id = (state.booking_id or "").strip()
            if not booking_id:
                raise NotFoundError("Booking ID is required.")
            if _parse_booking_id(booking_id) is None:
                raise ClassifiedError(400, "Booking ID must be numeric.")
        if state.operation is Operation.MARK_NO_SHOW and not state.booking_uid:
            raise NotFoundError("Booking UID is required.")

    async def run(self, state: BookingFlowState) -> Dict[str, Any]:
        self._check_preconditions(state)
        logger.info("Dispatching %s", state.operation.value)

        try:
            result = await self._graph.ainvoke(asdict(state))
        except Exception as exc:
            classify(exc, state.operation)

        completed, data = self._unpack(result)
        if not completed:
            raise ClassifiedError(500, state.operation.fallthrough_message)
        return {"status": SUCCESS_STATUS, "data": data}

    def _unpack(self, result: Any) -> tuple[bool, Optional[Any]]:
        if isinstance(result, BookingFlowState):
            return result.completed, result.result
        if isinstance(result, dict):
            return bool(result.get("completed")), result.get("result")
        raise TypeError(f"Unsupported state result from graph: {type(result)!r}")
