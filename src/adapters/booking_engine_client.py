from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests


class BookingEngineError(Exception):
    """Domain error reported by the booking engine with its own status."""

    def __init__(self, status_code: Optional[int] = None, message: Optional[str] = None) -> None:
        super().__init__(message or "")
        self.status_code = status_code
        self.message = message

    def __repr__(self) -> str:
        return f"BookingEngineError(status_code={self.status_code!r}, message={self.message!r})"


@dataclass
class BookingEngineClient:
    """HTTP client for the scheduling engine's booking endpoints."""

    base_url: str
    timeout: float = 10.0

    def create_booking(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return self._post("/bookings", request)

    def create_recurring_booking(self, request: Dict[str, Any]) -> List[Dict[str, Any]]:
        return self._post("/bookings/recurring", request)

    def create_instant_meeting(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return self._post("/bookings/instant", request)

    def cancel_booking(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return self._post("/bookings/cancel", request)

    def mark_no_show(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return self._post("/bookings/mark-no-show", request)

    def get_bookings(self, *, status: str, skip: int, take: int, user_id: int) -> Dict[str, Any]:
        params = {"status": status, "skip": skip, "take": take, "userId": user_id}
        return self._get("/bookings", params=params)

    def get_booking_info(self, booking_uid: str) -> Optional[Dict[str, Any]]:
        return self._get(f"/bookings/{booking_uid}", allow_missing=True)

    def get_booking_for_reschedule(self, booking_uid: str) -> Optional[Dict[str, Any]]:
        return self._get(f"/bookings/{booking_uid}/reschedule", allow_missing=True)

    def _url(self, path: str) -> str:
        if not self.base_url:
            raise RuntimeError("Booking engine client configured without base URL")
        return self.base_url.rstrip("/") + path

    def _post(self, path: str, payload: Dict[str, Any]):
        response = requests.post(self._url(path), json=payload, timeout=self.timeout)
        return self._parse(response)

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None, allow_missing: bool = False):
        response = requests.get(self._url(path), params=params, timeout=self.timeout)
        if allow_missing and response.status_code == 404:
            return None
        return self._parse(response)

    def _parse(self, response: requests.Response):
        if 200 <= response.status_code < 300:
            if not response.content:
                return None
            body = response.json()
            # The engine may wrap results in its own envelope.
            if isinstance(body, dict) and set(body) == {"data"}:
                return body["data"]
            return body
        message: Optional[str] = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            detail = body.get("message") or body.get("error")
            if detail is not None:
                message = detail if isinstance(detail, str) else json.dumps(detail)
        raise BookingEngineError(status_code=response.status_code, message=message or response.text or None)
