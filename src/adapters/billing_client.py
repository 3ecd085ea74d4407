from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

import requests


@dataclass
class BillingClient:
    """Posts usage accounting calls to the billing service."""

    base_url: str
    api_key: str
    timeout: float = 10.0

    def increase_usage(self, owner_id: int, usage: Dict[str, Any]) -> Dict[str, Any]:
        payload = {"userId": owner_id, **usage}
        return self._post("/usage/increase", payload)

    def cancel_usage(self, booking_uid: str) -> Dict[str, Any]:
        return self._post("/usage/cancel", {"bookingUid": booking_uid})

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.base_url:
            raise RuntimeError("Billing client configured without base URL")

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        response = requests.post(
            self.base_url.rstrip("/") + path,
            headers=headers,
            json=payload,
            timeout=self.timeout,
        )
        if response.status_code not in (200, 201, 202, 204):
            raise RuntimeError(
                f"Billing call {path} failed (status {response.status_code}): {response.text}"
            )
        return {"status": response.status_code, **payload}
