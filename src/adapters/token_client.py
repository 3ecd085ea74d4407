from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import requests


@dataclass
class TokenIntrospectionClient:
    """Resolves opaque access tokens to the id of the user who owns them."""

    introspection_url: str
    timeout: float = 10.0

    def resolve_owner(self, token: str) -> Optional[int]:
        if not self.introspection_url:
            raise RuntimeError("Token introspection client configured without URL")

        response = requests.post(
            self.introspection_url,
            json={"token": token},
            timeout=self.timeout,
        )
        if response.status_code in (401, 404):
            return None
        if response.status_code != 200:
            raise RuntimeError(
                f"Token introspection failed (status {response.status_code}): {response.text}"
            )

        body = response.json() or {}
        if body.get("active") is False:
            return None
        owner_id = body.get("ownerId", body.get("userId"))
        return int(owner_id) if owner_id is not None else None
