from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartnerConfig:
    partner_id: str = ""
    cancel_redirect_url: str = ""
    reschedule_redirect_url: str = ""
    booking_redirect_url: str = ""
    emails_enabled: bool = False
    booking_location_override: Optional[str] = None


DEFAULT_PARTNER_CONFIG = PartnerConfig()


class PartnerRepository:
    """Reads integrating partner (OAuth client) records."""

    def __init__(self, collection) -> None:
        self._collection = collection

    def find_by_id(self, partner_id: str) -> Optional[Dict[str, Any]]:
        return self._collection.find_one({"clientId": partner_id})


class PartnerContextProvider:
    """Builds a per-request partner configuration snapshot."""

    def __init__(self, repository: PartnerRepository) -> None:
        self._repository = repository

    async def resolve_partner_config(self, partner_id: Optional[str]) -> PartnerConfig:
        if not partner_id:
            return DEFAULT_PARTNER_CONFIG

        try:
            record = await asyncio.to_thread(self._repository.find_by_id, partner_id)
        except Exception:
            logger.exception("Failed to load partner configuration for %s", partner_id)
            return DEFAULT_PARTNER_CONFIG

        if not record:
            logger.warning("Unknown partner id %s, using default configuration", partner_id)
            return DEFAULT_PARTNER_CONFIG

        return PartnerConfig(
            partner_id=partner_id,
            cancel_redirect_url=record.get("bookingCancelRedirectUri") or "",
            reschedule_redirect_url=record.get("bookingRescheduleRedirectUri") or "",
            booking_redirect_url=record.get("bookingRedirectUri") or "",
            emails_enabled=bool(record.get("areEmailsEnabled") or False),
        )
