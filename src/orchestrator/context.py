from __future__ import annotations

import copy
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Union

from src.services.credentials import CredentialResolver
from src.services.partners import DEFAULT_PARTNER_CONFIG, PartnerConfig, PartnerContextProvider

UNKNOWN_PRINCIPAL_ID = -1
FORCE_ORG_SLUG_HEADER = "x-force-org-slug"

Payload = Union[Dict[str, Any], List[Dict[str, Any]]]


@dataclass(frozen=True)
class RequestContext:
    """Everything the booking engine needs to process one request."""

    payload: Payload
    principal_id: Optional[int]
    partner: PartnerConfig = DEFAULT_PARTNER_CONFIG
    suppress_email: bool = True
    forced_org_slug: Optional[str] = None

    def to_engine_request(self) -> Dict[str, Any]:
        headers: Dict[str, str] = {}
        if self.forced_org_slug:
            headers[FORCE_ORG_SLUG_HEADER] = self.forced_org_slug
        return {
            "body": copy.deepcopy(self.payload),
            "userId": self.principal_id,
            "noEmail": self.suppress_email,
            "headers": headers,
            "platformClientId": self.partner.partner_id,
            "platformCancelUrl": self.partner.cancel_redirect_url,
            "platformRescheduleUrl": self.partner.reschedule_redirect_url,
            "platformBookingUrl": self.partner.booking_redirect_url,
            "platformBookingLocation": self.partner.booking_location_override,
            "arePlatformEmailsEnabled": self.partner.emails_enabled,
        }


class RequestContextAssembler:
    def __init__(self, credential_resolver: CredentialResolver, partner_provider: PartnerContextProvider) -> None:
        self._credentials = credential_resolver
        self._partners = partner_provider

    async def resolve_principal(self, credential: Optional[str], sentinel_fallback: bool = True) -> Optional[int]:
        owner_id = await self._credentials.resolve_owner(credential)
        if owner_id is None and sentinel_fallback:
            return UNKNOWN_PRINCIPAL_ID
        return owner_id

    async def assemble(
        self,
        payload: Payload,
        credential: Optional[str],
        partner_id: Optional[str],
        booking_location_override: Optional[str] = None,
        *,
        sentinel_fallback: bool = True,
        principal_id: Optional[int] = None,
    ) -> RequestContext:
        """Build a fresh context; an already resolved principal skips re-resolution."""
        if principal_id is None:
            principal_id = await self.resolve_principal(credential, sentinel_fallback)

        partner = await self._partners.resolve_partner_config(partner_id) if partner_id else DEFAULT_PARTNER_CONFIG
        if booking_location_override:
            partner = replace(partner, booking_location_override=booking_location_override)

        forced_org_slug = payload.get("orgSlug") if isinstance(payload, dict) else None

        return RequestContext(
            payload=copy.deepcopy(payload),
            principal_id=principal_id,
            partner=partner,
            suppress_email=not partner.emails_enabled,
            forced_org_slug=forced_org_slug,
        )
