from __future__ import annotations

import asyncio

from src.services.partners import (
    DEFAULT_PARTNER_CONFIG,
    PartnerConfig,
    PartnerContextProvider,
    PartnerRepository,
)


class MemoryCollection:
    def __init__(self, documents=None) -> None:
        self.documents = list(documents or [])
        self.queries = []

    def find_one(self, query):
        self.queries.append(query)
        for document in self.documents:
            if all(document.get(key) == value for key, value in query.items()):
                return document
        return None


class BrokenCollection:
    def find_one(self, query):
        raise TimeoutError("lookup timed out")


def _provider(collection) -> PartnerContextProvider:
    return PartnerContextProvider(repository=PartnerRepository(collection))


def test_default_config_values():
    assert DEFAULT_PARTNER_CONFIG == PartnerConfig(
        partner_id="",
        cancel_redirect_url="",
        reschedule_redirect_url="",
        booking_redirect_url="",
        emails_enabled=False,
    )


def test_missing_partner_id_skips_lookup():
    collection = MemoryCollection()

    config = asyncio.run(_provider(collection).resolve_partner_config(None))

    assert config == DEFAULT_PARTNER_CONFIG
    assert collection.queries == []


def test_known_partner_populates_config():
    collection = MemoryCollection(
        [
            {
                "clientId": "partner-1",
                "bookingRedirectUri": "https://partner.example/booked",
                "bookingCancelRedirectUri": "https://partner.example/cancelled",
                "bookingRescheduleRedirectUri": None,
                "areEmailsEnabled": True,
            }
        ]
    )

    config = asyncio.run(_provider(collection).resolve_partner_config("partner-1"))

    assert config.partner_id == "partner-1"
    assert config.booking_redirect_url == "https://partner.example/booked"
    assert config.cancel_redirect_url == "https://partner.example/cancelled"
    assert config.reschedule_redirect_url == ""
    assert config.emails_enabled is True


def test_unknown_partner_falls_back_to_default():
    config = asyncio.run(_provider(MemoryCollection()).resolve_partner_config("missing"))

    assert config == DEFAULT_PARTNER_CONFIG


def test_lookup_error_falls_back_to_default():
    config = asyncio.run(_provider(BrokenCollection()).resolve_partner_config("partner-1"))

    assert config == DEFAULT_PARTNER_CONFIG


def test_configs_are_not_shared_between_requests():
    collection = MemoryCollection([{"clientId": "partner-1", "areEmailsEnabled": True}])
    provider = _provider(collection)

    first = asyncio.run(provider.resolve_partner_config("partner-1"))
    second = asyncio.run(provider.resolve_partner_config("unknown"))

    assert first.emails_enabled is True
    assert second == DEFAULT_PARTNER_CONFIG
    assert DEFAULT_PARTNER_CONFIG.partner_id == ""
