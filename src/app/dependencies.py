from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from src.adapters.billing_client import BillingClient
from src.adapters.booking_engine_client import BookingEngineClient
from src.adapters.mongo_client import MongoClientFactory
from src.adapters.token_client import TokenIntrospectionClient
from src.app.config import Settings, get_settings
from src.orchestrator.context import RequestContextAssembler
from src.orchestrator.graph import BookingOrchestrator
from src.services.billing import BillingService
from src.services.bookings import BookingQueryService
from src.services.credentials import ApiKeyRepository, CredentialResolver
from src.services.partners import PartnerContextProvider, PartnerRepository


@lru_cache(maxsize=1)
def get_mongo_factory() -> MongoClientFactory:
    settings = get_settings()
    return MongoClientFactory(settings.mongo_uri, settings.mongo_database)


@lru_cache(maxsize=1)
def get_booking_engine() -> BookingEngineClient:
    settings = get_settings()
    return BookingEngineClient(base_url=settings.booking_engine_url, timeout=settings.http_timeout)


@lru_cache(maxsize=1)
def get_token_client() -> TokenIntrospectionClient:
    settings = get_settings()
    return TokenIntrospectionClient(
        introspection_url=settings.token_introspection_url,
        timeout=settings.http_timeout,
    )


@lru_cache(maxsize=1)
def get_billing_service() -> BillingService:
    settings = get_settings()
    client = BillingClient(
        base_url=settings.billing_api_url,
        api_key=settings.billing_api_key,
        timeout=settings.http_timeout,
    )
    return BillingService(backend=client)


def get_credential_resolver(
    settings: Settings = Depends(get_settings),
    mongo_factory: MongoClientFactory = Depends(get_mongo_factory),
    token_client: TokenIntrospectionClient = Depends(get_token_client),
) -> CredentialResolver:
    return CredentialResolver(
        api_key_repository=ApiKeyRepository(mongo_factory.get_collection(settings.api_keys_collection)),
        token_introspector=token_client,
        key_prefix=settings.api_key_prefix,
    )


def get_partner_provider(
    settings: Settings = Depends(get_settings),
    mongo_factory: MongoClientFactory = Depends(get_mongo_factory),
) -> PartnerContextProvider:
    return PartnerContextProvider(
        repository=PartnerRepository(mongo_factory.get_collection(settings.partners_collection)),
    )


def get_context_assembler(
    credential_resolver: CredentialResolver = Depends(get_credential_resolver),
    partner_provider: PartnerContextProvider = Depends(get_partner_provider),
) -> RequestContextAssembler:
    return RequestContextAssembler(credential_resolver, partner_provider)


def get_booking_query_service(
    engine: BookingEngineClient = Depends(get_booking_engine),
) -> BookingQueryService:
    return BookingQueryService(engine=engine)


def get_orchestrator(
    engine: BookingEngineClient = Depends(get_booking_engine),
    assembler: RequestContextAssembler = Depends(get_context_assembler),
    billing_service: BillingService = Depends(get_billing_service),
) -> BookingOrchestrator:
    return BookingOrchestrator(
        engine=engine,
        assembler=assembler,
        billing_service=billing_service,
    )
