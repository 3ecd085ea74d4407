from __future__ import annotations

import asyncio
import hashlib

from src.services.credentials import (
    ApiKeyRepository,
    CredentialResolver,
    hash_api_key,
    is_api_key,
    strip_api_key,
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
        raise ConnectionError("mongo unavailable")


class StubIntrospector:
    def __init__(self, owner_id=None, error: Exception | None = None) -> None:
        self.owner_id = owner_id
        self.error = error
        self.tokens = []

    def resolve_owner(self, token: str):
        self.tokens.append(token)
        if self.error:
            raise self.error
        return self.owner_id


def _resolver(documents=None, introspector=None, collection=None) -> CredentialResolver:
    return CredentialResolver(
        api_key_repository=ApiKeyRepository(collection or MemoryCollection(documents)),
        token_introspector=introspector or StubIntrospector(),
        key_prefix="cal_",
    )


def test_hash_api_key_is_sha256_hex():
    assert hash_api_key("secret") == hashlib.sha256(b"secret").hexdigest()


def test_api_key_helpers():
    assert is_api_key("cal_abc", "cal_")
    assert not is_api_key("token-abc", "cal_")
    assert strip_api_key("cal_abc", "cal_") == "abc"


def test_matching_api_key_returns_owner():
    documents = [{"hashedKey": hash_api_key("s3cret"), "userId": 7}]
    introspector = StubIntrospector(owner_id=99)
    resolver = _resolver(documents, introspector)

    owner = asyncio.run(resolver.resolve_owner("Bearer cal_s3cret"))

    assert owner == 7
    assert introspector.tokens == []


def test_unknown_api_key_returns_none():
    resolver = _resolver([{"hashedKey": hash_api_key("other"), "userId": 3}])

    assert asyncio.run(resolver.resolve_owner("Bearer cal_s3cret")) is None


def test_access_token_is_introspected():
    introspector = StubIntrospector(owner_id=42)
    resolver = _resolver(introspector=introspector)

    owner = asyncio.run(resolver.resolve_owner("Bearer opaque-access-token"))

    assert owner == 42
    assert introspector.tokens == ["opaque-access-token"]


def test_missing_credential_short_circuits():
    introspector = StubIntrospector(owner_id=1)
    resolver = _resolver(introspector=introspector)

    assert asyncio.run(resolver.resolve_owner(None)) is None
    assert asyncio.run(resolver.resolve_owner("")) is None
    assert introspector.tokens == []


def test_store_failure_is_swallowed():
    resolver = _resolver(collection=BrokenCollection())

    assert asyncio.run(resolver.resolve_owner("cal_s3cret")) is None


def test_introspection_failure_is_swallowed():
    resolver = _resolver(introspector=StubIntrospector(error=RuntimeError("introspection down")))

    assert asyncio.run(resolver.resolve_owner("Bearer token")) is None


def test_custom_prefix_overrides_default():
    documents = [{"hashedKey": hash_api_key("s3cret"), "userId": 11}]
    resolver = _resolver(documents)

    assert asyncio.run(resolver.resolve_owner("pk_s3cret", key_prefix="pk_")) == 11
