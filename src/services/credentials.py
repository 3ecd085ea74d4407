from __future__ import annotations

import asyncio
import hashlib
import logging
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class TokenIntrospector(Protocol):
    def resolve_owner(self, token: str) -> Optional[int]:  # pragma: no cover - interface
        ...


def is_api_key(credential: str, key_prefix: str) -> bool:
    return bool(key_prefix) and credential.startswith(key_prefix)


def strip_api_key(credential: str, key_prefix: str) -> str:
    return credential[len(key_prefix):] if credential.startswith(key_prefix) else credential


def hash_api_key(secret: str) -> str:
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


class ApiKeyRepository:
    """Looks up stored API key records by the hash of their secret."""

    def __init__(self, collection) -> None:
        self._collection = collection

    def find_by_key_hash(self, key_hash: str) -> Optional[Dict[str, Any]]:
        return self._collection.find_one({"hashedKey": key_hash})


class CredentialResolver:
    """Resolves a bearer credential to the id of the user that owns it.

    Two credential shapes are accepted: static API keys (recognised by their
    prefix and matched by hash against stored records) and opaque access
    tokens, which are handed to the token introspection service. Resolution
    never raises; any failure is logged and reported as ``None``.
    """

    def __init__(
        self,
        api_key_repository: ApiKeyRepository,
        token_introspector: TokenIntrospector,
        key_prefix: str = "cal_",
    ) -> None:
        self._api_keys = api_key_repository
        self._tokens = token_introspector
        self._key_prefix = key_prefix

    async def resolve_owner(self, credential: Optional[str], key_prefix: Optional[str] = None) -> Optional[int]:
        if not credential:
            return None

        prefix = self._key_prefix if key_prefix is None else key_prefix
        token = credential[len(BEARER_PREFIX):] if credential.startswith(BEARER_PREFIX) else credential
        token = token.strip()
        if not token:
            return None

        try:
            if is_api_key(token, prefix):
                key_hash = hash_api_key(strip_api_key(token, prefix))
                record = await asyncio.to_thread(self._api_keys.find_by_key_hash, key_hash)
                if not record:
                    return None
                owner_id = record.get("userId")
                return int(owner_id) if owner_id is not None else None
            return await asyncio.to_thread(self._tokens.resolve_owner, token)
        except Exception:
            logger.exception("Failed to resolve credential owner")
            return None
