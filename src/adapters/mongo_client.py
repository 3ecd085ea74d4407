from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from pymongo import MongoClient


@dataclass
class MongoClientFactory:
    uri: str
    db_name: str
    _client: Optional[MongoClient] = field(default=None, init=False, repr=False)

    def get_collection(self, collection_name: str):
        if self._client is None:
            self._client = MongoClient(self.uri)
        database = self._client[self.db_name]
        return database[collection_name]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
