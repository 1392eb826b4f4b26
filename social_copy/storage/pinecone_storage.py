"""Pinecone storage for indexed copies.

Entries hold the embedding of a news text plus the text and the copy that
was published for it. They are never mutated or deleted from here.
"""

import asyncio
import logging
import uuid
from typing import Any, Dict, List, Optional

from pinecone import Pinecone

from social_copy.config import settings
from social_copy.errors import StoreQueryError, StoreWriteError

logger = logging.getLogger(__name__)


def new_entry_id() -> str:
    """Collision-resistant id for a new entry."""
    return uuid.uuid4().hex


class IndexedEntry:
    """A vector plus its metadata, as written to the index."""

    def __init__(
        self,
        vector: List[float],
        noticia: str,
        copy: str,
        entry_id: Optional[str] = None
    ):
        self.id = entry_id or new_entry_id()
        self.vector = vector
        self.metadata = {"noticia": noticia, "copy": copy}

    def to_pinecone(self) -> Dict[str, Any]:
        """Render the record in Pinecone's upsert format."""
        return {
            "id": self.id,
            "values": self.vector,
            "metadata": self.metadata,
        }


class MatchResult:
    """A scored nearest-neighbor match."""

    def __init__(self, id: str, score: float, metadata: Optional[Dict[str, Any]] = None):
        self.id = id
        self.score = score
        self.metadata = metadata or {}

    @property
    def noticia(self) -> str:
        return str(self.metadata.get("noticia") or "")

    @property
    def copy(self) -> str:
        return str(self.metadata.get("copy") or "")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "score": self.score,
            "metadata": self.metadata,
        }


def _field(obj: Any, name: str, default: Any = None) -> Any:
    # SDK responses support attribute access; plain dicts show up in tests
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def parse_matches(response: Any, top_k: int) -> List[MatchResult]:
    """Convert a query response into ranked, de-duplicated matches."""
    raw_matches = _field(response, "matches") or []

    matches = []
    seen_ids = set()
    for raw in raw_matches:
        match_id = _field(raw, "id")
        if match_id is None or match_id in seen_ids:
            continue
        seen_ids.add(match_id)
        matches.append(MatchResult(
            id=match_id,
            score=float(_field(raw, "score") or 0.0),
            metadata=dict(_field(raw, "metadata") or {}),
        ))

    matches.sort(key=lambda m: m.score, reverse=True)
    return matches[:top_k]


class PineconeStorage:
    """Thin async wrapper over a single Pinecone index namespace."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        index_name: Optional[str] = None,
        namespace: Optional[str] = None,
        host: Optional[str] = None
    ):
        self.api_key = api_key or settings.pinecone_api_key
        self.index_name = index_name or settings.pinecone_index_name
        self.namespace = settings.pinecone_namespace if namespace is None else namespace
        self.host = settings.pinecone_host if host is None else host
        self._index = None

    @property
    def index(self):
        """Lazy-loaded index handle.

        Without a host the client looks the index up over the network, so
        this is only touched from worker threads.
        """
        if self._index is None:
            client = Pinecone(api_key=self.api_key)
            if self.host:
                self._index = client.Index(host=self.host)
            else:
                self._index = client.Index(self.index_name)
        return self._index

    def _upsert(self, entry: IndexedEntry) -> None:
        self.index.upsert(vectors=[entry.to_pinecone()], namespace=self.namespace)

    def _query(self, vector: List[float], top_k: int, include_metadata: bool) -> Any:
        return self.index.query(
            vector=vector,
            top_k=top_k,
            include_metadata=include_metadata,
            namespace=self.namespace
        )

    async def upsert(self, entry: IndexedEntry) -> None:
        """Write an entry. Idempotent by id.

        Raises:
            StoreWriteError: On any client or service failure
        """
        try:
            await asyncio.to_thread(self._upsert, entry)
        except Exception as e:
            raise StoreWriteError(f"Upsert of {entry.id} failed: {e}") from e

        logger.info(f"Indexed entry {entry.id}")

    async def query(
        self,
        vector: List[float],
        top_k: int = 3,
        include_metadata: bool = True
    ) -> List[MatchResult]:
        """Return the top_k nearest entries, best first.

        An empty index yields an empty list.

        Raises:
            ValueError: If top_k < 1
            StoreQueryError: On any client or service failure
        """
        if top_k < 1:
            raise ValueError("top_k must be at least 1")

        try:
            response = await asyncio.to_thread(self._query, vector, top_k, include_metadata)
        except Exception as e:
            raise StoreQueryError(f"Query failed: {e}") from e

        matches = parse_matches(response, top_k)
        logger.info(f"Query returned {len(matches)} matches")
        return matches
