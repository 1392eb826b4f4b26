"""Main orchestration module for the social copy service."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from social_copy.config import Settings, settings
from social_copy.embeddings.copy_generator import CopyGenerator
from social_copy.embeddings.embeddings_service import EmbeddingsService
from social_copy.embeddings.prompts import REFERENCE_FIELDS, compose_prompts
from social_copy.errors import ValidationError
from social_copy.links import LinkService, append_link
from social_copy.scraper.page_scraper import PageScraper
from social_copy.storage.pinecone_storage import IndexedEntry, MatchResult, PineconeStorage

logger = logging.getLogger(__name__)


class PipelinePolicy:
    """Knobs that distinguish the copy-generation variants.

    Attributes:
        top_k: Number of past copies retrieved per request
        reference_fields: Which metadata fields are shown per example
        rag_platforms: Platforms whose prompt receives the examples
        embed_description: Embed title + description instead of title only
        isolate_failures: Degrade a failed platform to placeholder text
            instead of failing the request
        call_timeout: Per-generation-call timeout in seconds
        link_platform: Platform whose copy gets the tagged article link
            (None to disable)
    """

    def __init__(
        self,
        top_k: int = 3,
        reference_fields: Sequence[str] = REFERENCE_FIELDS,
        rag_platforms: Sequence[str] = ("facebook",),
        embed_description: bool = False,
        isolate_failures: bool = False,
        call_timeout: Optional[float] = None,
        link_platform: Optional[str] = None
    ):
        if top_k < 1:
            raise ValueError("top_k must be at least 1")
        self.top_k = top_k
        self.reference_fields = list(reference_fields)
        self.rag_platforms = list(rag_platforms)
        self.embed_description = embed_description
        self.isolate_failures = isolate_failures
        self.call_timeout = call_timeout
        self.link_platform = link_platform or None

    @classmethod
    def from_settings(cls, config: Settings) -> "PipelinePolicy":
        if config.failure_policy not in ("fail_fast", "isolate"):
            raise ValueError(f"Unknown failure policy: {config.failure_policy}")
        return cls(
            top_k=config.rag_top_k,
            reference_fields=config.get_reference_fields(),
            rag_platforms=config.get_rag_platforms(),
            embed_description=config.embed_description,
            isolate_failures=config.failure_policy == "isolate",
            call_timeout=config.generation_timeout or None,
            link_platform=config.link_platform
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "top_k": self.top_k,
            "reference_fields": self.reference_fields,
            "rag_platforms": self.rag_platforms,
            "embed_description": self.embed_description,
            "failure_policy": "isolate" if self.isolate_failures else "fail_fast",
            "call_timeout": self.call_timeout,
            "link_platform": self.link_platform,
        }


def _require(value: Optional[str], message: str) -> str:
    if not value or not value.strip():
        raise ValidationError(message)
    return value.strip()


class CopyPipeline:
    """Main orchestrator for indexing, similarity search and copy generation."""

    def __init__(
        self,
        scraper: Optional[PageScraper] = None,
        embeddings_service: Optional[EmbeddingsService] = None,
        storage: Optional[PineconeStorage] = None,
        generator: Optional[CopyGenerator] = None,
        links: Optional[LinkService] = None,
        policy: Optional[PipelinePolicy] = None
    ):
        self.scraper = scraper or PageScraper()
        self.embeddings_service = embeddings_service or EmbeddingsService()
        self.storage = storage or PineconeStorage()
        self.generator = generator or CopyGenerator()
        self.links = links or LinkService()
        self.policy = policy or PipelinePolicy.from_settings(settings)

    async def index_copy(self, noticia: Optional[str], copy: Optional[str]) -> str:
        """Embed a news text and store it with its published copy.

        Returns:
            The id of the new entry
        """
        noticia = _require(noticia, "La 'noticia' y el 'copy' son obligatorios.")
        copy = _require(copy, "La 'noticia' y el 'copy' son obligatorios.")

        vector = await self.embeddings_service.generate_embedding(noticia)
        entry = IndexedEntry(vector=vector, noticia=noticia, copy=copy)
        await self.storage.upsert(entry)
        return entry.id

    async def find_similar(self, texto: Optional[str]) -> Optional[MatchResult]:
        """Return the single closest indexed entry, or None if the index is empty."""
        texto = _require(texto, "Se requiere un campo 'texto' para buscar similitud.")

        vector = await self.embeddings_service.generate_embedding(texto)
        matches = await self.storage.query(vector, top_k=1, include_metadata=True)
        return matches[0] if matches else None

    async def retrieve_examples(self, text: str) -> List[MatchResult]:
        """Fetch the most similar past copies for a text."""
        vector = await self.embeddings_service.generate_embedding(text)
        return await self.storage.query(vector, top_k=self.policy.top_k, include_metadata=True)

    async def generate_copies(self, url: Optional[str]) -> Dict[str, Any]:
        """Run the full generation pipeline for an article URL.

        Steps:
        1. Scrape title (and description) from the page
        2. Embed and retrieve similar past copies
        3. Compose one prompt per platform
        4. Generate all copies concurrently
        5. Append the tagged, shortened link to one platform's copy

        Any failure aborts the request; nothing partial is returned.
        """
        url = _require(url, "La URL es obligatoria.")

        content = await self.scraper.extract(url)

        query_text = content.combined_text if self.policy.embed_description else content.title
        examples = await self.retrieve_examples(query_text)
        logger.info(f"Retrieved {len(examples)} reference copies for {url}")

        prompts = compose_prompts(
            content.title,
            content.description,
            examples=examples,
            reference_fields=self.policy.reference_fields,
            rag_platforms=self.policy.rag_platforms
        )

        copies = await self.generator.generate_many(
            prompts,
            timeout=self.policy.call_timeout,
            isolate_failures=self.policy.isolate_failures
        )

        platform = self.policy.link_platform
        if platform and platform in copies:
            link = await self.links.tagged_link(url, platform)
            copies[platform] = append_link(copies[platform], link)

        return {
            "facebook": copies["facebook"],
            "twitter": copies["twitter"],
            "wpp": copies["wpp"],
            "foundCopies": [
                {
                    "id": match.id,
                    "score": match.score,
                    "noticia": match.noticia,
                    "copy": match.copy,
                }
                for match in examples
            ],
        }
