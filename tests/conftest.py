"""Shared fixtures: in-memory stand-ins for the external services."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest
from fastapi.testclient import TestClient

from social_copy.api.main import app, get_pipeline
from social_copy.embeddings.copy_generator import CopyGenerator
from social_copy.errors import ExtractionError
from social_copy.links import LinkService
from social_copy.pipeline import CopyPipeline, PipelinePolicy
from social_copy.scraper.page_scraper import ContentRecord
from social_copy.storage.pinecone_storage import MatchResult


def char_embedding(text: str, dims: int = 64) -> list[float]:
    """Deterministic bag-of-characters embedding; equal texts give equal vectors."""
    vec = np.zeros(dims)
    for ch in text.lower():
        vec[ord(ch) % dims] += 1.0
    return vec.tolist()


class FakeEmbeddings:
    def __init__(self):
        self.calls = []

    async def generate_embedding(self, text):
        self.calls.append(text)
        return char_embedding(text)


class InMemoryStorage:
    """Cosine-similarity store with the PineconeStorage interface."""

    def __init__(self):
        self.entries = {}
        self.queries = []

    async def upsert(self, entry):
        self.entries[entry.id] = entry

    async def query(self, vector, top_k=3, include_metadata=True):
        self.queries.append((vector, top_k))
        query = np.asarray(vector)
        scored = []
        for entry in self.entries.values():
            values = np.asarray(entry.vector)
            score = float(np.dot(query, values) / (np.linalg.norm(query) * np.linalg.norm(values)))
            scored.append(MatchResult(
                id=entry.id,
                score=score,
                metadata=dict(entry.metadata) if include_metadata else {}
            ))
        scored.sort(key=lambda m: m.score, reverse=True)
        return scored[:top_k]


class FakeScraper:
    def __init__(self, record=None, error=None):
        self.record = record or ContentRecord(
            title="Sube el precio del dólar",
            description="El tipo de cambio cerró al alza por tercera jornada."
        )
        self.error = error
        self.calls = []

    async def extract(self, url):
        self.calls.append(url)
        if self.error:
            raise self.error
        return self.record


def completion(text):
    """Minimal chat-completions response object."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


def platform_of(prompt: str) -> str:
    if "WhatsApp" in prompt:
        return "wpp"
    if "tweet" in prompt:
        return "twitter"
    return "facebook"


PLATFORM_TEXTS = {
    "facebook": "  📈 El dólar vuelve a subir hoy.  ",
    "twitter": "\nDólar en alza otra vez 💵\n",
    "wpp": " *DÓLAR AL ALZA*\nEl tipo de cambio subió por tercer día. ",
}

# Facebook finishes last, WhatsApp first
PLATFORM_DELAYS = {"facebook": 0.05, "twitter": 0.02, "wpp": 0.0}


def make_generator(texts=None, delays=None):
    """CopyGenerator whose API client answers per platform after a delay."""
    texts = texts or PLATFORM_TEXTS
    delays = delays or PLATFORM_DELAYS

    async def create(**kwargs):
        platform = platform_of(kwargs["messages"][-1]["content"])
        await asyncio.sleep(delays.get(platform, 0))
        outcome = texts[platform]
        if isinstance(outcome, BaseException):
            raise outcome
        return completion(outcome)

    generator = CopyGenerator(api_key="test-key", model="test-model", base_url="http://llm.test/v1/")
    generator._client = MagicMock()
    generator._client.chat.completions.create = AsyncMock(side_effect=create)
    return generator


@pytest.fixture
def embeddings():
    return FakeEmbeddings()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def scraper():
    return FakeScraper()


@pytest.fixture
def generator():
    return make_generator()


@pytest.fixture
def policy():
    return PipelinePolicy(top_k=3, link_platform=None)


@pytest.fixture
def pipeline(scraper, embeddings, storage, generator, policy):
    return CopyPipeline(
        scraper=scraper,
        embeddings_service=embeddings,
        storage=storage,
        generator=generator,
        links=LinkService(access_token=""),
        policy=policy
    )


@pytest.fixture
def client(pipeline):
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def failing_scraper():
    return FakeScraper(error=ExtractionError("No title found in page"))
