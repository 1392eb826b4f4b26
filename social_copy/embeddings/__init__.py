"""Embeddings and LLM modules for copy generation.

Module structure:
- embeddings_service.py: Hugging Face embeddings client
- copy_generator.py: LLM copy generation
- prompts.py: Centralized prompt catalog

Basic usage:
    from social_copy.embeddings import EmbeddingsService

    service = EmbeddingsService()
    embedding = await service.generate_embedding("text")
"""

from social_copy.embeddings.embeddings_service import EmbeddingsService, to_vector
from social_copy.embeddings.copy_generator import PLACEHOLDER_TEXT, CopyGenerator
from social_copy.embeddings.prompts import compose_prompts, references_block

__all__ = [
    # Embeddings
    "EmbeddingsService",
    "to_vector",
    # Generation
    "CopyGenerator",
    "PLACEHOLDER_TEXT",
    # Prompts
    "compose_prompts",
    "references_block",
]
