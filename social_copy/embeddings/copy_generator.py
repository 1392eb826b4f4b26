"""Copy generation module with LLM.

Calls Gemini through its OpenAI-compatible chat completions endpoint.
"""

import asyncio
import logging
from typing import Dict, Optional

from openai import AsyncOpenAI, OpenAIError

from social_copy.config import settings
from social_copy.embeddings.prompts import COPYWRITER_SYSTEM, LLM_CONFIG
from social_copy.errors import GenerationError
from social_copy.security import safe_log_error

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "Texto no disponible"


def extract_text(response) -> str:
    """Return the first candidate's text, or the placeholder."""
    choices = getattr(response, "choices", None) or []
    if not choices:
        return PLACEHOLDER_TEXT

    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None) if message is not None else None
    if not content or not content.strip():
        return PLACEHOLDER_TEXT

    return content.strip()


class CopyGenerator:
    """Generates per-platform social copy with an LLM."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None
    ):
        """Initialize the copy generator.

        Args:
            api_key: Gemini API key (optional, uses settings by default)
            model: Model name (optional, uses settings by default)
            base_url: OpenAI-compatible endpoint (optional, uses settings by default)
        """
        self.api_key = api_key or settings.gemini_api_key
        self.model = model or settings.generation_model
        self.base_url = base_url or settings.generation_base_url
        self._client: Optional[AsyncOpenAI] = None

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy-loaded API client."""
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    async def generate(self, platform: str, prompt: str) -> str:
        """Generate the copy for one platform.

        Args:
            platform: Key in LLM_CONFIG
            prompt: User prompt

        Returns:
            Generated text, trimmed, or PLACEHOLDER_TEXT if the model gave none

        Raises:
            GenerationError: On transport or auth failure
        """
        config = LLM_CONFIG.get(platform, {})

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                max_tokens=config.get("max_tokens", 150),
                temperature=config.get("temperature", 0.7),
                messages=[
                    {"role": "system", "content": COPYWRITER_SYSTEM},
                    {"role": "user", "content": prompt}
                ]
            )
        except OpenAIError as e:
            raise GenerationError(f"LLM call failed ({platform}): {e}") from e

        return extract_text(response)

    async def _generate_bounded(
        self,
        platform: str,
        prompt: str,
        timeout: Optional[float]
    ) -> str:
        try:
            return await asyncio.wait_for(self.generate(platform, prompt), timeout)
        except asyncio.TimeoutError as e:
            raise GenerationError(f"LLM call timed out after {timeout}s ({platform})") from e

    async def generate_many(
        self,
        prompts: Dict[str, str],
        timeout: Optional[float] = None,
        isolate_failures: bool = False
    ) -> Dict[str, str]:
        """Generate copies for several platforms concurrently.

        Args:
            prompts: platform -> prompt
            timeout: Per-call timeout in seconds (None for no bound)
            isolate_failures: If True, a failed platform gets PLACEHOLDER_TEXT
                instead of failing the whole batch

        Returns:
            platform -> generated text

        Raises:
            GenerationError: First failure, when not isolating. All sibling
                calls still in flight are cancelled first.
        """
        tasks = {
            platform: asyncio.create_task(self._generate_bounded(platform, prompt, timeout))
            for platform, prompt in prompts.items()
        }

        try:
            results = await asyncio.gather(*tasks.values(), return_exceptions=isolate_failures)
        except BaseException:
            for task in tasks.values():
                task.cancel()
            await asyncio.gather(*tasks.values(), return_exceptions=True)
            raise

        copies = {}
        for platform, result in zip(tasks, results):
            if isinstance(result, BaseException):
                safe_log_error(logger, f"Copy generation failed for {platform}", result)
                copies[platform] = PLACEHOLDER_TEXT
            else:
                copies[platform] = result

        return copies
