"""Configuration management for the social copy service."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Pinecone
    pinecone_api_key: str = ""
    pinecone_index_name: str = ""
    pinecone_namespace: str = ""
    pinecone_host: str = ""  # Skips the index lookup when set

    # Hugging Face (embeddings)
    huggingface_api_key: str = ""
    embedding_model: str = "intfloat/multilingual-e5-large"
    embedding_api_url: str = (
        "https://router.huggingface.co/hf-inference/models/{model}/pipeline/feature-extraction"
    )

    # Gemini (text generation, OpenAI-compatible endpoint)
    gemini_api_key: str = ""
    generation_model: str = "gemini-1.5-flash"
    generation_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    generation_timeout: float = 60.0

    # URL shortening (optional)
    bitly_access_token: str = ""
    shortener_api_url: str = "https://api-ssl.bitly.com/v4/shorten"
    utm_medium: str = "social"
    utm_campaign: str = "copy_rag"
    link_platform: str = ""  # e.g. "twitter"; empty disables link appending

    # API
    api_host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    cors_origins: str = "*"

    # Scraping
    user_agent: str = "Mozilla/5.0 (compatible; SocialCopyBot/1.0)"
    request_timeout: int = 30
    url_guard_enabled: bool = True

    # Retrieval / generation policy
    rag_top_k: int = Field(3, ge=1, le=10)
    reference_fields: str = "noticia,copy"
    rag_platforms: str = "facebook"
    embed_description: bool = False
    failure_policy: str = "fail_fast"  # fail_fast | isolate

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @staticmethod
    def _split(value: str) -> list[str]:
        return [item.strip() for item in value.split(",") if item.strip()]

    def get_reference_fields(self) -> list[str]:
        """Metadata fields shown for each retrieved example."""
        return self._split(self.reference_fields)

    def get_rag_platforms(self) -> list[str]:
        """Platforms whose prompt receives retrieved examples."""
        return self._split(self.rag_platforms)

    def get_cors_origins(self) -> list[str]:
        """Get CORS origins as a list."""
        return self._split(self.cors_origins) or ["*"]


# Global settings instance
settings = Settings()
