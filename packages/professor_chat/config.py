"""Configuration management for Professor Chat."""
from functools import lru_cache
from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Credentials are ``SecretStr`` so they never show up in reprs or log lines.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # OpenAI (embeddings + chat completions)
    openai_api_key: Optional[SecretStr] = None
    embedding_model: str = "text-embedding-3-small"
    chat_model: str = "gpt-4o-mini"

    # Pinecone
    pinecone_api_key: Optional[SecretStr] = None
    pinecone_index_name: str = "rag"
    pinecone_namespace: str = "ns1"

    # Retrieval
    retrieval_top_k: int = 3

    # Application
    app_host: str = "0.0.0.0"
    app_port: int = 8080
    app_log_level: str = "INFO"

    # Chat client
    chat_api_url: str = "http://localhost:8080/api/chat"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
