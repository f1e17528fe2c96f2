"""Embedding generation utilities."""
import logging
from typing import List, Optional

from openai import AsyncOpenAI

from packages.professor_chat.config import Settings, get_settings
from packages.professor_chat.exceptions import MissingCredentialError

logger = logging.getLogger(__name__)


class EmbeddingGenerator:
    """Generate query embeddings with the OpenAI embeddings API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[AsyncOpenAI] = None,
        model_name: Optional[str] = None,
    ):
        """
        Initialize embedding generator.

        Args:
            settings: Settings holding the OpenAI key and default model
            client: Pre-built OpenAI client (tests inject fakes here)
            model_name: Model name (e.g., 'text-embedding-3-small')
        """
        settings = settings or get_settings()
        self.model_name = model_name or settings.embedding_model

        if client is None:
            if settings.openai_api_key is None:
                raise MissingCredentialError("OPENAI_API_KEY")
            client = AsyncOpenAI(api_key=settings.openai_api_key.get_secret_value())
        self.client = client
        logger.info(f"Embedding generator initialized, model: {self.model_name}")

    async def encode_query(self, query: str) -> List[float]:
        """
        Encode a query text into embedding.

        Args:
            query: Query text

        Returns:
            Embedding vector
        """
        try:
            response = await self.client.embeddings.create(
                input=query,
                model=self.model_name,
                encoding_format="float",
            )
            return list(response.data[0].embedding)

        except Exception as e:
            logger.error(f"Error creating embedding: {e}")
            raise
