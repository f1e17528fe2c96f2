"""Retrieval logic using a Pinecone index of professor reviews."""
import asyncio
import logging
from typing import Any, List, Optional, Sequence

from pinecone import Pinecone

from packages.professor_chat.config import Settings, get_settings
from packages.professor_chat.models import RetrievalMatch

logger = logging.getLogger(__name__)

RESULTS_HEADER = "\n\nReturned results from vector db (done automatically)"


class ProfessorIndex:
    """Nearest-neighbour lookups against the professor review index."""

    def __init__(self, settings: Optional[Settings] = None, index: Optional[Any] = None):
        """
        Initialize the index wrapper.

        Args:
            settings: Settings naming the index, namespace and Pinecone key
            index: Pre-built index handle exposing ``query`` (tests inject fakes here)
        """
        settings = settings or get_settings()
        self.namespace = settings.pinecone_namespace
        self.top_k = settings.retrieval_top_k

        if index is None:
            # Pinecone raises its own configuration error when no key is available
            api_key = settings.pinecone_api_key.get_secret_value() if settings.pinecone_api_key else None
            index = Pinecone(api_key=api_key).Index(settings.pinecone_index_name)
        self.index = index
        logger.info(
            f"Professor index initialized: {settings.pinecone_index_name}/{self.namespace}"
        )

    async def query(self, vector: Sequence[float], top_k: Optional[int] = None) -> List[RetrievalMatch]:
        """
        Retrieve the closest professor reviews.

        Args:
            vector: Query embedding
            top_k: Number of results to request

        Returns:
            Matches in the order the index ranked them
        """
        if top_k is None:
            top_k = self.top_k

        try:
            # The Pinecone client is synchronous
            response = await asyncio.to_thread(
                self.index.query,
                vector=list(vector),
                top_k=top_k,
                include_metadata=True,
                namespace=self.namespace,
            )
        except Exception as e:
            logger.error(f"Error querying vector index: {e}", exc_info=True)
            raise

        raw_matches = _get_matches(response)
        if len(raw_matches) > top_k:
            logger.warning(f"Index returned {len(raw_matches)} matches for top_k={top_k}, truncating")
            raw_matches = raw_matches[:top_k]

        matches = [RetrievalMatch.from_index_match(m) for m in raw_matches]
        logger.info(f"Retrieved {len(matches)} matches (top_k={top_k})")
        return matches


def _get_matches(response: Any) -> List[Any]:
    if isinstance(response, dict):
        return list(response.get("matches") or [])
    return list(getattr(response, "matches", None) or [])


def format_matches(matches: Sequence[RetrievalMatch]) -> str:
    """
    Render matches as the block appended to the user's question.

    Args:
        matches: Matches in relevance order

    Returns:
        Header line followed by one block per match
    """
    parts = [RESULTS_HEADER]
    for match in matches:
        parts.append(
            f"\n\nProfessor: {match.id}\n"
            f"Review: {match.review}\n"
            f"Subject: {match.subject}\n"
            f"Stars: {match.stars}\n"
        )
    return "".join(parts)


def build_augmented_prompt(text: str, matches: Sequence[RetrievalMatch]) -> str:
    """Append the serialized matches to the user's question."""
    return text + format_matches(matches)
