"""Chat and retrieval data types."""
import enum
from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from packages.professor_chat.exceptions import MalformedMatchError


class Role(str, enum.Enum):
    """Author of a chat turn."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """One turn of the conversation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    role: Role = Field(..., description="Who wrote the message.", examples=["user"])
    content: str = Field(..., description="Message text.", examples=["Who teaches a good Biology 101?"])

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class RetrievalMatch(BaseModel):
    """A professor review record returned by the vector index."""

    model_config = ConfigDict(frozen=True)

    id: str
    review: str
    subject: str
    stars: float

    @classmethod
    def from_index_match(cls, match: Any) -> "RetrievalMatch":
        """
        Build a match from a raw vector-index result.

        Args:
            match: Object or mapping exposing ``id`` and ``metadata``

        Returns:
            RetrievalMatch

        Raises:
            MalformedMatchError: If the id or any metadata field is missing
        """
        if isinstance(match, Mapping):
            match_id = match.get("id")
            metadata = match.get("metadata")
        else:
            match_id = getattr(match, "id", None)
            metadata = getattr(match, "metadata", None)

        if not match_id or not isinstance(metadata, Mapping):
            raise MalformedMatchError(f"Match {match_id!r} has no metadata")

        try:
            return cls(
                id=match_id,
                review=metadata["review"],
                subject=metadata["subject"],
                stars=metadata["stars"],
            )
        except (KeyError, ValidationError) as e:
            raise MalformedMatchError(f"Match {match_id!r} has invalid metadata: {e}") from e
