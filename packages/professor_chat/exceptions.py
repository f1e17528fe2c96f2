"""Error types raised by the chat pipeline and client."""


class ProfessorChatError(Exception):
    """Base class for all Professor Chat errors."""


class MissingCredentialError(ProfessorChatError):
    """A required API key is not configured."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name} is not set")


class InvalidConversationError(ProfessorChatError):
    """The posted transcript cannot drive a retrieval query."""


class MalformedMatchError(ProfessorChatError):
    """The vector index returned a match without the expected metadata."""


class TransportError(ProfessorChatError):
    """The chat endpoint could not be reached or answered with an error."""
