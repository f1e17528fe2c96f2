"""Retrieval-augmented chat pipeline."""
import logging
from typing import Optional, Sequence

from packages.professor_chat.config import Settings
from packages.professor_chat.embeddings import EmbeddingGenerator
from packages.professor_chat.exceptions import InvalidConversationError, MissingCredentialError
from packages.professor_chat.llm_client import ChatCompletionClient, build_chat_messages
from packages.professor_chat.models import ChatMessage, Role
from packages.professor_chat.relay import CompletionRelay, relay_completion
from packages.professor_chat.retrieval import ProfessorIndex, build_augmented_prompt

logger = logging.getLogger(__name__)


class RagChatPipeline:
    """Answer a chat transcript using professor reviews from the vector index.

    The pipeline holds no per-request state. Service clients are created from
    ``settings`` the first time they are needed, unless injected.
    """

    def __init__(
        self,
        settings: Settings,
        embedder: Optional[EmbeddingGenerator] = None,
        index: Optional[ProfessorIndex] = None,
        llm: Optional[ChatCompletionClient] = None,
    ):
        self.settings = settings
        self._embedder = embedder
        self._index = index
        self._llm = llm

    @property
    def embedder(self) -> EmbeddingGenerator:
        if self._embedder is None:
            self._embedder = EmbeddingGenerator(self.settings)
        return self._embedder

    @property
    def index(self) -> ProfessorIndex:
        if self._index is None:
            self._index = ProfessorIndex(self.settings)
        return self._index

    @property
    def llm(self) -> ChatCompletionClient:
        if self._llm is None:
            self._llm = ChatCompletionClient(self.settings)
        return self._llm

    def check_credentials(self) -> None:
        """Raise MissingCredentialError if the OpenAI key is not configured."""
        if self.settings.openai_api_key is None or not self.settings.openai_api_key.get_secret_value():
            raise MissingCredentialError("OPENAI_API_KEY")

    async def stream_reply(self, messages: Sequence[ChatMessage]) -> CompletionRelay:
        """
        Run retrieval and start the completion for a transcript.

        Everything up to opening the completion stream happens before this
        returns, so upstream failures surface as ordinary exceptions.

        Args:
            messages: Full transcript, ending with the newest user message

        Returns:
            Relay yielding UTF-8 encoded reply fragments; close it with ``aclose``
            if the response ends before it is iterated
        """
        self.check_credentials()

        if not messages:
            raise InvalidConversationError("Conversation is empty")
        last_message = messages[-1]
        if last_message.role != Role.USER:
            raise InvalidConversationError("Last message must come from the user")

        text = last_message.content
        vector = await self.embedder.encode_query(text)
        matches = await self.index.query(vector)

        outgoing = build_chat_messages(messages, build_augmented_prompt(text, matches))
        logger.info(f"Requesting completion with {len(outgoing)} messages, {len(matches)} matches")

        completion = await self.llm.chat_stream(outgoing)
        return relay_completion(completion)
