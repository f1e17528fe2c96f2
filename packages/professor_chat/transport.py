"""HTTP client that streams chat replies into a MessageStore."""
import codecs
import logging
from typing import Optional

import requests

from packages.professor_chat.config import get_settings
from packages.professor_chat.exceptions import TransportError
from packages.professor_chat.message_store import Append, MessageStore, ReplaceLast
from packages.professor_chat.models import ChatMessage, Role

logger = logging.getLogger(__name__)

ERROR_REPLY = "Sorry, there was an error processing your request."


class ChatTransportClient:
    """Posts the transcript to the chat endpoint and streams the answer back."""

    def __init__(
        self,
        store: MessageStore,
        api_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the transport client.

        Args:
            store: Transcript to read from and write replies into
            api_url: Chat endpoint URL
            session: HTTP session (tests inject fakes here)
        """
        self.store = store
        self.api_url = api_url or get_settings().chat_api_url
        self.session = session or requests.Session()

    def send(self, text: str) -> Optional[ChatMessage]:
        """
        Send one user turn and stream the reply into the store.

        Args:
            text: What the user typed

        Returns:
            The final assistant message, or None if ``text`` was blank
        """
        if not text.strip():
            return None

        self.store.apply(Append(ChatMessage(role=Role.USER, content=text)))

        try:
            self._stream_reply()
        except (requests.RequestException, TransportError) as e:
            logger.error(f"Chat request failed: {e}")
            self.store.apply(Append(ChatMessage(role=Role.ASSISTANT, content=ERROR_REPLY)))

        return self.store.last

    def _stream_reply(self) -> None:
        with self.session.post(self.api_url, json=self.store.to_payload(), stream=True) as response:
            if not response.ok:
                raise TransportError(f"Chat endpoint answered {response.status_code}")

            self.store.apply(Append(ChatMessage(role=Role.ASSISTANT, content="")))

            decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
            reply = ""
            for fragment in response.iter_content(chunk_size=None):
                reply += decoder.decode(fragment)
                self.store.apply(ReplaceLast(ChatMessage(role=Role.ASSISTANT, content=reply)))

            tail = decoder.decode(b"", final=True)
            if tail:
                reply += tail
                self.store.apply(ReplaceLast(ChatMessage(role=Role.ASSISTANT, content=reply)))
