"""Client-side chat transcript state."""
from typing import Callable, Dict, List, Optional, Tuple, Union

from packages.professor_chat.models import ChatMessage, Role

GREETING = "Hi! I am the rate my professor bot. How can I help you today?"


class Append:
    """Add a message to the end of the transcript."""

    def __init__(self, message: ChatMessage):
        self.message = message

    def __repr__(self) -> str:
        return f"Append({self.message!r})"


class ReplaceLast:
    """Swap the trailing message for a new version of it."""

    def __init__(self, message: ChatMessage):
        self.message = message

    def __repr__(self) -> str:
        return f"ReplaceLast({self.message!r})"


StoreEvent = Union[Append, ReplaceLast]


def reduce_messages(state: Tuple[ChatMessage, ...], event: StoreEvent) -> Tuple[ChatMessage, ...]:
    """Return the transcript that results from applying ``event`` to ``state``."""
    if isinstance(event, Append):
        return state + (event.message,)
    if isinstance(event, ReplaceLast):
        if not state:
            raise ValueError("Cannot replace the last message of an empty transcript")
        return state[:-1] + (event.message,)
    raise TypeError(f"Unknown store event: {event!r}")


class MessageStore:
    """Ordered chat transcript, changed only through :meth:`apply`."""

    def __init__(
        self,
        messages: Optional[List[ChatMessage]] = None,
        on_change: Optional[Callable[[StoreEvent, Tuple[ChatMessage, ...]], None]] = None,
    ):
        if messages is None:
            messages = [ChatMessage(role=Role.ASSISTANT, content=GREETING)]
        self._messages: Tuple[ChatMessage, ...] = tuple(messages)
        self.on_change = on_change

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return self._messages

    @property
    def last(self) -> Optional[ChatMessage]:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def apply(self, event: StoreEvent) -> Tuple[ChatMessage, ...]:
        self._messages = reduce_messages(self._messages, event)
        if self.on_change is not None:
            self.on_change(event, self._messages)
        return self._messages

    def to_payload(self) -> List[Dict[str, str]]:
        """JSON-ready transcript for the chat endpoint."""
        return [message.to_dict() for message in self._messages]
