"""Terminal chat client for the Professor Chat API."""
import argparse
import sys
from pathlib import Path
from typing import Tuple

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from packages.professor_chat.config import get_settings
from packages.professor_chat.logging_config import setup_logging
from packages.professor_chat.message_store import Append, MessageStore, ReplaceLast, StoreEvent
from packages.professor_chat.models import ChatMessage, Role
from packages.professor_chat.transport import ChatTransportClient

EXIT_COMMANDS = {"exit", "quit"}


class TerminalRenderer:
    """Print assistant text as it streams in."""

    def __init__(self, out=None):
        self.out = out or sys.stdout
        self._printed = 0

    def __call__(self, event: StoreEvent, messages: Tuple[ChatMessage, ...]) -> None:
        message = event.message
        if message.role != Role.ASSISTANT:
            return

        if isinstance(event, Append):
            if self._printed:
                self.out.write("\n")
            self.out.write("bot> ")
            self._printed = 0
        elif not isinstance(event, ReplaceLast):
            return

        # Only the new suffix of the reply is written
        self.out.write(message.content[self._printed:])
        self._printed = len(message.content)
        self.out.flush()

    def end_turn(self) -> None:
        self.out.write("\n")
        self.out.flush()
        self._printed = 0


def run_chat(client: ChatTransportClient, renderer: TerminalRenderer, stdin=None) -> int:
    """Read user turns from ``stdin`` until EOF or an exit command."""
    stdin = stdin or sys.stdin

    for message in client.store.messages:
        if message.role == Role.ASSISTANT:
            renderer.out.write(f"bot> {message.content}\n")

    turns = 0
    while True:
        renderer.out.write("you> ")
        renderer.out.flush()
        line = stdin.readline()
        if not line or line.strip().lower() in EXIT_COMMANDS:
            break
        if client.send(line.rstrip("\n")) is not None:
            renderer.end_turn()
            turns += 1
    return turns


def main():
    """Main entry point for the chat CLI."""
    parser = argparse.ArgumentParser(description="Chat with the Rate My Professor assistant")
    parser.add_argument("--url", default=None, help="Chat endpoint URL")
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings)

    renderer = TerminalRenderer()
    store = MessageStore(on_change=renderer)
    client = ChatTransportClient(store, api_url=args.url or settings.chat_api_url)

    run_chat(client, renderer)


if __name__ == "__main__":
    main()
