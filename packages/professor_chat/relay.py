"""Relay streamed completion chunks to an HTTP byte stream."""
import asyncio
import inspect
import logging
from typing import Any, AsyncIterable, AsyncIterator, Optional

logger = logging.getLogger(__name__)


def delta_text(chunk: Any) -> Optional[str]:
    """Return the first choice's delta content, or None for role/finish-only chunks."""
    choices = getattr(chunk, "choices", None)
    if not choices:
        return None
    delta = getattr(choices[0], "delta", None)
    return getattr(delta, "content", None) or None


async def _release(source: Any) -> None:
    """Close an OpenAI ``AsyncStream`` via ``close()``, or a plain async generator via ``aclose()``."""
    close = getattr(source, "close", None) or getattr(source, "aclose", None)
    if close is None:
        return
    result = close()
    if inspect.isawaitable(result):
        await result


class CompletionRelay:
    """
    Re-emit completion chunks as encoded text fragments.

    Empty fragments are skipped and errors from ``source`` are re-raised to the
    consumer. ``source`` is closed exactly once, whether iteration finishes,
    fails, is abandoned, or never starts and the owner calls :meth:`aclose`.
    """

    def __init__(self, source: AsyncIterable[Any], encoding: str = "utf-8"):
        self.source = source
        self.encoding = encoding
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._relay()

    async def _relay(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self.source:
                text = delta_text(chunk)
                if text:
                    yield text.encode(self.encoding)
        except (asyncio.CancelledError, GeneratorExit):
            logger.warning("Completion stream abandoned by consumer")
            raise
        except Exception as e:
            logger.error(f"Error relaying completion stream: {e}", exc_info=True)
            raise
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        """Release the completion stream; later calls do nothing."""
        if self._released:
            return
        self._released = True
        await _release(self.source)


def relay_completion(source: AsyncIterable[Any], encoding: str = "utf-8") -> CompletionRelay:
    """Wrap a completion stream for use as an HTTP response body."""
    return CompletionRelay(source, encoding)
