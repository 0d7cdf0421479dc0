"""Server-sent-event stream decoding for chat-completion responses.

Turns the raw bytes of a streamed HTTP response body into content
fragments. Each decoder instance owns its own text buffer and incremental
text decoder, so concurrent streams never share state.
"""

import codecs
import json
import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_RECORD = "data: [DONE]"

ContentExtractor = Callable[[Any], str | None]


def resolve_encoding(name: str | None) -> str:
    """Return ``name`` if Python knows the codec, otherwise utf-8."""
    if not name:
        return "utf-8"
    try:
        codecs.lookup(name)
    except LookupError:
        logger.warning(f"Unknown stream charset {name!r}, decoding as utf-8")
        return "utf-8"
    return name


def delta_content(payload: Any) -> str | None:
    """Extract ``choices[0].delta.content`` from a parsed stream record."""
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    return content if isinstance(content, str) else None


class EventStreamDecoder:
    """Incremental decoder for ``data: {json}`` line records.

    Usage:
        decoder = EventStreamDecoder()
        for chunk in byte_chunks:
            for fragment in decoder.feed(chunk):
                print(fragment, end="")
            if decoder.done:
                break
    """

    def __init__(self, extract: ContentExtractor = delta_content, encoding: str = "utf-8"):
        """Initialize the decoder.

        Args:
            extract: Pulls the content token out of a parsed record
            encoding: Text encoding declared by the response; unknown
                names fall back to utf-8
        """
        self._extract = extract
        self._text_decoder = codecs.getincrementaldecoder(resolve_encoding(encoding))(errors="replace")
        self._buffer = ""
        self._done = False

    @property
    def done(self) -> bool:
        """Whether the ``[DONE]`` record has been seen."""
        return self._done

    def feed(self, data: bytes) -> list[str]:
        """Consume one byte chunk and return the fragments it completes.

        Args:
            data: Raw bytes as received from the network

        Returns:
            Non-empty content fragments in arrival order
        """
        if self._done:
            return []

        # Incomplete multi-byte sequences stay inside the text decoder
        self._buffer += self._text_decoder.decode(data)
        *lines, self._buffer = self._buffer.split("\n")

        fragments = []
        for line in lines:
            fragment = self._process_line(line)
            if self._done:
                break
            if fragment:
                fragments.append(fragment)
        return fragments

    def _process_line(self, line: str) -> str | None:
        line = line.strip()
        if not line:
            return None
        if line == DONE_RECORD:
            self._done = True
            self._buffer = ""
            return None
        if not line.startswith(DATA_PREFIX):
            # Comments (": keep-alive") and other SSE fields carry no content
            return None

        raw = line[len(DATA_PREFIX):]
        try:
            payload = json.loads(raw)
        except ValueError:
            logger.warning(f"Skipping malformed stream record: {raw[:200]!r}")
            return None

        return self._extract(payload) or None


async def iter_content(
    byte_stream: AsyncIterator[bytes],
    extract: ContentExtractor = delta_content,
    encoding: str = "utf-8",
) -> AsyncIterator[str]:
    """Yield content fragments from an async byte stream.

    Stops at ``[DONE]`` or when the byte stream ends; a trailing partial
    line is discarded. The byte stream is closed on every exit path.

    Args:
        byte_stream: Async iterator of response body chunks
        extract: Pulls the content token out of a parsed record
        encoding: Text encoding declared by the response

    Yields:
        Non-empty content fragments in arrival order
    """
    decoder = EventStreamDecoder(extract=extract, encoding=encoding)
    try:
        async for chunk in byte_stream:
            for fragment in decoder.feed(chunk):
                yield fragment
            if decoder.done:
                break
    finally:
        aclose = getattr(byte_stream, "aclose", None)
        if aclose is not None:
            await aclose()
