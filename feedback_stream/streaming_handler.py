"""
Streaming Handler: Feeds Server-Sent Events (SSE) from LLM APIs into the parser.

This module provides utilities for reading streaming responses from LLM
APIs and driving one request's parse from first chunk to final result.

Key Features:
- SSE format parsing (OpenAI-compatible and Gemini payloads)
- Timeout management (first chunk, between chunks, total duration)
- One terminal CompleteEvent or ErrorEvent per request
"""

import asyncio
import json
import logging
import time
from typing import Any, AsyncIterable, AsyncIterator, Dict, Optional, Tuple
import httpx

from .incremental_parser import IncrementalFeedbackParser
from .schema import ErrorEvent, StreamEvent

logger = logging.getLogger(__name__)


class StreamingHandler:
    """
    Handles streaming responses from an LLM service (SSE format).

    Provides timeout protection and yields only the model's text deltas.

    Example:
        >>> handler = StreamingHandler(
        ...     stream_timeout=30.0,
        ...     chunk_timeout=5.0,
        ...     max_duration=120.0
        ... )
        >>> async for text in handler.process_stream(response):
        ...     print(text)
    """

    def __init__(
        self,
        stream_timeout: float = 30.0,
        chunk_timeout: float = 5.0,
        max_duration: float = 120.0
    ):
        """
        Initialize streaming handler.

        Args:
            stream_timeout: Timeout for first chunk in seconds
            chunk_timeout: Timeout between chunks in seconds
            max_duration: Maximum total stream duration in seconds
        """
        self.stream_timeout = stream_timeout
        self.chunk_timeout = chunk_timeout
        self.max_duration = max_duration

    async def process_stream(
        self,
        response: httpx.Response
    ) -> AsyncIterator[str]:
        """
        Process a streaming response from the LLM service (SSE format).

        Args:
            response: httpx.Response with stream=True

        Yields:
            Model text deltas as they arrive

        Raises:
            TimeoutError: If the stream times out
        """
        stream_start_time = time.time()
        buffer = ""

        async for chunk in self._stream_with_timeout(response, stream_start_time):
            if not chunk:
                continue
            buffer += chunk
            # Process complete lines (SSE format: "data: {...}\n\n")
            while "\n" in buffer:
                line, buffer = buffer.split("\n", 1)
                content, finished = parse_sse_line(line)
                # Always yield content first
                if content:
                    yield content
                if finished:
                    return

        # Final event without a trailing newline
        content, _ = parse_sse_line(buffer)
        if content:
            yield content

    async def _stream_with_timeout(
        self,
        response: httpx.Response,
        stream_start_time: float
    ) -> AsyncIterator[str]:
        """
        Stream chunks with timeout protection.

        Args:
            response: httpx.Response with stream=True
            stream_start_time: Start time of the stream

        Yields:
            Text chunks from the stream

        Raises:
            TimeoutError: If the stream times out
        """
        chunk_iter = response.aiter_text()

        # Get first chunk with timeout
        try:
            first_chunk = await asyncio.wait_for(
                chunk_iter.__anext__(),
                timeout=self.stream_timeout
            )
        except asyncio.TimeoutError:
            elapsed = time.time() - stream_start_time
            raise TimeoutError(
                f"The request to the LLM service timed out after {elapsed:.1f} seconds. "
                f"Please try again."
            )
        except StopAsyncIteration:
            return
        yield first_chunk

        while True:
            total_elapsed = time.time() - stream_start_time
            if total_elapsed > self.max_duration:
                raise TimeoutError(
                    f"Stream exceeded maximum duration of {self.max_duration}s. "
                    f"Total elapsed: {total_elapsed:.1f}s"
                )

            try:
                chunk = await asyncio.wait_for(
                    chunk_iter.__anext__(),
                    timeout=self.chunk_timeout
                )
            except asyncio.TimeoutError:
                elapsed = time.time() - stream_start_time
                raise TimeoutError(
                    f"No chunk received for {self.chunk_timeout}s. "
                    f"The LLM service may have stopped responding. "
                    f"Total elapsed: {elapsed:.1f}s"
                )
            except StopAsyncIteration:
                # Stream ended normally
                return
            yield chunk


def parse_sse_line(line: str) -> Tuple[str, bool]:
    """
    Decode one SSE line into (content, finished).

    Blank lines, comments, non-data fields and undecodable payloads yield
    no content; ``data: [DONE]`` finishes the stream.
    """
    line = line.strip()
    # Skip empty lines and comments
    if not line.startswith("data:"):
        return "", False

    data_str = line[5:].strip()
    if data_str == "[DONE]":
        return "", True

    try:
        data = json.loads(data_str)
    except json.JSONDecodeError:
        logger.debug("Skipping undecodable SSE data line: %r", data_str)
        return "", False
    if not isinstance(data, dict):
        return "", False
    return extract_delta(data)


def extract_delta(data: Dict[str, Any]) -> Tuple[str, bool]:
    """
    Pull the text delta out of one decoded SSE payload.

    Args:
        data: Decoded JSON from a ``data:`` line

    Returns:
        (content, finished) where finished is True once the model has stopped

    Example:
        >>> extract_delta({"choices": [{"delta": {"content": "Hi"}, "finish_reason": None}]})
        ('Hi', False)
        >>> extract_delta({"candidates": [{"content": {"parts": [{"text": "Hi"}]}}]})
        ('Hi', False)
    """
    choices = data.get("choices") or []
    if choices:
        choice = choices[0] or {}
        content = (choice.get("delta") or {}).get("content") or ""
        return content, bool(choice.get("finish_reason"))

    candidates = data.get("candidates") or []
    if candidates:
        parts = ((candidates[0] or {}).get("content") or {}).get("parts") or []
        content = "".join(part.get("text") or "" for part in parts if isinstance(part, dict))
        return content, False

    return "", False


async def stream_feedback(
    chunks: AsyncIterable[str],
    parser: Optional[IncrementalFeedbackParser] = None
) -> AsyncIterator[StreamEvent]:
    """
    Drive one request: parse each chunk, then finish with a terminal event.

    Yields score and feedback events as they complete, followed by exactly
    one CompleteEvent or ErrorEvent. A transport exception ends the stream
    with an ErrorEvent; nothing is retried.

    Args:
        chunks: Text deltas for one request, in arrival order
        parser: Parser to use; a fresh one is created if omitted

    Example:
        >>> async for event in stream_feedback(handler.process_stream(response)):
        ...     render(event)
    """
    parser = parser or IncrementalFeedbackParser()
    try:
        async for chunk in chunks:
            for event in parser.push(chunk):
                yield event
    except (TimeoutError, httpx.HTTPError, httpx.StreamError) as e:
        logger.warning("Stream failed after %d chars: %s", len(parser.buffer), e)
        yield ErrorEvent(message=str(e) or e.__class__.__name__)
        return

    yield parser.finish()
