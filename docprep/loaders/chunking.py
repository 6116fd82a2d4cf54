from __future__ import annotations

"""Boundary-aware character chunking with bounded overlap."""

import logging

from docprep.rag.types import Chunk, ChunkingOptions, Document

logger = logging.getLogger(__name__)

_BREAK_CHARS = (".", "\n")
_MIN_BREAK_RATIO = 0.8


def find_break_point(window: str) -> int:
    """Return the offset of the last sentence terminator or line break, or -1."""
    return max(window.rfind(char) for char in _BREAK_CHARS)


def chunk_text_spans(text: str, max_chars: int, overlap: int) -> list[tuple[int, int]]:
    """Return (start, end) spans covering text in order.

    Windows that do not reach the end of the text are cut just after the last
    break character when it sits beyond 80% of ``max_chars``; otherwise they
    are hard-cut at ``max_chars``. Consecutive spans share at most ``overlap``
    characters.
    """
    length = len(text)
    if length <= max_chars:
        return [(0, length)]

    spans: list[tuple[int, int]] = []
    start = 0
    while start < length:
        end = min(length, start + max_chars)
        if end >= length:
            spans.append((start, length))
            break
        break_point = find_break_point(text[start:end])
        if break_point > max_chars * _MIN_BREAK_RATIO:
            end = start + break_point + 1
        spans.append((start, end))
        start = max(end - overlap, start + 1)
    return spans


def chunk_document(document: Document, options: ChunkingOptions | None = None) -> list[Chunk]:
    """Split a document into ordered chunks with offsets into its content."""
    opts = options or ChunkingOptions()
    content = document.content or ""
    spans = chunk_text_spans(content, opts.max_chunk_size, opts.overlap_size)
    chunks = [
        Chunk(
            content=content[start:end],
            document_name=document.name,
            media_type=document.media_type,
            index=idx,
            start_offset=start,
            end_offset=end,
        )
        for idx, (start, end) in enumerate(spans)
    ]
    logger.debug(
        "document_chunked",
        extra={
            "document_name": document.name,
            "content_length": len(content),
            "chunk_size": opts.max_chunk_size,
            "overlap": opts.overlap_size,
            "chunks_created": len(chunks),
        },
    )
    return chunks
