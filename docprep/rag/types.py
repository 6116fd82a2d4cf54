from __future__ import annotations

"""Core data types for documents, chunks and chunking configuration."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ChunkingConfigError(ValueError):
    """Raised when chunking options are invalid."""
    pass


class QuestionType(str, Enum):
    GENERAL = "general"
    FINANCIAL = "financial"
    MARKET = "market"


@dataclass(frozen=True)
class Document:
    """Document handed in by the caller; never mutated."""
    name: str
    content: str
    media_type: str = "text/plain"
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class Chunk:
    """Contiguous slice of a document's content with positional metadata."""
    content: str
    document_name: str
    media_type: str
    index: int
    start_offset: int
    end_offset: int


@dataclass(frozen=True)
class ScoredChunk:
    """Chunk with its relevance score for one question."""
    chunk: Chunk
    score: float


@dataclass(frozen=True)
class ChunkingOptions:
    """Validated chunking configuration."""
    max_chunk_size: int = 5000
    overlap_size: int = 200
    question_type: QuestionType = QuestionType.GENERAL

    def __post_init__(self) -> None:
        if isinstance(self.max_chunk_size, bool) or not isinstance(self.max_chunk_size, int):
            raise ChunkingConfigError(f"max_chunk_size must be an integer, got {self.max_chunk_size!r}")
        if isinstance(self.overlap_size, bool) or not isinstance(self.overlap_size, int):
            raise ChunkingConfigError(f"overlap_size must be an integer, got {self.overlap_size!r}")
        if self.max_chunk_size <= 0:
            raise ChunkingConfigError(f"Invalid chunk size: {self.max_chunk_size}")
        if self.overlap_size < 0:
            raise ChunkingConfigError(f"Invalid chunk overlap: {self.overlap_size}")
        if self.overlap_size >= self.max_chunk_size:
            raise ChunkingConfigError(
                "Overlap must be smaller than chunk size "
                f"(overlap={self.overlap_size}, size={self.max_chunk_size})"
            )
        try:
            question_type = QuestionType(self.question_type)
        except ValueError as exc:
            raise ChunkingConfigError(f"Unsupported question type: {self.question_type!r}") from exc
        object.__setattr__(self, "question_type", question_type)
