from __future__ import annotations

from typing import Iterable

from docprep.rag.scoring import RelevanceScorer
from docprep.rag.types import Chunk, QuestionType, ScoredChunk


def score_chunks(
    chunks: Iterable[Chunk],
    question: str,
    scorer: RelevanceScorer | None = None,
    question_type: QuestionType = QuestionType.GENERAL,
) -> list[ScoredChunk]:
    active = scorer or RelevanceScorer()
    return [
        ScoredChunk(chunk=chunk, score=active.score(chunk, question, question_type))
        for chunk in chunks
    ]


def select_relevant_chunks(
    chunks: Iterable[Chunk],
    question: str,
    k: int = 3,
    scorer: RelevanceScorer | None = None,
    question_type: QuestionType = QuestionType.GENERAL,
) -> list[ScoredChunk]:
    """Return the top-k chunks by score, ties broken by ascending chunk index."""
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")
    scored = score_chunks(chunks, question, scorer=scorer, question_type=question_type)
    scored.sort(key=lambda item: (-item.score, item.chunk.index))
    return scored[:k]
