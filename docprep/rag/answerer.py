from __future__ import annotations

"""Non-LLM answerer that extracts the best matching passage from documents."""

from dataclasses import dataclass, field
from typing import Sequence

from docprep.loaders.chunking import chunk_document
from docprep.rag.scoring import RelevanceScorer
from docprep.rag.selector import select_relevant_chunks
from docprep.rag.types import ChunkingOptions, Document, QuestionType


@dataclass
class ExtractiveAnswerer:
    """Return a short extract from the highest scoring passage."""
    scorer: RelevanceScorer = field(default_factory=RelevanceScorer)
    max_chars: int = 480

    def generate(
        self,
        question: str,
        documents: Sequence[Document],
        question_type: QuestionType = QuestionType.GENERAL,
    ) -> str:
        """Generate an extractive answer from the given documents."""
        options = ChunkingOptions(
            max_chunk_size=self.max_chars,
            overlap_size=0,
            question_type=question_type,
        )
        chunks = [chunk for document in documents for chunk in chunk_document(document, options)]
        best = select_relevant_chunks(chunks, question, k=1, scorer=self.scorer, question_type=question_type)
        if not best or best[0].score <= 0:
            return ""
        snippet = self._truncate(best[0].chunk.content.strip())
        if not snippet:
            return ""
        return f"Based on {best[0].chunk.document_name}: {snippet}"

    def _truncate(self, text: str) -> str:
        """Trim text to the max character budget without cutting words."""
        if len(text) <= self.max_chars:
            return text
        return text[: self.max_chars].rsplit(" ", 1)[0] + "..."
