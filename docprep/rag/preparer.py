from __future__ import annotations

"""Shrink oversized corpora to the chunks most relevant to a question."""

import logging
from dataclasses import dataclass, field
from typing import Sequence

from docprep.loaders.chunking import chunk_document
from docprep.rag.scoring import RelevanceScorer
from docprep.rag.selector import select_relevant_chunks
from docprep.rag.types import Chunk, ChunkingOptions, Document

logger = logging.getLogger(__name__)

MIN_TOTAL_SIZE = 10000
CHUNK_DELIMITER = "\n\n---\n\n"

STRATEGY_EMPTY = "empty"
STRATEGY_PASSTHROUGH = "passthrough"
STRATEGY_CONDENSED = "condensed"
STRATEGY_FALLBACK = "fallback_original"


def format_chunk(chunk: Chunk) -> str:
    """Prefix chunk content with a provenance marker."""
    return f"[Chunk {chunk.index + 1} from {chunk.document_name}]\n{chunk.content}"


def total_size(documents: Sequence[Document]) -> int:
    return sum(len(document.content or "") for document in documents)


@dataclass(frozen=True)
class PreparationResult:
    """Prepared documents plus the policy branch that produced them."""
    documents: list[Document]
    strategy: str
    original_size: int
    prepared_size: int
    dropped: list[str] = field(default_factory=list)


@dataclass
class DocumentPreparer:
    """Decide whether chunking is needed and condense documents when it is."""
    scorer: RelevanceScorer = field(default_factory=RelevanceScorer)
    min_total_size: int = MIN_TOTAL_SIZE
    chunks_per_document: int = 3

    def prepare(
        self,
        documents: Sequence[Document],
        question: str,
        options: ChunkingOptions | None = None,
    ) -> list[Document]:
        return self.prepare_with_report(documents, question, options).documents

    def prepare_with_report(
        self,
        documents: Sequence[Document],
        question: str,
        options: ChunkingOptions | None = None,
    ) -> PreparationResult:
        opts = options or ChunkingOptions()
        if not documents:
            return PreparationResult(documents=[], strategy=STRATEGY_EMPTY, original_size=0, prepared_size=0)

        original_size = total_size(documents)
        if self.needs_chunking(original_size, opts):
            result = self._condense(documents, question, opts, original_size)
        else:
            result = self._passthrough(documents, original_size)
        logger.info(
            "documents_prepared",
            extra={
                "strategy": result.strategy,
                "documents_in": len(documents),
                "documents_out": len(result.documents),
                "original_size": result.original_size,
                "prepared_size": result.prepared_size,
                "dropped": result.dropped,
                "question_type": opts.question_type.value,
            },
        )
        return result

    def needs_chunking(self, size: int, options: ChunkingOptions) -> bool:
        return size > max(options.max_chunk_size, self.min_total_size)

    def condense_document(
        self,
        document: Document,
        question: str,
        options: ChunkingOptions,
    ) -> Document | None:
        """Rebuild a document from its relevant chunks, or None when none score."""
        chunks = chunk_document(document, options)
        selected = select_relevant_chunks(
            chunks,
            question,
            k=self.chunks_per_document,
            scorer=self.scorer,
            question_type=options.question_type,
        )
        relevant = sorted(
            (item.chunk for item in selected if item.score > 0),
            key=lambda chunk: chunk.index,
        )
        if not relevant:
            return None
        return Document(
            name=document.name,
            content=CHUNK_DELIMITER.join(format_chunk(chunk) for chunk in relevant),
            media_type=document.media_type,
            metadata=dict(document.metadata),
        )

    def _passthrough(self, documents: Sequence[Document], size: int) -> PreparationResult:
        return PreparationResult(
            documents=list(documents),
            strategy=STRATEGY_PASSTHROUGH,
            original_size=size,
            prepared_size=size,
        )

    def _condense(
        self,
        documents: Sequence[Document],
        question: str,
        options: ChunkingOptions,
        size: int,
    ) -> PreparationResult:
        prepared: list[Document] = []
        dropped: list[str] = []
        for document in documents:
            condensed = self.condense_document(document, question, options)
            if condensed is None:
                dropped.append(document.name)
                continue
            prepared.append(condensed)
        if not prepared:
            logger.warning(
                "no_relevant_chunks",
                extra={"documents": len(documents), "question_length": len(question)},
            )
            return PreparationResult(
                documents=list(documents),
                strategy=STRATEGY_FALLBACK,
                original_size=size,
                prepared_size=size,
                dropped=dropped,
            )
        return PreparationResult(
            documents=prepared,
            strategy=STRATEGY_CONDENSED,
            original_size=size,
            prepared_size=total_size(prepared),
            dropped=dropped,
        )


def prepare_documents_for_question(
    documents: Sequence[Document],
    question: str,
    options: ChunkingOptions | None = None,
) -> list[Document]:
    """Prepare documents with the default preparer."""
    return DocumentPreparer().prepare(documents, question, options)
