from __future__ import annotations

from docprep.rag.preparer import (
    CHUNK_DELIMITER,
    STRATEGY_CONDENSED,
    STRATEGY_EMPTY,
    STRATEGY_FALLBACK,
    STRATEGY_PASSTHROUGH,
    DocumentPreparer,
    prepare_documents_for_question,
)
from docprep.rag.types import ChunkingOptions, Document

FILLER = "The quick brown fox jumps over the lazy dog. "


def block(text: str, size: int = 1000, pad: str = "x") -> str:
    return (text + pad * size)[:size]


def test_small_corpus_passes_through_unchanged() -> None:
    documents = [
        Document(name="a.txt", content="a" * 3000),
        Document(name="b.txt", content="b" * 3000),
    ]

    prepared = prepare_documents_for_question(documents, "What is ARR?")

    assert prepared == documents
    assert all(left is right for left, right in zip(prepared, documents))


def test_empty_corpus_returns_empty() -> None:
    result = DocumentPreparer().prepare_with_report([], "What is ARR?")

    assert result.documents == []
    assert result.strategy == STRATEGY_EMPTY


def test_threshold_uses_larger_of_chunk_size_and_minimum() -> None:
    documents = [Document(name="big.txt", content=FILLER * 300)]
    options = ChunkingOptions(max_chunk_size=20000, overlap_size=200)

    result = DocumentPreparer().prepare_with_report(documents, "fox", options)

    assert result.strategy == STRATEGY_PASSTHROUGH
    assert result.documents == documents


def test_arr_question_keeps_only_chunk_with_arr() -> None:
    content = FILLER * 440 + "Closing note: ARR reached a new high. " + FILLER * 3
    documents = [Document(name="deck.txt", content=content, media_type="text/plain")]

    result = DocumentPreparer().prepare_with_report(documents, "What is ARR?")

    assert result.strategy == STRATEGY_CONDENSED
    assert len(result.documents) == 1
    condensed = result.documents[0]
    assert condensed.name == "deck.txt"
    assert "ARR reached a new high" in condensed.content
    sections = condensed.content.split(CHUNK_DELIMITER)
    assert all("ARR" in section for section in sections)
    assert all(section.startswith("[Chunk ") and " from deck.txt]\n" in section for section in sections)
    assert result.prepared_size < result.original_size


def test_selected_chunks_are_reassembled_in_index_order() -> None:
    content = (
        block("pricing ")
        + block("", pad="y")
        + block("pricing pricing pricing ")
        + block("", pad="z")
    )
    preparer = DocumentPreparer(min_total_size=0)
    options = ChunkingOptions(max_chunk_size=1000, overlap_size=0)

    prepared = preparer.prepare([Document(name="plan.md", content=content)], "pricing", options)

    sections = prepared[0].content.split(CHUNK_DELIMITER)
    assert [section.split("\n", 1)[0] for section in sections] == [
        "[Chunk 1 from plan.md]",
        "[Chunk 3 from plan.md]",
    ]
    assert sections[0].split("\n", 1)[1] == content[:1000]


def test_irrelevant_document_is_dropped() -> None:
    documents = [
        Document(name="finance.txt", content=FILLER * 200 + "Revenue grew. " + FILLER * 100),
        Document(name="notes.txt", content=FILLER * 300),
    ]

    result = DocumentPreparer().prepare_with_report(documents, "What was revenue?")

    assert [document.name for document in result.documents] == ["finance.txt"]
    assert result.dropped == ["notes.txt"]


def test_zero_relevance_corpus_falls_back_to_original() -> None:
    documents = [
        Document(name="one.txt", content=FILLER * 300),
        Document(name="two.txt", content=FILLER * 300),
    ]

    result = DocumentPreparer().prepare_with_report(documents, "What is the churn?")

    assert result.strategy == STRATEGY_FALLBACK
    assert result.documents == documents
    assert result.dropped == ["one.txt", "two.txt"]


def test_chunks_per_document_limits_sections() -> None:
    content = "".join(block("pricing ") for _ in range(8))
    preparer = DocumentPreparer(min_total_size=0, chunks_per_document=2)
    options = ChunkingOptions(max_chunk_size=1000, overlap_size=0)

    prepared = preparer.prepare([Document(name="p.txt", content=content)], "pricing", options)

    assert len(prepared[0].content.split(CHUNK_DELIMITER)) == 2


def test_preparation_is_deterministic() -> None:
    documents = [Document(name="deck.txt", content=FILLER * 300 + "Market size and TAM. " + FILLER * 100)]

    first = prepare_documents_for_question(documents, "What is the TAM?")
    second = prepare_documents_for_question(documents, "What is the TAM?")

    assert first == second
