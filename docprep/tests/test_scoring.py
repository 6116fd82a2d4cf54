from __future__ import annotations

from docprep.rag.scoring import (
    DomainBoost,
    RelevanceScorer,
    ScoringVocabulary,
    extract_keywords,
)
from docprep.rag.selector import select_relevant_chunks
from docprep.rag.types import Chunk, QuestionType


def make_chunk(content: str, index: int = 0) -> Chunk:
    return Chunk(
        content=content,
        document_name="deck.pdf",
        media_type="application/pdf",
        index=index,
        start_offset=0,
        end_offset=len(content),
    )


def test_extract_keywords_drops_stop_words_and_short_words() -> None:
    assert extract_keywords("What is the Churn rate, and where does it come from?") == [
        "churn",
        "rate",
        "does",
        "come",
        "from",
    ]


def test_keyword_occurrences_add_two_each() -> None:
    scorer = RelevanceScorer()

    score = scorer.score(make_chunk("Churn fell. CHURN is low. churn!"), "Explain churn")

    assert score == 6.0


def test_revenue_mentions_outscore_identical_chunk_without_them() -> None:
    scorer = RelevanceScorer()
    filler = "The team shipped features this quarter. "
    with_revenue = make_chunk(filler + "revenue " * 5)
    without_revenue = make_chunk(filler + "sales " * 5)

    question = "How much revenue did they make?"

    assert scorer.score(with_revenue, question) > scorer.score(without_revenue, question)
    assert scorer.score(without_revenue, question) == 0.0


def test_financial_boost_counts_each_occurrence() -> None:
    scorer = RelevanceScorer()
    chunk = make_chunk("ARR hit 2 million. Growth in ARR was strong.")

    # "arr" is too short to be a keyword; boost only: arr x2, million x1, growth x1
    assert scorer.score(chunk, "What is ARR?") == 12.0


def test_market_boost_requires_market_vocabulary_in_question() -> None:
    scorer = RelevanceScorer()
    chunk = make_chunk("Each customer segment differs.")

    assert scorer.score(chunk, "Who founded it?") == 0.0
    assert scorer.score(chunk, "Who are the competitors?") > 0.0


def test_both_boosts_are_additive() -> None:
    scorer = RelevanceScorer()
    chunk = make_chunk("growth")

    financial_only = scorer.score(chunk, "revenue please")
    market_only = scorer.score(chunk, "market please")
    both = scorer.score(chunk, "revenue and market please")

    assert financial_only == 3.0
    assert market_only == 3.0
    assert both == 6.0


def test_question_type_forces_domain_boost() -> None:
    scorer = RelevanceScorer()
    chunk = make_chunk("Profit doubled in USD terms.")

    assert scorer.score(chunk, "Tell me more") == 0.0
    assert scorer.score(chunk, "Tell me more", QuestionType.FINANCIAL) == 6.0


def test_custom_vocabulary_is_used() -> None:
    vocabulary = ScoringVocabulary(
        stop_words=frozenset({"about"}),
        boosts=(DomainBoost(QuestionType.MARKET, ("pipeline",), ("deal",)),),
    )
    scorer = RelevanceScorer(vocabulary=vocabulary)
    chunk = make_chunk("deal deal about")

    assert scorer.score(chunk, "about pipeline") == 6.0


def test_selector_orders_by_score_then_index() -> None:
    chunks = [
        make_chunk("nothing relevant", index=0),
        make_chunk("pricing pricing", index=1),
        make_chunk("pricing", index=2),
        make_chunk("pricing pricing", index=3),
    ]

    selected = select_relevant_chunks(chunks, "Describe pricing", k=3)

    assert [item.chunk.index for item in selected] == [1, 3, 2]
    assert [item.score for item in selected] == [4.0, 4.0, 2.0]


def test_selector_returns_all_when_fewer_than_k() -> None:
    chunks = [make_chunk("pricing", index=0), make_chunk("other", index=1)]

    selected = select_relevant_chunks(chunks, "pricing", k=5)

    assert len(selected) == 2


def test_selection_is_deterministic() -> None:
    chunks = [make_chunk(f"pricing {'tiers ' * i}", index=i) for i in range(6)]

    first = select_relevant_chunks(chunks, "pricing tiers", k=3)
    second = select_relevant_chunks(chunks, "pricing tiers", k=3)

    assert first == second


def test_keywords_keep_accented_and_non_ascii_letters() -> None:
    assert extract_keywords("Résumé of Zahlungsfähigkeit") == ["résumé", "zahlungsfähigkeit"]


def test_accented_keyword_matches_chunk() -> None:
    scorer = RelevanceScorer()
    chunk = make_chunk("Her résumé lists many roles. The RÉSUMÉ is long.")

    assert scorer.score(chunk, "Summarize the résumé") == 4.0
