from __future__ import annotations

"""Lexical relevance scoring of chunks against a question."""

import re
from dataclasses import dataclass, field

from docprep.rag.types import Chunk, QuestionType

_TOKEN_RE = re.compile(r"[^\W_]+")

DEFAULT_STOP_WORDS = ("what", "who", "where", "when", "why", "how", "the", "and", "or", "but")
FINANCIAL_TRIGGERS = ("revenue", "arr", "financial")
FINANCIAL_TERMS = (
    "revenue",
    "arr",
    "financial",
    "million",
    "billion",
    "dollar",
    "usd",
    "aud",
    "eur",
    "growth",
    "profit",
)
MARKET_TRIGGERS = ("market", "tam", "competitor")
MARKET_TERMS = ("market", "tam", "sam", "som", "competitor", "customer", "segment", "growth")


@dataclass(frozen=True)
class DomainBoost:
    """Extra weight for domain terms when the question is about that domain."""
    question_type: QuestionType
    triggers: tuple[str, ...]
    terms: tuple[str, ...]

    def applies_to(self, question_lower: str, question_type: QuestionType) -> bool:
        if question_type == self.question_type:
            return True
        return any(trigger in question_lower for trigger in self.triggers)


@dataclass(frozen=True)
class ScoringVocabulary:
    """Tunable word lists and weights used by the relevance scorer."""
    stop_words: frozenset[str] = frozenset(DEFAULT_STOP_WORDS)
    min_keyword_length: int = 4
    keyword_weight: float = 2.0
    boost_weight: float = 3.0
    boosts: tuple[DomainBoost, ...] = field(
        default_factory=lambda: (
            DomainBoost(QuestionType.FINANCIAL, FINANCIAL_TRIGGERS, FINANCIAL_TERMS),
            DomainBoost(QuestionType.MARKET, MARKET_TRIGGERS, MARKET_TERMS),
        )
    )


DEFAULT_VOCABULARY = ScoringVocabulary()


def extract_keywords(question: str, vocabulary: ScoringVocabulary = DEFAULT_VOCABULARY) -> list[str]:
    """Lowercase question tokens minus stop-words and short words."""
    return [
        token
        for token in _TOKEN_RE.findall(question.lower())
        if len(token) >= vocabulary.min_keyword_length and token not in vocabulary.stop_words
    ]


@dataclass(frozen=True)
class RelevanceScorer:
    """Score chunks by keyword overlap plus domain vocabulary boosts."""
    vocabulary: ScoringVocabulary = DEFAULT_VOCABULARY

    def score(
        self,
        chunk: Chunk,
        question: str,
        question_type: QuestionType = QuestionType.GENERAL,
    ) -> float:
        """Return a non-negative relevance score; only the ordering is meaningful."""
        question_lower = question.lower()
        content_lower = chunk.content.lower()
        score = 0.0
        for keyword in extract_keywords(question, self.vocabulary):
            score += self.vocabulary.keyword_weight * content_lower.count(keyword)
        for boost in self.vocabulary.boosts:
            if not boost.applies_to(question_lower, question_type):
                continue
            for term in boost.terms:
                score += self.vocabulary.boost_weight * content_lower.count(term)
        return score
