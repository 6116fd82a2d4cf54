from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from docprep.rag.scoring import (
    DEFAULT_STOP_WORDS,
    FINANCIAL_TERMS,
    FINANCIAL_TRIGGERS,
    MARKET_TERMS,
    MARKET_TRIGGERS,
    DomainBoost,
    ScoringVocabulary,
)
from docprep.rag.types import QuestionType

load_dotenv()


def _parse_words(raw: str, default: tuple[str, ...]) -> tuple[str, ...]:
    words = tuple(value.strip().lower() for value in raw.split(",") if value.strip())
    return words or default


@dataclass(frozen=True)
class Settings:
    max_chunk_size: int = int(os.getenv("DOCPREP_MAX_CHUNK_SIZE", "5000"))
    chunk_overlap: int = int(os.getenv("DOCPREP_CHUNK_OVERLAP", "200"))
    min_total_size: int = int(os.getenv("DOCPREP_MIN_TOTAL_SIZE", "10000"))
    chunks_per_document: int = int(os.getenv("DOCPREP_CHUNKS_PER_DOCUMENT", "3"))
    cache_ttl_seconds: float = float(os.getenv("DOCPREP_CACHE_TTL_SECONDS", "3600"))
    cache_sweep_interval: float = float(os.getenv("DOCPREP_CACHE_SWEEP_INTERVAL", "300"))
    cache_sweep_enabled: bool = os.getenv("DOCPREP_CACHE_SWEEP_ENABLED", "true").lower() in {"1", "true", "yes"}
    metrics_enabled: bool = os.getenv("DOCPREP_METRICS_ENABLED", "true").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("DOCPREP_LOG_LEVEL", "INFO")
    answer_max_chars: int = int(os.getenv("DOCPREP_ANSWER_MAX_CHARS", "480"))
    stop_words_raw: str = os.getenv("DOCPREP_STOP_WORDS", "")
    financial_triggers_raw: str = os.getenv("DOCPREP_FINANCIAL_TRIGGERS", "")
    financial_terms_raw: str = os.getenv("DOCPREP_FINANCIAL_TERMS", "")
    market_triggers_raw: str = os.getenv("DOCPREP_MARKET_TRIGGERS", "")
    market_terms_raw: str = os.getenv("DOCPREP_MARKET_TERMS", "")

    @property
    def vocabulary(self) -> ScoringVocabulary:
        return ScoringVocabulary(
            stop_words=frozenset(_parse_words(self.stop_words_raw, DEFAULT_STOP_WORDS)),
            boosts=(
                DomainBoost(
                    QuestionType.FINANCIAL,
                    _parse_words(self.financial_triggers_raw, FINANCIAL_TRIGGERS),
                    _parse_words(self.financial_terms_raw, FINANCIAL_TERMS),
                ),
                DomainBoost(
                    QuestionType.MARKET,
                    _parse_words(self.market_triggers_raw, MARKET_TRIGGERS),
                    _parse_words(self.market_terms_raw, MARKET_TERMS),
                ),
            ),
        )


settings = Settings()
