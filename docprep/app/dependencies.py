from __future__ import annotations

from functools import lru_cache

from docprep.app.settings import settings
from docprep.cache.response_cache import CacheSweeper, ResponseCache
from docprep.rag.answerer import ExtractiveAnswerer
from docprep.rag.preparer import DocumentPreparer
from docprep.rag.scoring import RelevanceScorer


@lru_cache
def get_scorer() -> RelevanceScorer:
    return RelevanceScorer(vocabulary=settings.vocabulary)


@lru_cache
def get_preparer() -> DocumentPreparer:
    return DocumentPreparer(
        scorer=get_scorer(),
        min_total_size=settings.min_total_size,
        chunks_per_document=settings.chunks_per_document,
    )


@lru_cache
def get_answerer() -> ExtractiveAnswerer:
    return ExtractiveAnswerer(scorer=get_scorer(), max_chars=settings.answer_max_chars)


@lru_cache
def get_response_cache() -> ResponseCache[str]:
    return ResponseCache(default_ttl=settings.cache_ttl_seconds)


@lru_cache
def get_cache_sweeper() -> CacheSweeper:
    return CacheSweeper(get_response_cache(), interval=settings.cache_sweep_interval)


def reset_dependency_cache() -> None:
    if get_cache_sweeper.cache_info().currsize:
        get_cache_sweeper().stop()
    for factory in (get_scorer, get_preparer, get_answerer, get_response_cache, get_cache_sweeper):
        factory.cache_clear()
