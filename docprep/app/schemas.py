from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from docprep.rag.types import Document


class DocumentPayload(BaseModel):
    name: str = Field(min_length=1)
    content: str
    media_type: str = "text/plain"
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_document(self) -> Document:
        return Document(
            name=self.name,
            content=self.content,
            media_type=self.media_type,
            metadata=dict(self.metadata),
        )

    @classmethod
    def from_document(cls, document: Document) -> "DocumentPayload":
        return cls(
            name=document.name,
            content=document.content,
            media_type=document.media_type,
            metadata=dict(document.metadata),
        )


class PrepareRequest(BaseModel):
    question: str = Field(min_length=1)
    documents: list[DocumentPayload]
    max_chunk_size: int | None = None
    overlap_size: int | None = None
    question_type: Literal["general", "financial", "market"] = "general"


class PrepareResponse(BaseModel):
    documents: list[DocumentPayload]
    strategy: str
    original_size: int
    prepared_size: int
    dropped: list[str] = Field(default_factory=list)
    request_id: str


class AnalyzeRequest(BaseModel):
    question: str = Field(min_length=1)
    documents: list[DocumentPayload]
    question_type: Literal["general", "financial", "market"] = "general"
    ttl_seconds: float | None = Field(default=None, gt=0)


class AnalyzeResponse(BaseModel):
    answer: str
    cached: bool
    cache_key: str
    strategy: str | None = None
    refusal_reason: str | None = None
    request_id: str


class InvalidateRequest(BaseModel):
    question: str = Field(min_length=1)
    documents: list[DocumentPayload]
    question_type: Literal["general", "financial", "market"] = "general"


class InvalidateResponse(BaseModel):
    invalidated: bool


class CleanupResponse(BaseModel):
    removed: int


class CacheEntryPayload(BaseModel):
    key: str
    age: float
    expires_in: float


class CacheStatsResponse(BaseModel):
    size: int
    entries: list[CacheEntryPayload]
