from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from docprep.rag.types import Document


DEFAULT_REFUSAL = "I don't know based on the provided documents."


@dataclass(frozen=True)
class GuardrailResult:
    allowed: bool
    reason: str


def require_documents(documents: Sequence[Document]) -> GuardrailResult:
    if not documents:
        return GuardrailResult(allowed=False, reason="no_documents")
    if all(not (document.content or "").strip() for document in documents):
        return GuardrailResult(allowed=False, reason="empty_documents")
    return GuardrailResult(allowed=True, reason="ok")
