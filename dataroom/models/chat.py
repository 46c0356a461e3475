"""Chat and citation models."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Citation(BaseModel):
    """Back-reference from a bracketed answer index to its source."""

    model_config = ConfigDict(populate_by_name=True)

    index: int
    doc_id: str = Field(alias="docId")
    section_id: Optional[str] = Field(default=None, alias="sectionId")
    doc_title: str = Field(alias="docTitle")
    section_title: Optional[str] = Field(default=None, alias="sectionTitle")


class CitationPayload(BaseModel):
    """Citation entry as emitted by the model, before index defaulting."""

    index: Optional[int] = None
    docId: str
    sectionId: Optional[str] = None
    docTitle: str
    sectionTitle: Optional[str] = None


class GeneratedAnswer(BaseModel):
    """Answer text split from its trailing citation block."""

    answer: str
    citations: List[Citation] = Field(default_factory=list)


class ChatMessage(BaseModel):
    """Persisted chat log entry."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    role: Literal["user", "assistant"]
    content: str
    citations: Optional[List[Citation]] = None
    created_at: Optional[datetime] = None


class ChatRequest(BaseModel):
    """Chat request body."""

    message: str = Field(..., min_length=1)


class ChatResponse(BaseModel):
    """Chat response returned to the client."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    content: str
    citations: List[Citation] = Field(default_factory=list)
