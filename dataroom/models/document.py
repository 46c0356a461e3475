"""Document models for the dataroom."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Document(BaseModel):
    """Document model representing a dataroom entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str = ""
    order: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DocumentSection(BaseModel):
    """Section of a document, the unit that carries an embedding."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    document_id: str
    title: str
    content: str = ""
    order: int = 0
    embedding: Optional[List[float]] = None


class SectionWithDocument(DocumentSection):
    """Embedded section joined with its owning document's title."""

    document_title: str


class ContextCandidate(BaseModel):
    """Piece of document text offered to the generator as grounding."""

    doc_id: str
    doc_title: str
    section_id: Optional[str] = None
    section_title: Optional[str] = None
    content: str
    embedding: Optional[List[float]] = None


class RankedContext(ContextCandidate):
    """Context candidate annotated with its similarity to the query."""

    score: float = Field(ge=-1.0, le=1.0)
