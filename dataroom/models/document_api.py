"""Pydantic models for document API."""

from typing import List, Optional

from pydantic import BaseModel, Field

from dataroom.models.document import Document, DocumentSection


class DocumentCreate(BaseModel):
    """Model for creating a document."""

    title: str = Field(..., min_length=1, max_length=500)
    content: str = ""
    order: int = 0


class DocumentUpdate(BaseModel):
    """Model for updating a document."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    content: Optional[str] = None
    order: Optional[int] = None


class SectionResponse(BaseModel):
    """Section without its embedding vector."""

    id: str
    document_id: str
    title: str
    content: str
    order: int
    has_embedding: bool

    @classmethod
    def from_section(cls, section: DocumentSection) -> "SectionResponse":
        return cls(
            id=section.id,
            document_id=section.document_id,
            title=section.title,
            content=section.content,
            order=section.order,
            has_embedding=section.embedding is not None,
        )


class DocumentWithSections(Document):
    """Document together with its sections."""

    sections: List[SectionResponse] = Field(default_factory=list)


class EmbedResponse(BaseModel):
    """Result of an embed-on-demand request."""

    success: bool
    message: str
