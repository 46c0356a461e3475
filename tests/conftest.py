"""
Shared test fixtures.

Provides an in-memory document store and chat log with the same async
interface as DatabaseService, plus OpenAI client fakes.
"""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from dataroom.models.chat import ChatMessage, Citation
from dataroom.models.document import Document, DocumentSection, SectionWithDocument


class InMemoryStore:
    """Document store and chat log kept in lists."""

    def __init__(self) -> None:
        self.documents: List[Document] = []
        self.sections: List[DocumentSection] = []
        self.messages: List[ChatMessage] = []

    def add_document(self, title: str, content: str = "") -> Document:
        document = Document(id=str(uuid.uuid4()), title=title, content=content)
        self.documents.append(document)
        return document

    def add_section(
        self,
        document: Document,
        title: str,
        content: str,
        embedding: Optional[List[float]] = None,
    ) -> DocumentSection:
        section = DocumentSection(
            id=str(uuid.uuid4()),
            document_id=document.id,
            title=title,
            content=content,
            embedding=embedding,
        )
        self.sections.append(section)
        return section

    async def get_all_documents(self) -> List[Document]:
        return list(self.documents)

    async def get_document(self, document_id: str) -> Optional[Document]:
        return next((d for d in self.documents if d.id == document_id), None)

    async def create_document(self, title: str, content: str = "", order: int = 0) -> Document:
        document = Document(id=str(uuid.uuid4()), title=title, content=content, order=order)
        self.documents.append(document)
        return document

    async def update_document(
        self,
        document_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        order: Optional[int] = None,
    ) -> Optional[Document]:
        changes = {
            key: value
            for key, value in (("title", title), ("content", content), ("order", order))
            if value is not None
        }
        for i, document in enumerate(self.documents):
            if document.id == document_id:
                self.documents[i] = document.model_copy(update=changes)
                return self.documents[i]
        return None

    async def delete_document(self, document_id: str) -> bool:
        remaining = [d for d in self.documents if d.id != document_id]
        if len(remaining) == len(self.documents):
            return False
        self.documents = remaining
        self.sections = [s for s in self.sections if s.document_id != document_id]
        return True

    async def get_document_sections(self, document_id: str) -> List[DocumentSection]:
        return [s for s in self.sections if s.document_id == document_id]

    async def create_document_section(
        self, document_id: str, title: str, content: str = "", order: int = 0
    ) -> DocumentSection:
        section = DocumentSection(
            id=str(uuid.uuid4()),
            document_id=document_id,
            title=title,
            content=content,
            order=order,
        )
        self.sections.append(section)
        return section

    async def update_document_section(
        self, section_id: str, embedding: List[float], content: Optional[str] = None
    ) -> Optional[DocumentSection]:
        for i, section in enumerate(self.sections):
            if section.id == section_id:
                changes = {"embedding": embedding}
                if content is not None:
                    changes["content"] = content
                self.sections[i] = section.model_copy(update=changes)
                return self.sections[i]
        return None

    async def get_sections_with_embeddings(self) -> List[SectionWithDocument]:
        titles = {d.id: d.title for d in self.documents}
        return [
            SectionWithDocument(**s.model_dump(), document_title=titles[s.document_id])
            for s in self.sections
            if s.embedding is not None
        ]

    async def create_chat_message(
        self, role: str, content: str, citations: Optional[List[Citation]] = None
    ) -> ChatMessage:
        message = ChatMessage(
            id=str(uuid.uuid4()),
            role=role,
            content=content,
            citations=citations,
            created_at=datetime.now(timezone.utc),
        )
        self.messages.append(message)
        return message

    async def get_chat_messages(self) -> List[ChatMessage]:
        return list(self.messages)

    async def clear_chat_messages(self) -> None:
        self.messages.clear()


def make_embedding_client(vector: List[float]) -> MagicMock:
    """OpenAI client fake whose embeddings.create returns one vector."""
    client = MagicMock()
    client.embeddings.create = AsyncMock(
        return_value=SimpleNamespace(data=[SimpleNamespace(embedding=vector)])
    )
    return client


def make_completion_client(content: Optional[str], finish_reason: str = "stop") -> MagicMock:
    """OpenAI client fake whose chat completion returns fixed content."""
    client = MagicMock()
    choice = SimpleNamespace(
        message=SimpleNamespace(content=content), finish_reason=finish_reason
    )
    client.chat.completions.create = AsyncMock(
        return_value=SimpleNamespace(choices=[choice])
    )
    return client


@pytest.fixture
def store() -> InMemoryStore:
    """Provide an empty in-memory store."""
    return InMemoryStore()
