"""Database service for PostgreSQL operations."""

import json
import uuid
from typing import List, Optional

import asyncpg

from dataroom.core.config import settings
from dataroom.core.exceptions import DatabaseError
from dataroom.models.chat import ChatMessage, Citation
from dataroom.models.document import Document, DocumentSection, SectionWithDocument

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS documents (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    title TEXT NOT NULL,
    content TEXT NOT NULL DEFAULT '',
    "order" INTEGER NOT NULL DEFAULT 0,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS document_sections (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    document_id UUID NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    content TEXT NOT NULL DEFAULT '',
    "order" INTEGER NOT NULL DEFAULT 0,
    embedding JSONB
);

CREATE TABLE IF NOT EXISTS chat_messages (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    role TEXT NOT NULL CHECK (role IN ('user', 'assistant')),
    content TEXT NOT NULL,
    citations JSONB,
    created_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp()
);
"""

DOCUMENT_COLUMNS = 'id, title, content, "order", created_at, updated_at'
SECTION_COLUMNS = 'id, document_id, title, content, "order", embedding'


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Decode jsonb columns into Python objects."""
    await conn.set_type_codec(
        "jsonb", encoder=json.dumps, decoder=json.loads, schema="pg_catalog"
    )


def _is_valid_id(value: str) -> bool:
    """Ids are UUIDs; anything else cannot match a row."""
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def _row_to_document(row: asyncpg.Record) -> Document:
    result = dict(row)
    result["id"] = str(result["id"])
    return Document(**result)


def _row_to_section(row: asyncpg.Record) -> DocumentSection:
    result = dict(row)
    result["id"] = str(result["id"])
    result["document_id"] = str(result["document_id"])
    return DocumentSection(**result)


def _row_to_message(row: asyncpg.Record) -> ChatMessage:
    result = dict(row)
    result["id"] = str(result["id"])
    return ChatMessage(**result)


class DatabaseService:
    """Service for PostgreSQL database operations."""

    def __init__(self) -> None:
        """Initialize database service."""
        self.pool: Optional[asyncpg.Pool] = None

    async def connect(self) -> None:
        """Create connection pool and make sure the schema exists."""
        try:
            self.pool = await asyncpg.create_pool(
                settings.postgres_url,
                min_size=settings.postgres_pool_min_size,
                max_size=settings.postgres_pool_max_size,
                init=_init_connection,
            )
        except Exception as e:
            raise DatabaseError(
                f"Failed to connect to database: {str(e)}") from e
        await self.ensure_schema()

    async def disconnect(self) -> None:
        """Close connection pool."""
        if self.pool:
            await self.pool.close()

    def _require_pool(self) -> asyncpg.Pool:
        if not self.pool:
            raise DatabaseError("Database not connected")
        return self.pool

    async def ensure_schema(self) -> None:
        """Create tables if they do not exist."""
        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                await conn.execute(SCHEMA_SQL)
        except Exception as e:
            raise DatabaseError(f"Failed to create schema: {str(e)}") from e

    async def get_all_documents(self) -> List[Document]:
        """
        Get all documents in store order.

        Returns:
            Documents ordered by position, then creation time.
        """
        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {DOCUMENT_COLUMNS}
                    FROM documents
                    ORDER BY "order", created_at
                    """
                )
                return [_row_to_document(row) for row in rows]
        except Exception as e:
            raise DatabaseError(f"Failed to fetch documents: {str(e)}") from e

    async def get_document(self, document_id: str) -> Optional[Document]:
        """
        Get a single document by ID.

        Args:
            document_id: Document UUID.

        Returns:
            Document or None if not found.
        """
        pool = self._require_pool()
        if not _is_valid_id(document_id):
            return None
        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {DOCUMENT_COLUMNS} FROM documents WHERE id = $1",
                    document_id,
                )
                return _row_to_document(row) if row else None
        except Exception as e:
            raise DatabaseError(f"Failed to fetch document: {str(e)}") from e

    async def create_document(self, title: str, content: str = "", order: int = 0) -> Document:
        """
        Create a new document.

        Args:
            title: Document title.
            content: Document content.
            order: Position among siblings.

        Returns:
            Created document.
        """
        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO documents (title, content, "order")
                    VALUES ($1, $2, $3)
                    RETURNING {DOCUMENT_COLUMNS}
                    """,
                    title,
                    content,
                    order,
                )
                return _row_to_document(row)
        except Exception as e:
            raise DatabaseError(f"Failed to create document: {str(e)}") from e

    async def update_document(
        self,
        document_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        order: Optional[int] = None,
    ) -> Optional[Document]:
        """
        Update a document.

        Args:
            document_id: Document UUID.
            title: New title (optional).
            content: New content (optional).
            order: New position (optional).

        Returns:
            Updated document or None if not found.
        """
        pool = self._require_pool()

        if title is None and content is None and order is None:
            raise DatabaseError(
                "At least one field (title, content or order) must be provided")

        updates = []
        params = []
        for column, value in (("title", title), ("content", content), ('"order"', order)):
            if value is not None:
                params.append(value)
                updates.append(f"{column} = ${len(params)}")
        updates.append("updated_at = now()")
        params.append(document_id)

        if not _is_valid_id(document_id):
            return None

        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    UPDATE documents
                    SET {', '.join(updates)}
                    WHERE id = ${len(params)}
                    RETURNING {DOCUMENT_COLUMNS}
                    """,
                    *params,
                )
                return _row_to_document(row) if row else None
        except Exception as e:
            raise DatabaseError(f"Failed to update document: {str(e)}") from e

    async def delete_document(self, document_id: str) -> bool:
        """
        Delete a document and, by cascade, its sections.

        Args:
            document_id: Document UUID.

        Returns:
            True if deleted, False if not found.
        """
        pool = self._require_pool()
        if not _is_valid_id(document_id):
            return False
        try:
            async with pool.acquire() as conn:
                result = await conn.execute(
                    "DELETE FROM documents WHERE id = $1",
                    document_id,
                )
                return result == "DELETE 1"
        except Exception as e:
            raise DatabaseError(f"Failed to delete document: {str(e)}") from e

    async def get_document_sections(self, document_id: str) -> List[DocumentSection]:
        """
        Get the sections of a document in position order.

        Args:
            document_id: Document UUID.

        Returns:
            List of sections.
        """
        pool = self._require_pool()
        if not _is_valid_id(document_id):
            return []
        try:
            async with pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {SECTION_COLUMNS}
                    FROM document_sections
                    WHERE document_id = $1
                    ORDER BY "order"
                    """,
                    document_id,
                )
                return [_row_to_section(row) for row in rows]
        except Exception as e:
            raise DatabaseError(f"Failed to fetch sections: {str(e)}") from e

    async def create_document_section(
        self, document_id: str, title: str, content: str = "", order: int = 0
    ) -> DocumentSection:
        """
        Create a section without an embedding.

        Args:
            document_id: Owning document UUID.
            title: Section title.
            content: Section text.
            order: Position within the document.

        Returns:
            Created section.
        """
        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO document_sections (document_id, title, content, "order")
                    VALUES ($1, $2, $3, $4)
                    RETURNING {SECTION_COLUMNS}
                    """,
                    document_id,
                    title,
                    content,
                    order,
                )
                return _row_to_section(row)
        except Exception as e:
            raise DatabaseError(f"Failed to create section: {str(e)}") from e

    async def update_document_section(
        self,
        section_id: str,
        embedding: List[float],
        content: Optional[str] = None,
    ) -> Optional[DocumentSection]:
        """
        Attach an embedding to a section, optionally refreshing its text.

        Args:
            section_id: Section UUID.
            embedding: Embedding vector.
            content: Replacement text (optional).

        Returns:
            Updated section or None if not found.
        """
        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    UPDATE document_sections
                    SET embedding = $2, content = COALESCE($3, content)
                    WHERE id = $1
                    RETURNING {SECTION_COLUMNS}
                    """,
                    section_id,
                    embedding,
                    content,
                )
                return _row_to_section(row) if row else None
        except Exception as e:
            raise DatabaseError(f"Failed to update section: {str(e)}") from e

    async def get_sections_with_embeddings(self) -> List[SectionWithDocument]:
        """
        Get every embedded section joined with its document title.

        Returns:
            Sections whose embedding is not null.
        """
        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT s.id, s.document_id, s.title, s.content, s."order",
                           s.embedding, d.title AS document_title
                    FROM document_sections s
                    JOIN documents d ON d.id = s.document_id
                    WHERE s.embedding IS NOT NULL
                    ORDER BY d."order", d.created_at, s."order"
                    """
                )
                sections = []
                for row in rows:
                    result = dict(row)
                    result["id"] = str(result["id"])
                    result["document_id"] = str(result["document_id"])
                    sections.append(SectionWithDocument(**result))
                return sections
        except Exception as e:
            raise DatabaseError(
                f"Failed to fetch embedded sections: {str(e)}") from e

    async def get_chat_messages(self) -> List[ChatMessage]:
        """
        Get the chat log in creation order.

        Returns:
            List of chat messages.
        """
        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT id, role, content, citations, created_at
                    FROM chat_messages
                    ORDER BY created_at
                    """
                )
                return [_row_to_message(row) for row in rows]
        except Exception as e:
            raise DatabaseError(f"Failed to fetch chat messages: {str(e)}") from e

    async def create_chat_message(
        self,
        role: str,
        content: str,
        citations: Optional[List[Citation]] = None,
    ) -> ChatMessage:
        """
        Append a message to the chat log.

        Args:
            role: "user" or "assistant".
            content: Message text.
            citations: Citations for assistant messages.

        Returns:
            Persisted message with its timestamp.
        """
        pool = self._require_pool()
        payload = None
        if citations is not None:
            payload = [c.model_dump(by_alias=True, exclude_none=True) for c in citations]

        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    INSERT INTO chat_messages (role, content, citations)
                    VALUES ($1, $2, $3)
                    RETURNING id, role, content, citations, created_at
                    """,
                    role,
                    content,
                    payload,
                )
                return _row_to_message(row)
        except Exception as e:
            raise DatabaseError(f"Failed to create chat message: {str(e)}") from e

    async def clear_chat_messages(self) -> None:
        """Delete every chat message."""
        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                await conn.execute("DELETE FROM chat_messages")
        except Exception as e:
            raise DatabaseError(f"Failed to clear chat messages: {str(e)}") from e
