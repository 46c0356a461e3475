"""Embed-on-demand: one whole-document section per document."""

import logging
from typing import Optional

from dataroom.core.exceptions import DocumentNotFoundError
from dataroom.models.document import DocumentSection
from dataroom.services.database import DatabaseService
from dataroom.services.embedding import EmbeddingService

logger = logging.getLogger(__name__)


class SectionIndexer:
    """Writes section embeddings for documents."""

    def __init__(self, database: DatabaseService, embedding_service: EmbeddingService) -> None:
        self.database = database
        self.embedding_service = embedding_service

    async def embed_document(self, document_id: str) -> Optional[DocumentSection]:
        """
        Embed a document's whole content into its first section.

        The section is created when missing; otherwise its text is
        refreshed and its embedding overwritten.

        Args:
            document_id: Document UUID.

        Returns:
            The embedded section, or None if the document has no content.

        Raises:
            DocumentNotFoundError: If the document, or its section, no longer
                exists.
        """
        document = await self.database.get_document(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")

        if not document.content:
            logger.info(f"Document {document_id} has no content; nothing to embed")
            return None

        embedding = await self.embedding_service.generate_embedding(document.content)

        sections = await self.database.get_document_sections(document_id)
        if sections:
            section = sections[0]
        else:
            section = await self.database.create_document_section(
                document_id=document_id,
                title=document.title,
                content=document.content,
                order=0,
            )

        updated = await self.database.update_document_section(
            section.id, embedding=embedding, content=document.content)
        if updated is None:
            raise DocumentNotFoundError(
                f"Section {section.id} of document {document_id} disappeared before embedding")
        logger.info(f"Embedded document {document_id} into section {section.id}")
        return updated
