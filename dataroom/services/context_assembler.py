"""Selection of grounding contexts for a chat request."""

import logging
from typing import List

from dataroom.core.config import settings
from dataroom.models.document import ContextCandidate, Document
from dataroom.monitoring.metrics import fallback_contexts_total
from dataroom.services.database import DatabaseService
from dataroom.services.embedding import EmbeddingService
from dataroom.services.ranking import rank_candidates

logger = logging.getLogger(__name__)


class ContextAssembler:
    """Chooses ranked sections, or whole documents when nothing is embedded."""

    def __init__(
        self,
        database: DatabaseService,
        embedding_service: EmbeddingService,
        top_k: int = settings.top_k,
        fallback_limit: int = settings.fallback_document_limit,
    ) -> None:
        """
        Initialize context assembler.

        Args:
            database: Document store.
            embedding_service: Embedding generation service.
            top_k: Number of ranked sections to keep.
            fallback_limit: Number of whole documents used when no
                section has been embedded yet.
        """
        self.database = database
        self.embedding_service = embedding_service
        self.top_k = top_k
        self.fallback_limit = fallback_limit

    async def assemble(self, query: str, documents: List[Document]) -> List[ContextCandidate]:
        """
        Assemble grounding contexts for a query.

        Args:
            query: User question.
            documents: Every document in the store, in store order.

        Returns:
            Ranked sections, or the first documents whole in fallback mode.
        """
        if not documents:
            return []

        sections = await self.database.get_sections_with_embeddings()

        if not sections:
            fallback_contexts_total.inc()
            logger.info(
                f"No embedded sections; using first {self.fallback_limit} documents unranked")
            return [
                ContextCandidate(
                    doc_id=doc.id,
                    doc_title=doc.title,
                    content=doc.content or "",
                )
                for doc in documents[: self.fallback_limit]
            ]

        query_embedding = await self.embedding_service.generate_embedding(query)
        candidates = [
            ContextCandidate(
                doc_id=section.document_id,
                doc_title=section.document_title,
                section_id=section.id,
                section_title=section.title,
                content=section.content,
                embedding=section.embedding,
            )
            for section in sections
        ]

        ranked = rank_candidates(query_embedding, candidates, self.top_k)
        logger.info(
            f"Ranked {len(candidates)} sections, kept {len(ranked)}")
        return ranked
