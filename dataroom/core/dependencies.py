"""Dependency injection for services."""

from dataroom.core.config import settings
from dataroom.services.chat_orchestrator import ChatOrchestrator
from dataroom.services.context_assembler import ContextAssembler
from dataroom.services.database import DatabaseService
from dataroom.services.embedding import EmbeddingService
from dataroom.services.llm import LLMService
from dataroom.services.openai_client import create_openai_client
from dataroom.services.section_indexer import SectionIndexer


class ServiceContainer:
    """Container for service instances."""

    def __init__(self) -> None:
        """Initialize service container."""
        self.openai_client = create_openai_client(settings)
        self.database = DatabaseService()
        self.embedding_service = EmbeddingService(self.openai_client)
        self.llm_service = LLMService(self.openai_client)
        self.context_assembler = ContextAssembler(
            database=self.database,
            embedding_service=self.embedding_service,
        )
        self.chat_orchestrator = ChatOrchestrator(
            database=self.database,
            context_assembler=self.context_assembler,
            llm_service=self.llm_service,
        )
        self.section_indexer = SectionIndexer(
            database=self.database,
            embedding_service=self.embedding_service,
        )

    async def initialize(self) -> None:
        """Initialize all services."""
        await self.database.connect()

    async def shutdown(self) -> None:
        """Shutdown all services."""
        await self.database.disconnect()
        if self.openai_client is not None:
            await self.openai_client.close()


services = ServiceContainer()


def get_database() -> DatabaseService:
    """FastAPI dependency for the document store."""
    return services.database


def get_chat_orchestrator() -> ChatOrchestrator:
    """FastAPI dependency for the chat orchestrator."""
    return services.chat_orchestrator


def get_section_indexer() -> SectionIndexer:
    """FastAPI dependency for the section indexer."""
    return services.section_indexer
