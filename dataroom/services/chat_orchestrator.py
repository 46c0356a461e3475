"""Chat request orchestration: context, generation, persistence."""

import logging
import uuid

from dataroom.models.chat import ChatResponse
from dataroom.services.context_assembler import ContextAssembler
from dataroom.services.database import DatabaseService
from dataroom.services.llm import LLMService

logger = logging.getLogger(__name__)

NO_DOCUMENTS_MESSAGE = (
    "There are no documents in the dataroom yet. Please add some documents "
    "first, and then I can help you answer questions about them."
)


class ChatOrchestrator:
    """Handles a single chat request end to end."""

    def __init__(
        self,
        database: DatabaseService,
        context_assembler: ContextAssembler,
        llm_service: LLMService,
    ) -> None:
        """
        Initialize chat orchestrator.

        Args:
            database: Document store and chat log.
            context_assembler: Grounding context selection.
            llm_service: Answer generation.
        """
        self.database = database
        self.context_assembler = context_assembler
        self.llm_service = llm_service

    async def handle(self, question: str) -> ChatResponse:
        """
        Answer a question about the stored documents.

        Messages are persisted only after generation succeeds. With an
        empty store only the user's message is logged and a canned reply
        is returned without calling the model.

        Args:
            question: User message.

        Returns:
            Response carrying the assistant message id, text and citations.
        """
        documents = await self.database.get_all_documents()

        if not documents:
            await self.database.create_chat_message(role="user", content=question)
            logger.info("Chat request with empty dataroom; returning canned reply")
            return ChatResponse(
                id=str(uuid.uuid4()), content=NO_DOCUMENTS_MESSAGE, citations=[])

        contexts = await self.context_assembler.assemble(question, documents)
        generated = await self.llm_service.generate_response(question, contexts)

        await self.database.create_chat_message(role="user", content=question)
        assistant_message = await self.database.create_chat_message(
            role="assistant",
            content=generated.answer,
            citations=generated.citations,
        )

        logger.info(
            f"Answered with {len(contexts)} contexts and {len(generated.citations)} citations")
        return ChatResponse(
            id=assistant_message.id,
            content=generated.answer,
            citations=generated.citations,
        )
