"""OpenAI LLM service for grounded answers with citations."""

import asyncio
import logging
from typing import List, Optional

from openai import AsyncOpenAI, AuthenticationError

from dataroom.core.config import settings
from dataroom.core.exceptions import ProviderError, ProviderUnavailable
from dataroom.models.chat import GeneratedAnswer
from dataroom.models.document import ContextCandidate
from dataroom.monitoring.metrics import generation_requests_total
from dataroom.services.citations import extract_citations
from dataroom.services.openai_client import require_client

logger = logging.getLogger(__name__)

CONTEXT_DELIMITER = "\n---\n"

SYSTEM_PROMPT = """You are an AI assistant for a dataroom application. Your role is to answer questions about the documents in the dataroom.

When answering questions:
1. Base your answers ONLY on the provided document contexts
2. Be specific and cite the sources by referencing their index numbers in square brackets [1], [2], etc.
3. If the information is not available in the documents, say so clearly
4. Provide concise but complete answers
5. Format your response in a readable way using markdown if needed

IMPORTANT: At the end of your response, provide a JSON array of citations in this exact format on a new line starting with "CITATIONS:":
CITATIONS: [{"index": 1, "docId": "...", "sectionId": "...", "docTitle": "...", "sectionTitle": "..."}]

Only include citations for sources you actually referenced in your answer."""


def render_contexts(contexts: List[ContextCandidate]) -> str:
    """
    Render contexts as numbered blocks.

    Args:
        contexts: Grounding contexts in citation order.

    Returns:
        Blocks joined by a delimiter line.
    """
    blocks = []
    for i, ctx in enumerate(contexts, start=1):
        header = f'[{i}] Document: "{ctx.doc_title}"'
        if ctx.section_title:
            header += f' - Section: "{ctx.section_title}"'
        blocks.append(f"{header}\n{ctx.content}\n")
    return CONTEXT_DELIMITER.join(blocks)


def build_user_prompt(question: str, contexts: List[ContextCandidate]) -> str:
    """Combine rendered contexts and the literal question."""
    return (
        "Here are the relevant documents from the dataroom:\n\n"
        f"{render_contexts(contexts)}\n\n"
        f"User question: {question}\n\n"
        "Please answer the question based on the documents above. "
        "Remember to include the CITATIONS array at the end."
    )


class LLMService:
    """Service for generating grounded responses with citations."""

    def __init__(self, client: Optional[AsyncOpenAI]) -> None:
        """
        Initialize the LLM service.

        Args:
            client: Shared OpenAI client, or None when unconfigured.
        """
        self.client = client
        self.model = settings.llm_model
        self.max_completion_tokens = settings.max_completion_tokens
        self.timeout = settings.provider_timeout_seconds

    async def generate_raw(self, question: str, contexts: List[ContextCandidate]) -> str:
        """
        Run the completion call and return the unparsed output.

        Raises:
            ProviderUnavailable: If no usable API key is configured.
            ProviderError: If the completion call fails or times out.
        """
        client = require_client(self.client)
        generation_requests_total.inc()

        try:
            response = await asyncio.wait_for(
                client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": build_user_prompt(question, contexts)},
                    ],
                    max_completion_tokens=self.max_completion_tokens,
                ),
                timeout=self.timeout,
            )
        except AuthenticationError as e:
            raise ProviderUnavailable(f"Invalid OpenAI API key: {str(e)}") from e
        except asyncio.TimeoutError as e:
            raise ProviderError(
                f"Completion request timed out after {self.timeout}s") from e
        except Exception as e:
            raise ProviderError(f"Failed to generate response: {str(e)}") from e

        choice = response.choices[0]
        if choice.finish_reason == "length":
            logger.warning("Completion hit the token ceiling; citations may be truncated")
        return choice.message.content or ""

    async def generate_response(
        self, question: str, contexts: List[ContextCandidate]
    ) -> GeneratedAnswer:
        """
        Generate an answer grounded in the given contexts.

        Args:
            question: User question.
            contexts: Grounding contexts, numbered from 1 in the prompt.

        Returns:
            Answer text with the citation block removed, plus citations.
        """
        raw = await self.generate_raw(question, contexts)
        answer, citations = extract_citations(raw)
        return GeneratedAnswer(answer=answer, citations=citations)
