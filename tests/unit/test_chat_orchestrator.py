"""Tests for ChatOrchestrator."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from dataroom.core.exceptions import ProviderError
from dataroom.models.chat import Citation, GeneratedAnswer
from dataroom.services.chat_orchestrator import NO_DOCUMENTS_MESSAGE, ChatOrchestrator
from dataroom.services.context_assembler import ContextAssembler
from dataroom.services.llm import LLMService
from tests.conftest import make_completion_client


def fake_llm(answer: str, citations=None):
    llm = MagicMock()
    llm.generate_response = AsyncMock(
        return_value=GeneratedAnswer(answer=answer, citations=citations or [])
    )
    return llm


def fake_embedder(vector):
    embedder = MagicMock()
    embedder.generate_embedding = AsyncMock(return_value=vector)
    return embedder


class TestChatOrchestrator:
    """Tests for handle."""

    @pytest.mark.asyncio
    async def test_empty_store_returns_canned_reply(self, store):
        llm = fake_llm("unused")
        embedder = fake_embedder([1.0])
        orchestrator = ChatOrchestrator(store, ContextAssembler(store, embedder), llm)

        response = await orchestrator.handle("hello")

        assert response.content == NO_DOCUMENTS_MESSAGE
        assert response.citations == []
        assert response.id
        llm.generate_response.assert_not_awaited()
        embedder.generate_embedding.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_store_logs_only_user_message(self, store):
        orchestrator = ChatOrchestrator(
            store, ContextAssembler(store, fake_embedder([1.0])), fake_llm("unused"))

        await orchestrator.handle("hello")

        assert len(store.messages) == 1
        assert store.messages[0].role == "user"
        assert store.messages[0].content == "hello"

    @pytest.mark.asyncio
    async def test_persists_user_then_assistant(self, store):
        store.add_document("Memo", "Series B of $25M")
        citation = Citation(index=1, doc_id="d1", doc_title="Memo")
        orchestrator = ChatOrchestrator(
            store,
            ContextAssembler(store, fake_embedder([1.0])),
            fake_llm("It is $25M [1].", [citation]),
        )

        response = await orchestrator.handle("How big is the round?")

        assert [m.role for m in store.messages] == ["user", "assistant"]
        user, assistant = store.messages
        assert user.content == "How big is the round?"
        assert user.citations is None
        assert assistant.content == "It is $25M [1]."
        assert assistant.citations == [citation]
        assert response.id == assistant.id
        assert response.content == "It is $25M [1]."
        assert response.citations == [citation]

    @pytest.mark.asyncio
    async def test_generation_failure_persists_nothing(self, store):
        store.add_document("Memo", "text")
        llm = MagicMock()
        llm.generate_response = AsyncMock(side_effect=ProviderError("timeout"))
        orchestrator = ChatOrchestrator(
            store, ContextAssembler(store, fake_embedder([1.0])), llm)

        with pytest.raises(ProviderError):
            await orchestrator.handle("q")

        assert store.messages == []

    @pytest.mark.asyncio
    async def test_best_section_is_sole_context_and_cited(self, store):
        best = store.add_document("Financials", "ARR $18.4M")
        other = store.add_document("Contracts", "24 month terms")
        third = store.add_document("Memo", "Series B")
        best_section = store.add_section(best, "Financials", best.content, [0.9, 0.1])
        store.add_section(other, "Contracts", other.content, [0.1, 0.9])
        store.add_section(third, "Memo", third.content, [-0.5, 0.5])

        client = make_completion_client(
            "ARR is $18.4M [1].\n"
            f'CITATIONS: [{{"index": 1, "docId": "{best.id}", '
            f'"sectionId": "{best_section.id}", "docTitle": "Financials"}}]'
        )
        llm = LLMService(client)
        assembler = ContextAssembler(store, fake_embedder([1.0, 0.0]), top_k=1)
        orchestrator = ChatOrchestrator(store, assembler, llm)

        response = await orchestrator.handle("What is ARR?")

        prompt = client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
        assert '[1] Document: "Financials"' in prompt
        assert "[2]" not in prompt
        assert response.content == "ARR is $18.4M [1]."
        assert {c.index for c in response.citations} <= {1}
        assert response.citations[0].section_id == best_section.id
