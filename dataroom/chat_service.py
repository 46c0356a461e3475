"""Chat Service: document library and grounded chat endpoints."""

import logging
import time
from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from dataroom.api.health import check_all_dependencies, check_readiness
from dataroom.core.config import settings
from dataroom.core.dependencies import (
    get_chat_orchestrator,
    get_database,
    get_section_indexer,
    services,
)
from dataroom.core.exceptions import (
    DatabaseError,
    DocumentNotFoundError,
    ProviderError,
    ProviderUnavailable,
)
from dataroom.models.chat import ChatMessage, ChatRequest, ChatResponse
from dataroom.models.document import Document
from dataroom.models.document_api import (
    DocumentCreate,
    DocumentUpdate,
    DocumentWithSections,
    EmbedResponse,
    SectionResponse,
)
from dataroom.monitoring.metrics import (
    chat_errors_total,
    chat_latency_seconds,
    chat_requests_total,
)
from dataroom.services.chat_orchestrator import ChatOrchestrator
from dataroom.services.database import DatabaseService
from dataroom.services.section_indexer import SectionIndexer

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

GENERIC_CHAT_ERROR = "Failed to generate response"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    await services.initialize()
    logger.info("Chat Service started")
    yield
    await services.shutdown()
    logger.info("Chat Service stopped")


app = FastAPI(title="Dataroom Chat Service", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as {"error": ...}."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Reject malformed request bodies with 400 before any I/O."""
    messages = [
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "; ".join(messages)})


@app.post("/api/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    orchestrator: ChatOrchestrator = Depends(get_chat_orchestrator),
) -> ChatResponse:
    """
    Answer a question about the dataroom's documents.

    Args:
        request: Chat request.

    Returns:
        Answer text with citations.
    """
    start_time = time.time()
    chat_requests_total.inc()

    try:
        response = await orchestrator.handle(request.message)
    except ProviderUnavailable as e:
        logger.error(f"Chat failed, provider not configured: {str(e)}")
        chat_errors_total.labels(reason="provider_unavailable").inc()
        raise HTTPException(status_code=500, detail=str(e))
    except ProviderError as e:
        logger.error(f"Chat failed, provider error: {str(e)}")
        chat_errors_total.labels(reason="provider_error").inc()
        raise HTTPException(status_code=500, detail=GENERIC_CHAT_ERROR)
    except Exception as e:
        logger.exception(f"Chat failed: {str(e)}")
        chat_errors_total.labels(reason="internal").inc()
        raise HTTPException(status_code=500, detail=GENERIC_CHAT_ERROR)

    latency_seconds = time.time() - start_time
    chat_latency_seconds.observe(latency_seconds)
    logger.info(f"Chat processed in {latency_seconds * 1000:.2f}ms")
    return response


@app.get("/api/chat/messages", response_model=List[ChatMessage])
async def list_chat_messages(
    database: DatabaseService = Depends(get_database),
) -> List[ChatMessage]:
    """
    Get the chat history.

    Returns:
        Messages in creation order.
    """
    try:
        return await database.get_chat_messages()
    except DatabaseError as e:
        logger.error(f"Failed to fetch chat messages: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch chat messages")


@app.delete("/api/chat/messages", status_code=204)
async def clear_chat_messages(
    database: DatabaseService = Depends(get_database),
) -> None:
    """Clear the chat history."""
    try:
        await database.clear_chat_messages()
    except DatabaseError as e:
        logger.error(f"Failed to clear chat messages: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to clear chat messages")


@app.get("/api/documents", response_model=List[Document])
async def list_documents(
    database: DatabaseService = Depends(get_database),
) -> List[Document]:
    """
    List documents in store order.

    Returns:
        All documents.
    """
    try:
        return await database.get_all_documents()
    except DatabaseError as e:
        logger.error(f"Failed to list documents: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch documents")


@app.get("/api/documents/{document_id}", response_model=DocumentWithSections)
async def get_document(
    document_id: str,
    database: DatabaseService = Depends(get_database),
) -> DocumentWithSections:
    """
    Get a document with its sections.

    Args:
        document_id: Document UUID.

    Returns:
        Document details.
    """
    try:
        document = await database.get_document(document_id)
        if not document:
            raise HTTPException(status_code=404, detail="Document not found")
        sections = await database.get_document_sections(document_id)
    except DatabaseError as e:
        logger.error(f"Failed to get document: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch document")

    return DocumentWithSections(
        **document.model_dump(),
        sections=[SectionResponse.from_section(s) for s in sections],
    )


@app.post("/api/documents", response_model=Document, status_code=201)
async def create_document(
    document: DocumentCreate,
    database: DatabaseService = Depends(get_database),
) -> Document:
    """
    Create a new document.

    Args:
        document: Document data.

    Returns:
        Created document.
    """
    try:
        return await database.create_document(
            title=document.title, content=document.content, order=document.order
        )
    except DatabaseError as e:
        logger.error(f"Failed to create document: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create document")


@app.patch("/api/documents/{document_id}", response_model=Document)
async def update_document(
    document_id: str,
    document: DocumentUpdate,
    database: DatabaseService = Depends(get_database),
) -> Document:
    """
    Update a document.

    Args:
        document_id: Document UUID.
        document: Fields to change.

    Returns:
        Updated document.
    """
    if document.title is None and document.content is None and document.order is None:
        raise HTTPException(status_code=400, detail="No fields to update")

    try:
        updated = await database.update_document(
            document_id=document_id,
            title=document.title,
            content=document.content,
            order=document.order,
        )
    except DatabaseError as e:
        logger.error(f"Failed to update document: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update document")

    if not updated:
        raise HTTPException(status_code=404, detail="Document not found")
    return updated


@app.delete("/api/documents/{document_id}", status_code=204)
async def delete_document(
    document_id: str,
    database: DatabaseService = Depends(get_database),
) -> None:
    """
    Delete a document and its sections.

    Args:
        document_id: Document UUID.
    """
    try:
        deleted = await database.delete_document(document_id)
    except DatabaseError as e:
        logger.error(f"Failed to delete document: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to delete document")

    if not deleted:
        raise HTTPException(status_code=404, detail="Document not found")


@app.get("/api/documents/{document_id}/sections", response_model=List[SectionResponse])
async def list_sections(
    document_id: str,
    database: DatabaseService = Depends(get_database),
) -> List[SectionResponse]:
    """
    List the sections of a document.

    Args:
        document_id: Document UUID.

    Returns:
        Sections without their embedding vectors.
    """
    try:
        sections = await database.get_document_sections(document_id)
    except DatabaseError as e:
        logger.error(f"Failed to fetch sections: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch sections")
    return [SectionResponse.from_section(s) for s in sections]


@app.post("/api/documents/{document_id}/embed", response_model=EmbedResponse)
async def embed_document(
    document_id: str,
    indexer: SectionIndexer = Depends(get_section_indexer),
) -> EmbedResponse:
    """
    Embed a document's content into its section.

    Args:
        document_id: Document UUID.

    Returns:
        Embedding outcome.
    """
    try:
        section = await indexer.embed_document(document_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found")
    except ProviderUnavailable as e:
        logger.error(f"Embedding failed, provider not configured: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
    except (ProviderError, DatabaseError) as e:
        logger.error(f"Failed to embed document {document_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to embed document")

    if section is None:
        return EmbedResponse(success=True, message="Document has no content to embed")
    return EmbedResponse(success=True, message="Document embedded successfully")


@app.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/health")
async def health() -> dict:
    """
    Health check endpoint with dependency verification.

    Returns:
        Health status with service dependencies.
    """
    result = await check_all_dependencies(services.database, services.openai_client)
    return {"service": settings.service_name, **result}


@app.get("/ready")
async def readiness() -> dict:
    """
    Readiness check endpoint.

    Returns:
        Readiness status.
    """
    result = await check_readiness(services.database)
    return {"service": settings.service_name, **result}
