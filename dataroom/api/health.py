"""Health check utilities."""

from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from dataroom.services.database import DatabaseService
from dataroom.services.health import check_openai, check_postgres


async def check_all_dependencies(
    database: DatabaseService,
    openai_client: Optional[AsyncOpenAI],
) -> Dict[str, Any]:
    """
    Check all service dependencies.

    An unconfigured OpenAI key degrades chat but does not mark the
    service unhealthy, since documents can still be managed.

    Args:
        database: Database service.
        openai_client: Shared OpenAI client.

    Returns:
        Dictionary with overall status and individual service statuses.
    """
    services = {}
    overall_status = "healthy"

    postgres_status = await check_postgres(database)
    services["postgres"] = postgres_status
    if postgres_status.get("status") != "healthy":
        overall_status = "unhealthy"

    openai_status = await check_openai(openai_client)
    services["openai"] = openai_status
    if openai_status.get("status") == "unhealthy":
        overall_status = "unhealthy"

    return {"status": overall_status, "services": services}


async def check_readiness(database: DatabaseService) -> Dict[str, Any]:
    """
    Check service readiness.

    Args:
        database: Database service.

    Returns:
        Readiness status dictionary.
    """
    postgres_status = await check_postgres(database)
    ready = postgres_status.get("status") == "healthy"
    return {"ready": ready, "postgres": ready}
