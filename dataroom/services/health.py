"""Health check service for dependency verification."""

import time
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from dataroom.services.database import DatabaseService


async def check_postgres(database: DatabaseService) -> Dict[str, Any]:
    """
    Check PostgreSQL connectivity.

    Args:
        database: DatabaseService instance.

    Returns:
        Health status dictionary.
    """
    try:
        if not database.pool:
            return {"status": "unhealthy", "error": "Not connected", "latency_ms": 0}

        start_time = time.time()
        async with database.pool.acquire() as conn:
            await conn.execute("SELECT 1")
        latency_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(latency_ms, 2),
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e),
            "latency_ms": 0,
        }


async def check_openai(client: Optional[AsyncOpenAI]) -> Dict[str, Any]:
    """
    Check OpenAI API connectivity.

    Args:
        client: Shared OpenAI client, or None when unconfigured.

    Returns:
        Health status dictionary.
    """
    if client is None:
        return {"status": "not_configured", "error": "API key not set"}

    try:
        start_time = time.time()
        await client.models.list()
        latency_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(latency_ms, 2),
        }
    except Exception as e:
        error_msg = str(e).lower()
        if "api key" in error_msg or "authentication" in error_msg:
            return {"status": "unhealthy", "error": "Invalid API key"}
        return {
            "status": "unhealthy",
            "error": str(e),
            "latency_ms": 0,
        }
