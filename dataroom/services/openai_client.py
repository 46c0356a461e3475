"""OpenAI client construction."""

import logging
from typing import Optional

from openai import AsyncOpenAI

from dataroom.core.config import Settings
from dataroom.core.exceptions import ProviderUnavailable

logger = logging.getLogger(__name__)

MISSING_API_KEY_MESSAGE = (
    "OpenAI API key not configured. "
    "Please set the OPENAI_API_KEY environment variable."
)


def create_openai_client(config: Settings) -> Optional[AsyncOpenAI]:
    """
    Build the shared OpenAI client.

    Args:
        config: Application settings.

    Returns:
        Client instance, or None when no API key is configured.
    """
    if not config.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; chat and embedding are disabled")
        return None
    return AsyncOpenAI(api_key=config.openai_api_key)


def require_client(client: Optional[AsyncOpenAI]) -> AsyncOpenAI:
    """Return the client or raise ProviderUnavailable if it was never built."""
    if client is None:
        raise ProviderUnavailable(MISSING_API_KEY_MESSAGE)
    return client
