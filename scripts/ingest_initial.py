"""Script to seed the dataroom with sample documents and embed them."""

import asyncio
import logging

from dataroom.core.dependencies import services
from dataroom.core.exceptions import ProviderError, ProviderUnavailable

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_DOCUMENTS = [
    {
        "title": "Investment Memorandum",
        "content": "The company is raising a Series B round of $25M to expand into European markets. "
        "Proceeds fund sales hiring in Berlin and Paris and a second data center region. "
        "The round is led by an existing investor with a pro-rata commitment of $10M.",
    },
    {
        "title": "Financial Summary FY2024",
        "content": "Annual recurring revenue reached $18.4M, up 72% year over year. "
        "Gross margin was 78% and net revenue retention was 124%. "
        "Operating burn averaged $1.1M per month over the last two quarters.",
    },
    {
        "title": "Customer Contracts Overview",
        "content": "The top ten customers account for 41% of revenue. "
        "Standard contracts run 24 months with annual price escalators of 5%. "
        "Two enterprise agreements include change-of-control termination rights.",
    },
]


async def ingest_sample_documents(embed: bool = True) -> None:
    """
    Insert sample documents and optionally embed each one.

    Args:
        embed: Whether to compute section embeddings after inserting.
    """
    await services.initialize()
    try:
        for doc in SAMPLE_DOCUMENTS:
            created = await services.database.create_document(
                title=doc["title"], content=doc["content"])
            logger.info(f"Inserted document: {created.title}")

            if not embed:
                continue
            try:
                await services.section_indexer.embed_document(created.id)
            except (ProviderUnavailable, ProviderError) as e:
                logger.warning(
                    f"Skipping embeddings, chat will use whole-document fallback: {str(e)}")
                embed = False

        logger.info(f"Ingested {len(SAMPLE_DOCUMENTS)} documents")
    finally:
        await services.shutdown()


if __name__ == "__main__":
    asyncio.run(ingest_sample_documents())
