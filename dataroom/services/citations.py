"""Extraction of the trailing citation block from model output."""

import json
import logging
from typing import List, Tuple

from pydantic import TypeAdapter, ValidationError

from dataroom.core.exceptions import CitationParseFailure
from dataroom.models.chat import Citation, CitationPayload
from dataroom.monitoring.metrics import citation_parse_failures_total

logger = logging.getLogger(__name__)

CITATION_MARKER = "CITATIONS:"

_payload_adapter = TypeAdapter(List[CitationPayload])


def _find_marker(raw: str) -> int:
    """Offset of the marker on the last line that starts with it, or -1."""
    offset = len(raw)
    for line in reversed(raw.splitlines(keepends=True)):
        offset -= len(line)
        stripped = line.lstrip()
        if stripped.startswith(CITATION_MARKER):
            return offset + (len(line) - len(stripped))
    return -1


def decode_citations(payload: str) -> List[Citation]:
    """
    Decode a citation JSON array.

    Entries whose index is missing or below 1 get their 1-based
    position in the array.

    Raises:
        CitationParseFailure: If the payload is not a valid citation array.
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise CitationParseFailure(f"Citation block is not valid JSON: {str(e)}") from e

    try:
        entries = _payload_adapter.validate_python(data)
    except ValidationError as e:
        raise CitationParseFailure(f"Citation block has unexpected shape: {str(e)}") from e

    return [
        Citation(
            index=entry.index if entry.index is not None and entry.index >= 1 else position,
            doc_id=entry.docId,
            section_id=entry.sectionId,
            doc_title=entry.docTitle,
            section_title=entry.sectionTitle,
        )
        for position, entry in enumerate(entries, start=1)
    ]


def extract_citations(raw: str) -> Tuple[str, List[Citation]]:
    """
    Split raw model output into answer text and citations.

    The block is recognized only on the last line starting with
    `CITATIONS:`. When it is missing or malformed the raw text is
    returned unchanged with no citations.

    Args:
        raw: Full model output.

    Returns:
        Tuple of (answer text, citations).
    """
    start = _find_marker(raw)
    if start < 0:
        return raw, []

    payload = raw[start + len(CITATION_MARKER):].strip()
    try:
        citations = decode_citations(payload)
    except CitationParseFailure as e:
        citation_parse_failures_total.inc()
        logger.warning(f"Dropping citations: {str(e)}")
        return raw, []

    return raw[:start].strip(), citations
