"""Cosine similarity ranking of context candidates."""

import math
from typing import List, Sequence

from dataroom.models.document import ContextCandidate, RankedContext


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine of the angle between two vectors.

    A zero-norm vector on either side scores 0.0.

    Raises:
        ValueError: If the vectors differ in length.
    """
    if len(a) != len(b):
        raise ValueError(
            f"Vector length mismatch: {len(a)} != {len(b)}")

    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    score = dot / (norm_a * norm_b)
    # Clamp floating point drift so scores stay in [-1, 1]
    return max(-1.0, min(1.0, score))


def rank_candidates(
    query_embedding: Sequence[float],
    candidates: List[ContextCandidate],
    top_k: int,
) -> List[RankedContext]:
    """
    Score candidates against a query and keep the best `top_k`.

    Args:
        query_embedding: Query vector.
        candidates: Candidates, each carrying an embedding.
        top_k: Maximum number of results.

    Returns:
        Ranked contexts by descending score; ties keep input order.
    """
    if top_k <= 0:
        return []

    scored = []
    for candidate in candidates:
        if candidate.embedding is None:
            raise ValueError(
                f"Candidate {candidate.section_id or candidate.doc_id} has no embedding")
        score = cosine_similarity(query_embedding, candidate.embedding)
        scored.append(
            RankedContext.model_validate({**candidate.model_dump(), "score": score}))

    # sorted() is stable, so equal scores stay in input order
    ranked = sorted(scored, key=lambda item: item.score, reverse=True)
    return ranked[:top_k]
