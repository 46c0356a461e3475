"""Tests for cosine similarity ranking."""

import pytest

from dataroom.models.document import ContextCandidate, RankedContext
from dataroom.services.ranking import cosine_similarity, rank_candidates


def candidate(name: str, embedding) -> ContextCandidate:
    return ContextCandidate(
        doc_id=f"doc-{name}",
        doc_title=f"Doc {name}",
        section_id=f"sec-{name}",
        section_title=f"Section {name}",
        content=f"content {name}",
        embedding=embedding,
    )


class TestCosineSimilarity:
    """Tests for cosine_similarity."""

    def test_identical_vectors_score_one(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors_score_zero(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_opposite_vectors_score_minus_one(self):
        assert cosine_similarity([1.0, 1.0], [-1.0, -1.0]) == pytest.approx(-1.0)

    def test_zero_norm_scores_zero(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0
        assert cosine_similarity([1.0, 1.0], [0.0, 0.0]) == 0.0

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


class TestRankCandidates:
    """Tests for rank_candidates."""

    @pytest.fixture
    def candidates(self):
        return [
            candidate("a", [0.0, 1.0, 0.0]),
            candidate("b", [1.0, 0.0, 0.0]),
            candidate("c", [0.7, 0.7, 0.0]),
            candidate("d", [-1.0, 0.0, 0.0]),
        ]

    def test_sorted_by_descending_score(self, candidates):
        ranked = rank_candidates([1.0, 0.0, 0.0], candidates, top_k=4)

        assert [r.section_id for r in ranked] == ["sec-b", "sec-c", "sec-a", "sec-d"]
        scores = [r.score for r in ranked]
        assert scores == sorted(scores, reverse=True)
        assert all(isinstance(r, RankedContext) for r in ranked)

    @pytest.mark.parametrize("top_k,expected", [(0, 0), (1, 1), (3, 3), (4, 4), (10, 4)])
    def test_length_is_min_of_top_k_and_candidates(self, candidates, top_k, expected):
        assert len(rank_candidates([1.0, 0.0, 0.0], candidates, top_k)) == expected

    def test_ties_keep_input_order(self):
        tied = [candidate(name, [1.0, 0.0]) for name in ("x", "y", "z")]

        ranked = rank_candidates([1.0, 0.0], tied, top_k=3)

        assert [r.section_id for r in ranked] == ["sec-x", "sec-y", "sec-z"]

    @pytest.mark.parametrize("scale", [0.001, 2.0, 1000.0])
    def test_order_unchanged_under_positive_scaling(self, candidates, scale):
        query = [0.3, 0.9, 0.1]
        scaled = [
            candidate(c.section_id[4:], [x * scale for x in c.embedding])
            for c in candidates
        ]

        original_order = [r.section_id for r in rank_candidates(query, candidates, 4)]
        scaled_order = [r.section_id for r in rank_candidates(query, scaled, 4)]

        assert scaled_order == original_order

    def test_inputs_not_mutated(self, candidates):
        before = [c.model_dump() for c in candidates]

        rank_candidates([1.0, 0.0, 0.0], candidates, top_k=2)

        assert [c.model_dump() for c in candidates] == before

    def test_candidate_without_embedding_raises(self):
        with pytest.raises(ValueError):
            rank_candidates([1.0], [candidate("n", None)], top_k=1)

    def test_ranked_context_keeps_metadata(self, candidates):
        best = rank_candidates([1.0, 0.0, 0.0], candidates, top_k=1)[0]

        assert best.doc_id == "doc-b"
        assert best.doc_title == "Doc b"
        assert best.section_title == "Section b"
        assert best.content == "content b"
        assert best.score == pytest.approx(1.0)
