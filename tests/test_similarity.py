import pytest

from cardreco.domain.services.similarity import cosine_similarity, jaccard_similarity


@pytest.mark.parametrize("v", [(1.0, 2.0, 3.0), (0.5, 0.0, 7.0, 1.0), (3.0,)])
def test_cosine_of_vector_with_itself_is_one(v):
    assert cosine_similarity(v, v) == pytest.approx(1.0)


def test_cosine_with_zero_vector_is_zero():
    assert cosine_similarity((0, 0, 0), (1, 2, 3)) == 0.0
    assert cosine_similarity((1, 2, 3), (0, 0, 0)) == 0.0


def test_cosine_opposite_and_orthogonal():
    assert cosine_similarity((1, 0), (-1, 0)) == pytest.approx(-1.0)
    assert cosine_similarity((1, 0), (0, 5)) == pytest.approx(0.0)


def test_cosine_length_mismatch_raises():
    with pytest.raises(ValueError):
        cosine_similarity((1, 2), (1, 2, 3))


def test_jaccard_identity_and_empty():
    assert jaccard_similarity({1, 2, 3}, {1, 2, 3}) == 1.0
    assert jaccard_similarity(set(), set()) == 0.0


def test_jaccard_partial_overlap():
    assert jaccard_similarity({1, 2}, {2, 3}) == pytest.approx(1 / 3)
