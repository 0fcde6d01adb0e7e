from __future__ import annotations
from typing import AbstractSet, Hashable, Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two equal-length vectors; 0 if either has zero norm."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"vector shapes differ: {va.shape} vs {vb.shape}")

    na = np.linalg.norm(va)
    nb = np.linalg.norm(vb)
    if na == 0 or nb == 0:
        return 0.0
    # clip guards against 1.0000000002 from float rounding
    return float(np.clip(np.dot(va, vb) / (na * nb), -1.0, 1.0))


def jaccard_similarity(a: AbstractSet[Hashable], b: AbstractSet[Hashable]) -> float:
    union = len(a | b)
    if union == 0:
        return 0.0
    return len(a & b) / union
