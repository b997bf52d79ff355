"""
Ranking Utilities
=================

Vector similarity, consensus score aggregation and Maximal Marginal
Relevance selection.
"""

import math
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity between two 1-D vectors (0.0 if either is zero)"""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    na = np.linalg.norm(va)
    nb = np.linalg.norm(vb)
    if na == 0 or nb == 0:
        return 0.0
    return float(np.dot(va, vb) / (na * nb))


def consensus_decay(region_count: int) -> float:
    """
    Dampening for a score summed over `region_count` regions.

    1.0 for a single region, otherwise 1 / ln(region_count + e).
    """
    if region_count <= 1:
        return 1.0
    return 1.0 / math.log(region_count + math.e)


def aggregate_consensus(region_scores: Iterable[Iterable[Tuple[str, float]]]) -> Dict[str, float]:
    """
    Sum each name's scores over the regions it appears in and apply the decay
    for that number of regions.
    """
    totals: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    for scores in region_scores:
        for name, score in scores:
            totals[name] = totals.get(name, 0.0) + score
            counts[name] = counts.get(name, 0) + 1
    return {name: total * consensus_decay(counts[name]) for name, total in totals.items()}


def maximal_marginal_relevance(
    candidate_vectors: Sequence[Sequence[float]],
    doc_vector: Sequence[float],
    top_k: int,
    diversity: float,
    pool_size: int = 50,
) -> List[Tuple[int, float]]:
    """
    Greedy MMR selection.

    The pool is the `pool_size` candidates most similar to the document.
    Each round picks the pool candidate with the strictly greatest
    (1 - diversity) * sim_to_doc - diversity * max_sim_to_selected,
    ties going to the earlier pool entry.

    Returns:
        (candidate index, similarity to document) in selection order
    """
    if top_k <= 0 or len(candidate_vectors) == 0:
        return []

    candidates = np.asarray(candidate_vectors, dtype=np.float64)
    doc = np.asarray(doc_vector, dtype=np.float64)

    norms = np.linalg.norm(candidates, axis=1)
    norms[norms == 0] = 1.0
    unit = candidates / norms[:, None]
    doc_norm = np.linalg.norm(doc)
    doc_unit = doc / doc_norm if doc_norm else doc

    doc_sims = unit @ doc_unit
    pairwise = unit @ unit.T

    # Stable sort keeps first-seen order among equal similarities
    pool = [int(i) for i in np.argsort(-doc_sims, kind="stable")[:pool_size]]
    selected: List[int] = []

    while len(selected) < top_k and pool:
        best_idx = -1
        best_score = -math.inf
        for idx in pool:
            max_sim = max((float(pairwise[idx, s]) for s in selected), default=0.0)
            if max_sim < 0:
                max_sim = 0.0
            score = (1 - diversity) * float(doc_sims[idx]) - diversity * max_sim
            if score > best_score:
                best_score = score
                best_idx = idx
        if best_idx == -1:
            break
        selected.append(best_idx)
        pool.remove(best_idx)

    return [(idx, float(doc_sims[idx])) for idx in selected]
