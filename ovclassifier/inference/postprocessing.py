"""
Postprocessing of model output scores.
"""

from typing import List, Sequence, Tuple

import numpy as np


def best_class(scores: Sequence[float]) -> int:
    """Index of the highest score.

    Ties resolve to the lowest index, as in a left-to-right max scan.

    Raises:
        ValueError: If ``scores`` is empty
    """
    scores = np.asarray(scores).reshape(-1)
    if scores.size == 0:
        raise ValueError("Cannot pick a class from an empty score vector")
    return int(np.argmax(scores))


def top_k(scores: Sequence[float], k: int = 5) -> List[Tuple[int, float]]:
    """Top-k ``(class_index, score)`` pairs, best first.

    Equal scores keep ascending index order, so ``top_k(s, 1)[0][0]``
    always equals ``best_class(s)``.
    """
    scores = np.asarray(scores, dtype=np.float64).reshape(-1)
    k = max(0, min(k, scores.size))
    # Stable sort on the negated scores keeps ties in index order
    order = np.argsort(-scores, kind="stable")[:k]
    return [(int(i), float(scores[i])) for i in order]
