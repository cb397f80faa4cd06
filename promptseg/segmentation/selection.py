from typing import Tuple

import numpy as np

from promptseg.errors import ShapeMismatchError


def select_best_mask(scores) -> Tuple[int, float]:
    """Return ``(index, score)`` of the highest predicted IoU.

    Ties keep the first (lowest) index.
    """
    scores = np.asarray(scores, dtype=np.float32).reshape(-1)
    if scores.size == 0:
        raise ShapeMismatchError("Cannot select a mask from an empty score array.")
    best = 0
    for i in range(1, scores.size):
        if scores[i] > scores[best]:
            best = i
    return best, float(scores[best])


def extract_mask(masks: np.ndarray, index: int) -> np.ndarray:
    """Copy one ``[H, W]`` logit plane out of a ``[1, K, H, W]`` mask tensor."""
    return np.array(masks[0, index], dtype=np.float32, copy=True)
