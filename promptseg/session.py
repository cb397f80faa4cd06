"""Interactive prompt collection around a :class:`MaskDecoder`.

A session caches one image embedding, accumulates clicks and owns the
current overlay. A successful ``segment`` hands the previous overlay to the
``release`` callback before replacing it; a failed one leaves the previous
overlay in place.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

import numpy as np

from promptseg.errors import InvalidPromptError
from promptseg.segmentation.decoder import MaskDecoder, MaskPrediction
from promptseg.segmentation.prompts import PointLabel, PromptPoint
from promptseg.utils.logger import logger


def normalize_click(
    x: float, y: float, width: float, height: float
) -> Optional[Tuple[float, float]]:
    """Map a pixel click inside a ``width x height`` view to [0, 1] coordinates.

    Returns ``None`` for clicks outside the view.
    """
    if width <= 0 or height <= 0:
        return None
    nx = x / width
    ny = y / height
    if nx < 0 or nx > 1 or ny < 0 or ny > 1:
        return None
    return nx, ny


class PromptSession:
    def __init__(
        self,
        decoder: MaskDecoder,
        embedding: Optional[np.ndarray] = None,
        release: Optional[Callable[[MaskPrediction], None]] = None,
    ):
        self.decoder = decoder
        self.release = release
        self._embedding = None
        self._points: List[PromptPoint] = []
        self.prediction: Optional[MaskPrediction] = None
        if embedding is not None:
            self.set_embedding(embedding)

    @property
    def embedding(self):
        return self._embedding

    @property
    def points(self) -> Tuple[PromptPoint, ...]:
        return tuple(self._points)

    def set_embedding(self, embedding: np.ndarray) -> None:
        """Cache the embedding of a new image; clears collected points."""
        self._embedding = embedding
        self._points.clear()

    def add_point(self, x: float, y: float, label=PointLabel.FOREGROUND) -> PromptPoint:
        point = PromptPoint(float(x), float(y), label)
        self._points.append(point)
        logger.debug("Point added: (%.3f, %.3f), label=%d", point.x, point.y, point.label)
        return point

    def add_click(self, x, y, width, height, label=PointLabel.FOREGROUND):
        """Add a pixel-space click; clicks outside the view are ignored."""
        normalized = normalize_click(x, y, width, height)
        if normalized is None:
            return None
        return self.add_point(normalized[0], normalized[1], label)

    def reset(self) -> None:
        self._points.clear()

    def segment(self, width: int, height: int) -> MaskPrediction:
        if self._embedding is None:
            raise RuntimeError("No image embedding set; call set_embedding first.")
        if not self._points:
            raise InvalidPromptError("At least one prompt point is required.")

        prediction = self.decoder.decode(self._embedding, self._points, width, height)

        previous = self.prediction
        self.prediction = prediction
        if previous is not None and self.release is not None:
            self.release(previous)
        logger.info(
            "Segmentation done (%d prompt points), mask %d IoU %.3f",
            len(self._points), prediction.index, prediction.score)
        return prediction
