"""Point prompts and the fixed-shape prompt tensors fed to the mask decoder.

The decoder graph takes ``point_coords`` of shape ``[1, N + 1, 2]`` in pixel
space of the square model input and ``point_labels`` of shape ``[1, N + 1]``.
The extra entry is a padding point at ``(0, 0)`` with label ``-1`` that the
exported graph requires whenever no box prompt is given.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from promptseg.errors import InvalidPromptError

IMAGE_SIZE = 1024
MASK_INPUT_SIZE = 256
PADDING_LABEL = -1.0


class PointLabel(enum.IntEnum):
    BACKGROUND = 0
    FOREGROUND = 1


@dataclass(frozen=True)
class PromptPoint:
    """A click in normalized image coordinates, ``x`` and ``y`` in [0, 1]."""

    x: float
    y: float
    label: PointLabel = PointLabel.FOREGROUND

    def __post_init__(self):
        try:
            label = PointLabel(int(self.label))
        except (TypeError, ValueError) as exc:
            raise InvalidPromptError(
                f"Point label must be 0 (background) or 1 (foreground), got {self.label!r}."
            ) from exc
        # NaN fails the range check too
        if not (0.0 <= self.x <= 1.0 and 0.0 <= self.y <= 1.0):
            raise InvalidPromptError(
                f"Point coordinates must be normalized to [0, 1], got ({self.x}, {self.y})."
            )
        object.__setattr__(self, "label", label)


@dataclass
class EncodedPrompt:
    coords: np.ndarray  # float32 [1, N + 1, 2]
    labels: np.ndarray  # float32 [1, N + 1]

    def __len__(self) -> int:
        return self.labels.shape[1]


def points_from_lists(
    points: Sequence[Sequence[float]], labels: Sequence[int]
) -> List[PromptPoint]:
    """Build prompt points from parallel ``(x, y)`` and label sequences."""
    if len(points) != len(labels):
        raise InvalidPromptError(
            f"Got {len(points)} points but {len(labels)} labels."
        )
    prompt = []
    for (x, y), label in zip(points, labels):
        prompt.append(PromptPoint(float(x), float(y), label))
    return prompt


def encode_prompts(
    points: Iterable[PromptPoint], image_size: int = IMAGE_SIZE
) -> EncodedPrompt:
    """Scale normalized points to model pixels and append the padding point.

    Raises:
        InvalidPromptError: if ``points`` is empty.
    """
    points = list(points)
    if not points:
        raise InvalidPromptError("At least one prompt point is required.")

    num_points = len(points)
    coords = np.zeros((1, num_points + 1, 2), dtype=np.float32)
    labels = np.empty((1, num_points + 1), dtype=np.float32)
    for i, point in enumerate(points):
        coords[0, i, 0] = point.x * image_size
        coords[0, i, 1] = point.y * image_size
        labels[0, i] = float(point.label)
    # padding point stays at the origin
    labels[0, num_points] = PADDING_LABEL
    return EncodedPrompt(coords=coords, labels=labels)


def build_mask_input(mask_size: int = MASK_INPUT_SIZE) -> Tuple[np.ndarray, np.ndarray]:
    """Return a zeroed ``mask_input`` and a ``has_mask_input`` flag of 0.

    Together they tell the decoder that no previous low-res mask is given.
    """
    mask_input = np.zeros((1, 1, mask_size, mask_size), dtype=np.float32)
    has_mask_input = np.zeros(1, dtype=np.float32)
    return mask_input, has_mask_input
