"""Prompt-driven mask decoding against a SAM-style mask decoder graph.

``MaskDecoder`` owns no model weights. It builds the five input tensors the
exported decoder expects, hands them to an :class:`InferenceEngine`, picks
the candidate mask with the highest predicted IoU and upsamples it into an
RGBA overlay.

Every call returns a new :class:`MaskPrediction`. The caller owns the
returned overlay: releasing or replacing a previous overlay is the caller's
job, and the decoder never touches an overlay after returning it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence

import numpy as np

from promptseg.configs import get_default_config
from promptseg.errors import MissingOutputError, ShapeMismatchError
from promptseg.inference.onnx_model import InferenceEngine
from promptseg.segmentation.prompts import (
    PromptPoint,
    build_mask_input,
    encode_prompts,
)
from promptseg.segmentation.resample import logits_to_overlay
from promptseg.segmentation.selection import extract_mask, select_best_mask
from promptseg.utils.logger import logger

INPUT_ROLES = (
    "image_embeddings",
    "point_coords",
    "point_labels",
    "mask_input",
    "has_mask_input",
)
OUTPUT_ROLES = ("masks", "scores")


@dataclass
class MaskPrediction:
    overlay: np.ndarray  # float32 [height, width, 4], rows flipped
    index: int
    score: float
    logits: np.ndarray  # float32 [mask_size, mask_size]


def prepare_embedding(embedding, shape: Sequence[int]) -> np.ndarray:
    """View ``embedding`` as a float32 tensor of ``shape`` without mutating it.

    Accepts a flat buffer or an already shaped array with the same number of
    elements.
    """
    array = np.asarray(embedding, dtype=np.float32)
    expected = int(np.prod(shape))
    if array.size != expected:
        raise ShapeMismatchError(
            f"Image embedding must have {expected} values {tuple(shape)}, "
            f"got {array.size} {array.shape}."
        )
    return array.reshape(tuple(shape))


class MaskDecoder:
    """Turn point prompts plus an image embedding into a mask overlay."""

    def __init__(
        self,
        engine: InferenceEngine,
        input_names: Optional[Dict[str, str]] = None,
        output_names: Optional[Dict[str, str]] = None,
        image_size: int = 1024,
        mask_size: int = 256,
        embedding_shape: Sequence[int] = (1, 256, 64, 64),
        color: Sequence[float] = (0.2, 0.8, 1.0),
        opacity: float = 1.0,
    ):
        self.engine = engine
        self.input_names = {role: role for role in INPUT_ROLES}
        self.input_names.update(input_names or {})
        self.output_names = {"masks": "masks", "scores": "iou_predictions"}
        self.output_names.update(output_names or {})
        self.image_size = image_size
        self.mask_size = mask_size
        self.embedding_shape = tuple(embedding_shape)
        self.color = tuple(color)
        self.opacity = opacity

    @classmethod
    def from_config(cls, engine: InferenceEngine, config=None) -> "MaskDecoder":
        config = config or get_default_config()
        return cls(
            engine,
            input_names=config["decoder"]["input_names"],
            output_names=config["decoder"]["output_names"],
            image_size=config["image_size"],
            mask_size=config["mask_size"],
            embedding_shape=config["embedding_shape"],
            color=config["overlay"]["color"],
            opacity=config["overlay"]["opacity"],
        )

    def build_inputs(self, embedding, points: Iterable[PromptPoint]) -> Dict[str, np.ndarray]:
        """Build the named decoder input tensors.

        The prompt is validated first so an empty prompt fails before any
        tensor is allocated.
        """
        encoded = encode_prompts(points, image_size=self.image_size)
        embedding = prepare_embedding(embedding, self.embedding_shape)
        mask_input, has_mask_input = build_mask_input(self.mask_size)
        tensors = {
            "image_embeddings": embedding,
            "point_coords": encoded.coords,
            "point_labels": encoded.labels,
            "mask_input": mask_input,
            "has_mask_input": has_mask_input,
        }
        return {self.input_names[role]: value for role, value in tensors.items()}

    def _get_output(self, results: Dict[str, np.ndarray], role: str) -> np.ndarray:
        name = self.output_names[role]
        if name not in results:
            raise MissingOutputError(name, results.keys())
        return np.asarray(results[name], dtype=np.float32)

    def parse_outputs(self, results: Dict[str, np.ndarray]):
        """Return ``(masks [1, K, H, W], scores [K])`` checked against the contract."""
        masks = self._get_output(results, "masks")
        scores = self._get_output(results, "scores")

        expected_plane = (self.mask_size, self.mask_size)
        if masks.ndim != 4 or masks.shape[0] != 1 or masks.shape[2:] != expected_plane:
            raise ShapeMismatchError(
                f"Mask output must have shape [1, K, {self.mask_size}, "
                f"{self.mask_size}], got {list(masks.shape)}."
            )
        scores = scores.reshape(-1)
        if scores.size != masks.shape[1]:
            raise ShapeMismatchError(
                f"Got {scores.size} IoU scores for {masks.shape[1]} candidate masks."
            )
        return masks, scores

    def decode(self, embedding, points: Iterable[PromptPoint], width: int, height: int) -> MaskPrediction:
        """Run the decoder and return the best mask as a ``width x height`` overlay."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Output size must be positive, got {width}x{height}")
        inputs = self.build_inputs(embedding, points)
        results = self.engine.run(inputs)
        masks, scores = self.parse_outputs(results)

        index, score = select_best_mask(scores)
        logger.debug("Best mask index: %d, IoU: %.3f", index, score)
        logits = extract_mask(masks, index)
        overlay = logits_to_overlay(
            logits, width, height, color=self.color, opacity=self.opacity)
        return MaskPrediction(overlay=overlay, index=index, score=score, logits=logits)
