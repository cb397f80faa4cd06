"""Image embedding helpers for the mask decoder.

The decoder only needs a ``[1, 256, 64, 64]`` embedding; these helpers are
one way to get it. ``ImageEncoder`` runs an exported image encoder through
any :class:`InferenceEngine`, and ``placeholder_embedding`` produces
deterministic noise for exercising the pipeline without an encoder.
"""

from typing import Sequence

import cv2
import numpy as np

from promptseg.errors import MissingOutputError, ShapeMismatchError
from promptseg.inference.onnx_model import InferenceEngine
from promptseg.utils.logger import logger

PIXEL_MEAN = np.array([0.485, 0.456, 0.406], dtype=np.float32)
PIXEL_STD = np.array([0.229, 0.224, 0.225], dtype=np.float32)
EMBEDDING_SHAPE = (1, 256, 64, 64)


def preprocess_image(image: np.ndarray, image_size: int = 1024) -> np.ndarray:
    """
    Convert an RGB ``uint8`` image into the encoder input tensor.

    The image is stretched to ``image_size`` x ``image_size``, scaled to
    [0, 1] and normalized with ImageNet statistics.

    Returns:
        float32 array of shape ``[1, 3, image_size, image_size]``.
    """
    if image.ndim == 2:
        image = np.repeat(image[..., None], 3, axis=-1)
    elif image.ndim == 3 and image.shape[-1] == 4:
        image = image[..., :3]
    if image.ndim != 3 or image.shape[-1] != 3:
        raise ValueError(f"Expected an HxWx3 image, got shape {image.shape}")

    resized = cv2.resize(
        image, (image_size, image_size), interpolation=cv2.INTER_LINEAR)
    x = resized.astype(np.float32) / 255.0
    x = (x - PIXEL_MEAN) / PIXEL_STD
    return np.ascontiguousarray(x.transpose(2, 0, 1)[None])


def placeholder_embedding(
    seed: int = 42, scale: float = 0.1, shape: Sequence[int] = EMBEDDING_SHAPE
) -> np.ndarray:
    """Uniform noise in ``[0, scale)``; masks decoded from it are meaningless."""
    logger.warning(
        "No image encoder available, using a random embedding. "
        "Decoded masks only exercise the pipeline.")
    rng = np.random.default_rng(seed)
    return (rng.random(tuple(shape), dtype=np.float32) * scale).astype(np.float32)


class ImageEncoder:
    """Compute image embeddings with an exported SAM-style image encoder."""

    def __init__(
        self,
        engine: InferenceEngine,
        input_name: str = "image",
        output_name: str = "image_embeddings",
        image_size: int = 1024,
        embedding_shape: Sequence[int] = EMBEDDING_SHAPE,
    ):
        self.engine = engine
        self.input_name = input_name
        self.output_name = output_name
        self.image_size = image_size
        self.embedding_shape = tuple(embedding_shape)

    @classmethod
    def from_config(cls, engine: InferenceEngine, config) -> "ImageEncoder":
        return cls(
            engine,
            input_name=config["encoder"]["input_name"],
            output_name=config["encoder"]["output_name"],
            image_size=config["image_size"],
            embedding_shape=config["embedding_shape"],
        )

    def __call__(self, image: np.ndarray) -> np.ndarray:
        tensor = preprocess_image(image, self.image_size)
        results = self.engine.run({self.input_name: tensor})
        if self.output_name not in results:
            raise MissingOutputError(self.output_name, results.keys())
        embedding = np.asarray(results[self.output_name], dtype=np.float32)
        if embedding.size != int(np.prod(self.embedding_shape)):
            raise ShapeMismatchError(
                f"Encoder output '{self.output_name}' has shape "
                f"{list(embedding.shape)}, expected {list(self.embedding_shape)}."
            )
        logger.info("Embedding computed, size=%d", embedding.size)
        return embedding.reshape(self.embedding_shape)
