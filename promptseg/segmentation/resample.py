"""Upsample low-resolution mask logits into a display overlay.

Sampling follows the half-pixel-center convention: destination pixel ``d``
maps to source coordinate ``(d + 0.5) * src / dst - 0.5``. Neighbour indices
are clamped to the source plane and interpolation weights to ``[0, 1]``, so
the border replicates edge values instead of extrapolating. At identity
scale every sample lands exactly on a source pixel.
"""

from typing import Sequence, Tuple

import numpy as np

DEFAULT_COLOR = (0.2, 0.8, 1.0)


def _lerp(a, b, t):
    return a + (b - a) * t


def _sample_axis(src_len: int, dst_len: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    scale = src_len / dst_len
    pos = (np.arange(dst_len, dtype=np.float64) + 0.5) * scale - 0.5
    i0 = np.clip(np.floor(pos).astype(np.int64), 0, src_len - 1)
    i1 = np.clip(i0 + 1, 0, src_len - 1)
    frac = np.clip(pos - i0, 0.0, 1.0).astype(np.float32)
    return i0, i1, frac


def resample_logits(plane: np.ndarray, width: int, height: int) -> np.ndarray:
    """Bilinearly resample a ``[H, W]`` logit plane to ``[height, width]``.

    The result is in natural top-down row order.
    """
    plane = np.asarray(plane, dtype=np.float32)
    if plane.ndim != 2:
        raise ValueError(f"Expected a 2D logit plane, got shape {plane.shape}")
    if width <= 0 or height <= 0:
        raise ValueError(
            f"Output size must be positive, got {width}x{height}")
    src_h, src_w = plane.shape

    x0, x1, fx = _sample_axis(src_w, width)
    y0, y1, fy = _sample_axis(src_h, height)

    v00 = plane[np.ix_(y0, x0)]
    v10 = plane[np.ix_(y0, x1)]
    v01 = plane[np.ix_(y1, x0)]
    v11 = plane[np.ix_(y1, x1)]

    fx = fx[None, :]
    fy = fy[:, None]
    return _lerp(_lerp(v00, v10, fx), _lerp(v01, v11, fx), fy)


def logits_to_overlay(
    plane: np.ndarray,
    width: int,
    height: int,
    color: Sequence[float] = DEFAULT_COLOR,
    opacity: float = 1.0,
) -> np.ndarray:
    """Return a float32 ``[height, width, 4]`` RGBA overlay.

    Alpha is ``opacity`` where the interpolated logit is above zero and 0
    elsewhere; RGB is the fixed tint. Rows are flipped vertically, so row 0
    holds the bottom row of the top-down mask.
    """
    values = resample_logits(plane, width, height)
    overlay = np.empty((height, width, 4), dtype=np.float32)
    overlay[..., :3] = np.asarray(color, dtype=np.float32)
    overlay[..., 3] = np.where(values > 0.0, opacity, 0.0)
    return overlay[::-1].copy()
