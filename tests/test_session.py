from __future__ import annotations

import numpy as np
import pytest

from promptseg.errors import InvalidPromptError, ShapeMismatchError
from promptseg.segmentation.decoder import MaskDecoder
from promptseg.segmentation.prompts import PointLabel
from promptseg.session import PromptSession, normalize_click


class _FakeEngine:
    def __init__(self) -> None:
        self.calls = 0
        self.fail = False

    def run(self, inputs):
        self.calls += 1
        if self.fail:
            # an undersized mask plane trips the shape contract
            return {
                "masks": np.zeros((1, 4, 8, 8), dtype=np.float32),
                "iou_predictions": np.zeros((1, 4), dtype=np.float32),
            }
        masks = np.ones((1, 4, 256, 256), dtype=np.float32)
        scores = np.array([[0.1, 0.2, 0.3, 0.4]], dtype=np.float32)
        return {"masks": masks, "iou_predictions": scores}


def _session(release=None):
    engine = _FakeEngine()
    session = PromptSession(
        MaskDecoder(engine),
        embedding=np.zeros((1, 256, 64, 64), dtype=np.float32),
        release=release,
    )
    return session, engine


def test_normalize_click_maps_and_filters() -> None:
    assert normalize_click(50, 25, 100, 50) == (0.5, 0.5)
    assert normalize_click(0, 50, 100, 50) == (0.0, 1.0)
    assert normalize_click(101, 10, 100, 50) is None
    assert normalize_click(-1, 10, 100, 50) is None
    assert normalize_click(10, 10, 0, 50) is None


def test_segment_requires_points_and_embedding() -> None:
    session, engine = _session()
    with pytest.raises(InvalidPromptError):
        session.segment(32, 32)
    assert engine.calls == 0

    empty = PromptSession(MaskDecoder(_FakeEngine()))
    empty.add_point(0.5, 0.5)
    with pytest.raises(RuntimeError, match="embedding"):
        empty.segment(32, 32)


def test_overlay_is_replaced_and_previous_released() -> None:
    released = []
    session, engine = _session(release=released.append)
    session.add_point(0.5, 0.5)

    first = session.segment(16, 16)
    assert session.prediction is first
    assert released == []

    session.add_point(0.2, 0.8, PointLabel.BACKGROUND)
    second = session.segment(16, 16)

    assert session.prediction is second
    assert released == [first]
    assert second.index == 3
    assert engine.calls == 2


def test_failed_segment_keeps_previous_overlay() -> None:
    released = []
    session, engine = _session(release=released.append)
    session.add_point(0.5, 0.5)
    first = session.segment(16, 16)

    engine.fail = True
    with pytest.raises(ShapeMismatchError):
        session.segment(16, 16)

    assert session.prediction is first
    assert released == []


def test_clicks_and_reset() -> None:
    session, _ = _session()

    assert session.add_click(10, 10, 20, 20) is not None
    assert session.add_click(30, 10, 20, 20) is None
    assert len(session.points) == 1
    assert session.points[0].label == PointLabel.FOREGROUND

    session.reset()
    assert session.points == ()


def test_new_embedding_clears_points() -> None:
    session, _ = _session()
    session.add_point(0.1, 0.1)

    session.set_embedding(np.ones((1, 256, 64, 64), dtype=np.float32))

    assert session.points == ()


def test_add_point_validates_label_and_range() -> None:
    session, engine = _session()

    with pytest.raises(InvalidPromptError, match="label"):
        session.add_point(0.5, 0.5, 2)
    with pytest.raises(InvalidPromptError, match="normalized"):
        session.add_point(1.5, 0.5)

    assert session.points == ()
    assert engine.calls == 0
