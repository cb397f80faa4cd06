from __future__ import annotations

import argparse
from pathlib import Path

import cv2
import numpy as np
import pytest

from promptseg import main as cli
from promptseg.segmentation.prompts import PointLabel, PromptPoint


class _FakeOnnxEngine:
    created = []

    def __init__(self, model_path, device_type="cpu") -> None:
        self.model_path = model_path
        self.inputs = None
        _FakeOnnxEngine.created.append(self)

    def run(self, inputs):
        self.inputs = inputs
        masks = np.full((1, 4, 256, 256), -1.0, dtype=np.float32)
        masks[0, 1] = 1.0
        scores = np.array([[0.1, 0.8, 0.3, 0.2]], dtype=np.float32)
        return {"masks": masks, "iou_predictions": scores}

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_parse_point() -> None:
    assert cli.parse_point("0.5,0.25") == PromptPoint(0.5, 0.25, PointLabel.FOREGROUND)
    assert cli.parse_point("0.1, 0.2, 0") == PromptPoint(0.1, 0.2, PointLabel.BACKGROUND)
    for bad in ["0.5", "a,b", "0.5,0.5,7", "1.5,0.5"]:
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_point(bad)


def test_main_writes_overlay_png(tmp_path: Path, monkeypatch) -> None:
    _FakeOnnxEngine.created.clear()
    monkeypatch.setattr(cli, "OnnxInferenceEngine", _FakeOnnxEngine)
    embedding_path = tmp_path / "embedding.npy"
    np.save(embedding_path, np.zeros((1, 256, 64, 64), dtype=np.float32))
    output = tmp_path / "overlay.png"

    code = cli.main([
        "--decoder", "decoder.onnx",
        "--embedding", str(embedding_path),
        "--point", "0.5,0.5",
        "--width", "40",
        "--height", "30",
        "--output", str(output),
    ])

    assert code == 0
    written = cv2.imread(str(output), cv2.IMREAD_UNCHANGED)
    assert written.shape == (30, 40, 4)
    assert np.all(written[..., 3] == 255)
    assert len(_FakeOnnxEngine.created) == 1


def test_main_without_points_does_not_load_models(monkeypatch) -> None:
    _FakeOnnxEngine.created.clear()
    monkeypatch.setattr(cli, "OnnxInferenceEngine", _FakeOnnxEngine)

    assert cli.main(["--decoder", "decoder.onnx"]) == 2
    assert _FakeOnnxEngine.created == []


def test_main_fails_when_overlay_cannot_be_written(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(cli, "OnnxInferenceEngine", _FakeOnnxEngine)
    embedding_path = tmp_path / "embedding.npy"
    np.save(embedding_path, np.zeros((1, 256, 64, 64), dtype=np.float32))
    output = tmp_path / "no_such_dir" / "overlay.png"

    code = cli.main([
        "--decoder", "decoder.onnx",
        "--embedding", str(embedding_path),
        "--point", "0.5,0.5",
        "--width", "8",
        "--height", "8",
        "--output", str(output),
    ])

    assert code == 1
    assert not output.exists()
