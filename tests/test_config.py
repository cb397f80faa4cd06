from __future__ import annotations

from pathlib import Path

import pytest

from promptseg.configs import get_default_config, load_config, update_dict


def test_default_config_matches_decoder_contract() -> None:
    config = get_default_config()

    assert config["image_size"] == 1024
    assert config["mask_size"] == 256
    assert config["embedding_shape"] == [1, 256, 64, 64]
    assert config["decoder"]["output_names"] == {
        "masks": "masks",
        "scores": "iou_predictions",
    }
    assert set(config["decoder"]["input_names"]) == {
        "image_embeddings", "point_coords", "point_labels",
        "mask_input", "has_mask_input",
    }


def test_load_config_merges_nested_sections(tmp_path: Path) -> None:
    user_file = tmp_path / "config.yaml"
    user_file.write_text(
        "decoder:\n"
        "  output_names:\n"
        "    scores: iou\n"
        "overlay:\n"
        "  opacity: 0.6\n"
    )

    config = load_config(user_file)

    assert config["decoder"]["output_names"] == {"masks": "masks", "scores": "iou"}
    assert config["overlay"]["opacity"] == 0.6
    assert config["overlay"]["color"] == [0.2, 0.8, 1.0]
    # defaults are not modified by loading a user file
    assert get_default_config()["overlay"]["opacity"] == 1.0


def test_unknown_keys_are_skipped() -> None:
    target = {"a": 1, "nested": {"b": 2}}
    update_dict(target, {"a": 3, "unknown": 4, "nested": {"b": 5, "c": 6}})
    assert target == {"a": 3, "nested": {"b": 5}}


@pytest.mark.parametrize(
    "overrides",
    [
        {"image_size": 0},
        {"mask_size": "256"},
        {"embedding_shape": [1, 256, 64]},
        {"overlay": {"opacity": 1.5}},
        {"overlay": {"color": [1.0, 0.0]}},
        {"device": "tpu"},
    ],
)
def test_invalid_values_are_rejected(overrides) -> None:
    with pytest.raises(ValueError):
        load_config(overrides=overrides)


def test_config_file_must_be_a_mapping(tmp_path: Path) -> None:
    user_file = tmp_path / "config.yaml"
    user_file.write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="mapping"):
        load_config(user_file)
