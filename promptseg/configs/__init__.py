import copy
import os.path as osp

import yaml

from promptseg.utils.logger import logger


here = osp.dirname(osp.abspath(__file__))


def update_dict(target_dict, new_dict, validate_item=None):
    for key, value in new_dict.items():
        if validate_item:
            validate_item(key, value)
        if key not in target_dict:
            logger.warning("Skipping unexpected key in config: {}".format(key))
            continue
        if isinstance(target_dict[key], dict) and isinstance(value, dict):
            update_dict(target_dict[key], value, validate_item=validate_item)
        else:
            target_dict[key] = value


# -----------------------------------------------------------------------------


def get_default_config():
    config_file = osp.join(here, "default_config.yaml")
    with open(config_file) as f:
        config = yaml.safe_load(f)
    return config


def _is_positive_int(value):
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_config_item(key, value):
    if key in ("image_size", "mask_size") and not _is_positive_int(value):
        raise ValueError(
            "Unexpected value for config key '{}': {}".format(key, value)
        )
    if key == "embedding_shape" and (
        not isinstance(value, (list, tuple))
        or len(value) != 4
        or not all(_is_positive_int(v) for v in value)
    ):
        raise ValueError(
            "Unexpected value for config key 'embedding_shape': {}".format(
                value
            )
        )
    if key == "device" and value not in ("cpu", "gpu", "cuda"):
        raise ValueError(
            "Unexpected value for config key 'device': {}".format(value)
        )
    if key == "opacity" and not (
        isinstance(value, (int, float)) and 0.0 <= value <= 1.0
    ):
        raise ValueError(
            "Unexpected value for config key 'opacity': {}".format(value)
        )
    if key == "color" and (
        not isinstance(value, (list, tuple))
        or len(value) != 3
        or not all(isinstance(c, (int, float)) for c in value)
    ):
        raise ValueError(
            "Unexpected value for config key 'color': {}".format(value)
        )


def load_config(config_file=None, overrides=None):
    """Return the default config merged with a YAML file and/or a dict.

    Unknown keys are skipped with a warning; nested sections are merged
    key by key so a user file only needs the values it changes.
    """
    config = copy.deepcopy(get_default_config())

    if config_file is not None:
        with open(config_file) as f:
            user_config = yaml.safe_load(f) or {}
        if not isinstance(user_config, dict):
            raise ValueError(
                "Config file must contain a mapping: {}".format(config_file)
            )
        update_dict(config, user_config, validate_item=validate_config_item)

    if overrides:
        update_dict(config, overrides, validate_item=validate_config_item)

    return config
