"""Point-prompted mask decoding for SAM-style ONNX mask decoders."""

from promptseg.errors import (  # NOQA
    InvalidPromptError,
    MissingOutputError,
    PromptSegError,
    ShapeMismatchError,
)
from promptseg.segmentation.decoder import MaskDecoder, MaskPrediction  # NOQA
from promptseg.segmentation.prompts import PointLabel, PromptPoint  # NOQA
from promptseg.session import PromptSession  # NOQA
from promptseg.version import __version__  # NOQA
