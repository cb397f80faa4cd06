from promptseg.segmentation.decoder import MaskDecoder, MaskPrediction  # NOQA
from promptseg.segmentation.prompts import (  # NOQA
    EncodedPrompt,
    PointLabel,
    PromptPoint,
    build_mask_input,
    encode_prompts,
    points_from_lists,
)
from promptseg.segmentation.resample import logits_to_overlay, resample_logits  # NOQA
from promptseg.segmentation.selection import select_best_mask  # NOQA
