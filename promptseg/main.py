import argparse
import sys

import cv2
import numpy as np

from promptseg.configs import load_config
from promptseg.errors import PromptSegError
from promptseg.inference.onnx_model import OnnxInferenceEngine
from promptseg.segmentation.decoder import MaskDecoder
from promptseg.segmentation.encoder import ImageEncoder, placeholder_embedding
from promptseg.segmentation.prompts import PointLabel, PromptPoint
from promptseg.utils.logger import logger
from promptseg.version import __version__


def parse_point(text):
    """Parse ``x,y`` or ``x,y,label`` with normalized coordinates."""
    parts = [p.strip() for p in text.split(",")]
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(
            f"Expected 'x,y' or 'x,y,label', got '{text}'")
    try:
        x, y = float(parts[0]), float(parts[1])
        label = PointLabel(int(parts[2])) if len(parts) == 3 else PointLabel.FOREGROUND
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid point '{text}': {exc}")
    if not (0.0 <= x <= 1.0 and 0.0 <= y <= 1.0):
        raise argparse.ArgumentTypeError(
            f"Point coordinates must be normalized to [0, 1], got '{text}'")
    return PromptPoint(x, y, label)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="promptseg",
        description="Decode a point-prompted mask overlay with a SAM-style ONNX decoder.")
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")
    parser.add_argument("--decoder", type=str, required=True,
                        help="Path to the mask decoder onnx model.")
    parser.add_argument("--encoder", type=str, default=None,
                        help="Path to the image encoder onnx model.")
    parser.add_argument("--embedding", type=str, default=None,
                        help="Precomputed embedding saved with numpy.save.")
    parser.add_argument("--image", type=str, default=None,
                        help="Input image; sets the default output size.")
    parser.add_argument("--point", type=parse_point, action="append",
                        default=[], dest="points",
                        help="Normalized prompt point x,y[,label]; repeatable. "
                             "label 1=foreground (default), 0=background.")
    parser.add_argument("--width", type=int, default=None)
    parser.add_argument("--height", type=int, default=None)
    parser.add_argument("--output", type=str, default="mask_overlay.png")
    parser.add_argument("--config", type=str, default=None,
                        help="YAML file overriding the default config.")
    return parser


def overlay_to_bgra(overlay):
    rgba = np.clip(overlay * 255.0 + 0.5, 0, 255).astype(np.uint8)
    return cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA)


def resolve_embedding(args, config, image):
    if args.embedding is not None:
        return np.load(args.embedding)
    if args.encoder is not None:
        if image is None:
            raise ValueError("--encoder requires --image")
        with OnnxInferenceEngine(args.encoder, config["device"]) as engine:
            return ImageEncoder.from_config(engine, config)(image)
    return placeholder_embedding(shape=config["embedding_shape"])


def main(argv=None):
    args = build_parser().parse_args(argv)
    if not args.points:
        logger.error("At least one --point is required.")
        return 2
    config = load_config(args.config)

    image = None
    if args.image is not None:
        bgr = cv2.imread(args.image)
        if bgr is None:
            logger.error("Cannot read image: %s", args.image)
            return 1
        image = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)

    if image is not None:
        default_h, default_w = image.shape[:2]
    else:
        default_h = default_w = 512
    width = args.width or default_w
    height = args.height or default_h

    try:
        embedding = resolve_embedding(args, config, image)
        with OnnxInferenceEngine(args.decoder, config["device"]) as engine:
            decoder = MaskDecoder.from_config(engine, config)
            prediction = decoder.decode(embedding, args.points, width, height)
    except (PromptSegError, ValueError, FileNotFoundError) as exc:
        logger.error("Segmentation failed: %s", exc)
        return 1

    try:
        written = cv2.imwrite(args.output, overlay_to_bgra(prediction.overlay))
    except cv2.error as exc:
        logger.error("Cannot write overlay to %s: %s", args.output, exc)
        return 1
    if not written:
        logger.error("Cannot write overlay to %s", args.output)
        return 1
    logger.info("Best mask index: %d, IoU: %.3f -> %s",
                prediction.index, prediction.score, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
