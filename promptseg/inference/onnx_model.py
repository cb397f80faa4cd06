import os
from typing import Dict, List, Protocol

import numpy as np

from promptseg.utils.logger import logger


class InferenceEngine(Protocol):
    """Anything that maps a named tensor set to a named tensor set."""

    def run(self, inputs: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        ...


def _require_onnxruntime():
    try:
        import onnxruntime as ort
    except ModuleNotFoundError as exc:
        raise ModuleNotFoundError(
            "Dependency 'onnxruntime' is required to run ONNX models. "
            "Install it with: pip install onnxruntime"
        ) from exc
    return ort


def select_providers(available: List[str], device_type: str = "cpu") -> List[str]:
    """Pick execution providers for ``device_type`` from what is installed.

    TensorRT is never selected; GPU falls back to CPU when CUDA is missing.
    """
    device_type = device_type.lower()
    if device_type in ("gpu", "cuda") and "CUDAExecutionProvider" in available:
        return ["CUDAExecutionProvider", "CPUExecutionProvider"]
    return ["CPUExecutionProvider"]


class OnnxInferenceEngine:
    """
    An :class:`InferenceEngine` backed by an onnxruntime session.

    Parameters:
    - model_path (str): Path to the ONNX model file.
    - device_type (str, optional): 'cpu' (default) or 'gpu'.

    Outputs are returned keyed by the graph's output node names. A single
    instance must not be run from several threads at once.
    """

    def __init__(self, model_path: str, device_type: str = "cpu"):
        if not os.path.isfile(model_path):
            raise FileNotFoundError(f"Model file does not exist: {model_path}")
        ort = _require_onnxruntime()
        self.model_path = model_path
        self.sess_opts = ort.SessionOptions()
        self.sess_opts.graph_optimization_level = (
            ort.GraphOptimizationLevel.ORT_ENABLE_ALL
        )
        self.sess_opts.inter_op_num_threads = int(os.environ.get("OMP_NUM_THREADS", 1))
        self.providers = select_providers(
            ort.get_available_providers(), device_type)

        self.ort_session = ort.InferenceSession(
            model_path,
            providers=self.providers,
            sess_options=self.sess_opts,
        )
        logger.info("Loaded %s with providers %s", model_path, self.providers)
        self.log_session_info()

    def log_session_info(self):
        """Log the name, shape and element type of every input/output node."""
        name = os.path.basename(self.model_path)
        for node in self.ort_session.get_inputs():
            logger.info("[%s] input  %s: %s %s", name, node.name, node.shape, node.type)
        for node in self.ort_session.get_outputs():
            logger.info("[%s] output %s: %s %s", name, node.name, node.shape, node.type)

    def get_input_names(self):
        return [node.name for node in self.ort_session.get_inputs()]

    def get_output_names(self):
        """
        Get the names of the output nodes.

        Returns:
        - list: List of output node names.
        """
        return [out.name for out in self.ort_session.get_outputs()]

    def run(self, inputs):
        if self.ort_session is None:
            raise RuntimeError("Inference session has been closed.")
        outputs = self.ort_session.run(None, inputs)
        return dict(zip(self.get_output_names(), outputs))

    def close(self):
        self.ort_session = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
