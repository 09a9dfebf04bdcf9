"""
ONNX Runtime model backend.

Uses onnxruntime if installed. Models exported with an NCHW input are fed a
transposed tensor; NHWC models get the canvas as-is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .backend import ModelRuntime


@dataclass(frozen=True)
class OnnxConfig:
    model: str
    providers: Optional[Sequence[str]] = None


class OnnxModelRuntime(ModelRuntime):
    def __init__(self, cfg: OnnxConfig):
        self.cfg = cfg
        try:
            import onnxruntime as ort  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "onnxruntime is not installed. Install with `pip install onnxruntime`."
            ) from e

        providers: List[str] = list(cfg.providers) if cfg.providers else ["CPUExecutionProvider"]
        self._session = ort.InferenceSession(cfg.model, providers=providers)

        model_input = self._session.get_inputs()[0]
        model_output = self._session.get_outputs()[0]
        self._input_name = model_input.name
        # NCHW inputs have the channel axis second
        self._channels_first = len(model_input.shape) == 4 and model_input.shape[1] == 3
        self._output_shape = tuple(int(d) if isinstance(d, int) else 1 for d in model_output.shape)

        logging.info(f"ONNX model loaded: {cfg.model}")
        logging.info(f"Input: {model_input.name} {model_input.shape}, output shape: {self._output_shape}")

    @property
    def output_shape(self) -> Tuple[int, ...]:
        return self._output_shape

    def run(self, input_tensor: np.ndarray) -> np.ndarray:
        feed = np.ascontiguousarray(
            input_tensor.transpose(0, 3, 1, 2) if self._channels_first else input_tensor,
            dtype=np.float32,
        )
        outputs = self._session.run(None, {self._input_name: feed})
        return np.asarray(outputs[0])
