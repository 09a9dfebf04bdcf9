"""
Model runtime interface.

A runtime takes the normalized model-input canvas and returns the raw output
tensor. Decoding that tensor is done by `decoding.decoder`, not by runtimes.
"""

from __future__ import annotations

from typing import Protocol, Tuple

import numpy as np


class ModelRuntime(Protocol):
    @property
    def output_shape(self) -> Tuple[int, ...]:
        """Declared shape of the output tensor, used to select the decode layout."""
        ...

    def run(self, input_tensor: np.ndarray) -> np.ndarray:
        """Run inference on a (1, S, S, 3) float32 RGB tensor in [0, 1]."""
        ...
