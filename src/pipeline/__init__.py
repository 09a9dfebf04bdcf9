"""
Pipeline module for the detection relay.

The pipeline orchestrates the full processing flow:
- Frame acquisition from observation sources
- Inference, decoding, suppression and merging
- Render state updates
- Deduplicated, single-slot upload dispatch
"""

from .engine import PipelineEngine, PipelineConfig
from .processor import FrameProcessor, FrameResult

__all__ = [
    "PipelineEngine",
    "PipelineConfig",
    "FrameProcessor",
    "FrameResult",
]
