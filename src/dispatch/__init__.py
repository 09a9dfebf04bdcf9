"""
Outbound reporting: dedup, crop/encode, single-slot dispatch and transport.
"""

from .dedup import DedupGate, fingerprint
from .imaging import crop_detection, encode_jpeg
from .transport import NullTransport, RestTransport, Transport, build_payload, create_transport
from .coordinator import DispatchCoordinator, DispatchState

__all__ = [
    "DedupGate",
    "fingerprint",
    "crop_detection",
    "encode_jpeg",
    "Transport",
    "RestTransport",
    "NullTransport",
    "build_payload",
    "create_transport",
    "DispatchCoordinator",
    "DispatchState",
]
