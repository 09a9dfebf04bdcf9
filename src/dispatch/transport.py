"""
Transport for detection reports.

The default transport inserts one row per report into a REST table endpoint
(`{base_url}/rest/v1/{table}`) with the crop embedded as base64 JPEG.
"""

from __future__ import annotations

import base64
import logging
import os
from typing import Any, Dict, Optional, Protocol

import httpx

from models.config import TransportConfig
from models.report import DetectionReport, TransportResult
from ops.errors import TransportError

API_KEY_ENV = "RELAY_API_KEY"


class Transport(Protocol):
    def send(self, report: DetectionReport) -> TransportResult:
        ...


def build_payload(report: DetectionReport) -> Dict[str, Any]:
    """JSON row for a detection report."""
    payload: Dict[str, Any] = {
        "label": report.label,
        "confidence": float(report.confidence),
        "timestamp": report.timestamp_ms,
        "left": float(report.box.left),
        "top": float(report.box.top),
        "right": float(report.box.right),
        "bottom": float(report.box.bottom),
        "device_id": report.device_id,
    }
    if report.image_jpeg:
        payload["image_base64"] = base64.b64encode(report.image_jpeg).decode("ascii")
    return payload


class RestTransport:
    """
    Synchronous httpx transport. Called from the dispatch worker thread only.

    Example:
        transport = RestTransport(TransportConfig(base_url="https://x.example", api_key="..."))
        result = transport.send(report)
    """

    def __init__(self, cfg: TransportConfig, client: Optional[httpx.Client] = None):
        if not cfg.base_url:
            raise ValueError("transport.base_url is required")
        self.cfg = cfg
        api_key = cfg.api_key or os.environ.get(API_KEY_ENV, "")
        self.endpoint = f"{cfg.base_url.rstrip('/')}/rest/v1/{cfg.table}"
        self._client = client or httpx.Client(timeout=httpx.Timeout(cfg.timeout_seconds))
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        if not api_key:
            logging.warning(f"No API key configured for transport (set {API_KEY_ENV})")

    def send(self, report: DetectionReport) -> TransportResult:
        """
        POST one report.

        Returns:
            TransportResult; non-2xx responses are reported, not raised.

        Raises:
            TransportError: On network or protocol failure.
        """
        try:
            response = self._client.post(self.endpoint, json=build_payload(report), headers=self._headers)
        except httpx.HTTPError as e:
            raise TransportError(f"POST {self.endpoint} failed: {e}") from e

        return TransportResult(
            ok=response.is_success,
            status_code=response.status_code,
            message=response.reason_phrase or response.text[:200],
        )

    def close(self) -> None:
        self._client.close()


class NullTransport:
    """Transport used when uploads are disabled; accepts and drops every report."""

    def send(self, report: DetectionReport) -> TransportResult:
        logging.debug(f"Upload disabled, dropping report '{report.label}'")
        return TransportResult(ok=True, status_code=None, message="disabled")

    def close(self) -> None:
        pass


def create_transport(cfg: TransportConfig):
    """Build the configured transport."""
    if not cfg.enabled:
        logging.info("Uploads disabled (transport.enabled = false)")
        return NullTransport()
    return RestTransport(cfg)
