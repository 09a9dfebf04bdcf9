from __future__ import annotations

import time

from fastapi import APIRouter, Request

from runtime.context import PipelineContext
from ..api_models import (
    DetectionItem,
    DetectionsResponse,
    DisplaySize,
    LogsResponse,
    StatusResponse,
)

router = APIRouter()


def _ctx(request: Request) -> PipelineContext:
    return request.app.state.ctx


@router.get("/status", response_model=StatusResponse)
def status(request: Request):
    """
    Operator status: render status text, frame rate, dispatch slot state and display size.
    """
    ctx = _ctx(request)
    sys_stats = ctx.get_system_stats_copy()
    last_frame_ts = sys_stats.get("last_frame_ts")
    width, height = sys_stats["display_size"]
    return StatusResponse(
        status=sys_stats["status"],
        fps=round(sys_stats["fps"], 1),
        frame_count=sys_stats["frame_count"],
        detection_count=sys_stats["detection_count"],
        last_frame_age_s=time.time() - last_frame_ts if last_frame_ts else None,
        uptime_seconds=sys_stats["uptime_seconds"],
        dispatch_state=sys_stats["dispatch_state"],
        uploads_sent=sys_stats["uploads_sent"],
        uploads_failed=sys_stats["uploads_failed"],
        display_width=width,
        display_height=height,
    )


@router.get("/logs", response_model=LogsResponse)
def logs(request: Request, lines: int = 100):
    event_log = _ctx(request).event_log
    entries = event_log.snapshot()
    if lines > 0:
        entries = entries[-lines:]
    return LogsResponse(entries=entries, max_entries=event_log.max_entries)


@router.get("/detections", response_model=DetectionsResponse)
def detections(request: Request):
    """Latest display-space detections, as last drawn by the render path."""
    current, status_text = _ctx(request).get_render_copy()
    return DetectionsResponse(
        status=status_text,
        detections=[DetectionItem(**d.to_dict()) for d in current],
    )


@router.put("/display", response_model=DisplaySize)
def set_display(request: Request, size: DisplaySize):
    ctx = _ctx(request)
    ctx.set_display_size(size.width, size.height)
    width, height = ctx.get_display_size()
    return DisplaySize(width=width, height=height)
