from __future__ import annotations

import os
import platform
import time
from typing import List, Optional

import cv2
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from ..api_models import StatusResponse
from ..state import state

router = APIRouter()


def _compute_warnings(
    last_frame_age_s: Optional[float],
    last_error: Optional[str],
) -> List[str]:
    """
    Compute warning flags for the status endpoint.

    Thresholds:
    - camera_stale: last_frame_age_s > 2
    - camera_offline: last_frame_age_s > 10 or no frame yet
    - inference_error: the most recent frame failed detection
    """
    warnings = []

    if last_frame_age_s is None or last_frame_age_s > 10:
        warnings.append("camera_offline")
    elif last_frame_age_s > 2:
        warnings.append("camera_stale")

    if last_error:
        warnings.append("inference_error")

    return warnings


@router.get("/health")
def health():
    return {
        "timestamp": time.time(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "pid": os.getpid(),
        "cwd": os.getcwd(),
    }


@router.get("/status", response_model=StatusResponse)
def status(request: Request):
    """
    Compact status endpoint optimized for frontend polling.
    """
    now = time.time()

    sys_stats = state.get_system_stats_copy()
    last_frame_ts = sys_stats.get("last_frame_ts")
    last_frame_age_s = (now - last_frame_ts) if last_frame_ts else None

    people_count, object_counts = state.get_observation()
    last_error = state.last_error
    warnings = _compute_warnings(last_frame_age_s, last_error)

    store = getattr(request.app.state, "negotiation_store", None)

    return StatusResponse(
        running="camera_offline" not in warnings,
        people_count=people_count,
        object_counts=object_counts,
        last_frame_age_s=last_frame_age_s,
        fps=sys_stats.get("fps"),
        last_error=last_error,
        active_sessions=len(store) if store is not None else 0,
        warnings=warnings,
    )


@router.get("/frame.jpg")
def latest_frame():
    """Latest annotated frame from the observation loop."""
    frame = state.get_frame()
    if frame is None:
        raise HTTPException(status_code=503, detail="No frame available")
    ok, buf = cv2.imencode(".jpg", frame)
    if not ok:
        raise HTTPException(status_code=500, detail="Failed to encode JPEG")
    return Response(content=buf.tobytes(), media_type="image/jpeg")
