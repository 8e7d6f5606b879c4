from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field


class SignalingRequest(BaseModel):
    """
    Body of POST /api/signaling.

    `type`/`connectionId` are the names browser agents send; `operation`/`key`
    are accepted as well.
    """
    type: str = Field(..., validation_alias=AliasChoices("type", "operation"))
    connection_id: str = Field(..., validation_alias=AliasChoices("connectionId", "key"))
    payload: Optional[Any] = None


class SuccessResponse(BaseModel):
    success: bool = True


class OfferResponse(BaseModel):
    offer: Optional[Any] = None


class AnswerResponse(BaseModel):
    answer: Optional[Any] = None


class CandidatesResponse(BaseModel):
    candidates: List[Any] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str


class StatusResponse(BaseModel):
    """
    Compact status response for dashboard polling.
    """
    running: bool = Field(..., description="True if frames are arriving")
    people_count: int = Field(0, description="Distinct people counted since start")
    object_counts: Dict[str, int] = Field(
        default_factory=dict,
        description="Per-class detections in the latest frame",
    )
    last_frame_age_s: Optional[float] = Field(None, description="Seconds since last frame")
    fps: Optional[float] = Field(None, description="Observation loop FPS")
    last_error: Optional[str] = Field(None, description="Last inference failure notice")
    active_sessions: int = Field(0, description="Negotiation records held by the store")
    warnings: List[str] = Field(default_factory=list, description="Active warnings")
