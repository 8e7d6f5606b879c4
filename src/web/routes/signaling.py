"""
Rendezvous endpoint shared by the camera (producer) and observer (consumer) pages.
"""

from __future__ import annotations

from typing import Union

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from signaling.protocol import SignalingHandler
from ..api_models import (
    AnswerResponse,
    CandidatesResponse,
    ErrorResponse,
    OfferResponse,
    SignalingRequest,
    SuccessResponse,
)

router = APIRouter()

SIGNALING_RESPONSES = {
    200: {
        "model": Union[SuccessResponse, OfferResponse, AnswerResponse, CandidatesResponse],
        "description": "Operation applied, or the requested value (null / [] when not yet published)",
    },
    400: {
        "model": ErrorResponse,
        "description": "Unknown operation type or publish without payload",
    },
}


def get_handler(request: Request) -> SignalingHandler:
    return request.app.state.signaling_handler


@router.post("/signaling", response_class=JSONResponse, responses=SIGNALING_RESPONSES)
def signaling(req: SignalingRequest, request: Request):
    """
    Single entry point for offer/answer/candidate exchange.

    Responses:
    - offer | answer | candidate | reset -> {"success": true}
    - get-offer -> {"offer": blob | null}
    - get-answer -> {"answer": blob | null}
    - get-candidates -> {"candidates": [...]}
    - unknown type -> {"error": "..."} with status 400
    """
    result = get_handler(request).handle(req.type, req.connection_id, req.payload)
    return JSONResponse(result.body, status_code=result.status_code)
