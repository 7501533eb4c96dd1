"""
Approval API Routes

GET  /api/approvals                          - list pending approvals
POST /api/approvals/{answer_id}/decision     - approve, reject or edit
POST /api/approvals/{answer_id}/republish    - retry a failed publish or notify
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
import logging

from faqbot.api.dependencies import get_responder
from faqbot.errors import (
    ApprovalAlreadyResolvedError,
    ApprovalNotFoundError,
    DuplicateApprovalError,
    ExternalCapabilityError,
    InvalidDecisionError,
)
from faqbot.models.api_responses import PendingApprovalsResponse
from faqbot.models.workflow import ApprovalDecision, DecisionEvent, DecisionOutcome
from faqbot.services.responder import FAQResponder

logger = logging.getLogger(__name__)
router = APIRouter()


class DecisionRequest(BaseModel):
    """Request model for the decision endpoint."""

    decision: ApprovalDecision = Field(..., description="approve, reject or edit")
    decided_by: str = Field(..., min_length=1, description="Maintainer making the decision")
    edited_text: Optional[str] = Field(None, description="Replacement text (edit only)")


def _raise_http(e: Exception):
    if isinstance(e, ApprovalNotFoundError):
        raise HTTPException(status_code=404, detail=str(e))
    if isinstance(e, (ApprovalAlreadyResolvedError, DuplicateApprovalError)):
        raise HTTPException(status_code=409, detail=str(e))
    if isinstance(e, InvalidDecisionError):
        raise HTTPException(status_code=422, detail=str(e))
    if isinstance(e, ExternalCapabilityError):
        logger.error(f"Publishing failed: {e}", exc_info=True)
        raise HTTPException(status_code=502, detail=str(e))
    raise e


@router.get("", response_model=PendingApprovalsResponse)
async def list_pending(responder: FAQResponder = Depends(get_responder)):
    """List answers waiting for a decision, oldest first."""
    approvals = responder.tracker.pending()
    return PendingApprovalsResponse(total=len(approvals), approvals=approvals)


@router.post("/{answer_id}/decision", response_model=DecisionOutcome)
async def decide(
    answer_id: str,
    request: DecisionRequest,
    responder: FAQResponder = Depends(get_responder),
):
    """
    Resolve a pending answer.

    Example request body:
    ```json
    {"decision": "edit", "decided_by": "maintainer", "edited_text": "Run make bootstrap."}
    ```
    """
    event = DecisionEvent(
        answer_id=answer_id,
        decision=request.decision,
        decided_by=request.decided_by,
        edited_text=request.edited_text,
    )
    try:
        return await responder.handle_decision(event)
    except (
        ApprovalNotFoundError,
        ApprovalAlreadyResolvedError,
        InvalidDecisionError,
        ExternalCapabilityError,
    ) as e:
        _raise_http(e)


@router.post("/{answer_id}/republish", response_model=DecisionOutcome)
async def republish(answer_id: str, responder: FAQResponder = Depends(get_responder)):
    """
    Retry delivery under the original answer id.

    Publishes an approved or edited answer, or repeats the outstanding calls of
    a direct_answer or notify_only dispatch that failed.
    """
    try:
        return await responder.republish(answer_id)
    except (ApprovalNotFoundError, InvalidDecisionError, ExternalCapabilityError) as e:
        _raise_http(e)
