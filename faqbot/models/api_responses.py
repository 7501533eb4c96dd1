"""
API Response Models

Pydantic models for consistent API response structures.
"""

from pydantic import BaseModel, Field
from typing import Optional, List

from faqbot.models.answer import AnswerPayload
from faqbot.models.workflow import PendingApproval


class QuestionResponse(BaseModel):
    """
    Response model for the question endpoint.
    A question without a match is answered=False with no answer (silence).
    """

    answered: bool = Field(..., description="Whether an answer was produced")
    answer: Optional[AnswerPayload] = Field(
        None, description="Generated answer (only when answered)"
    )


class PendingApprovalsResponse(BaseModel):
    """Response model for listing pending approvals."""

    total: int = Field(0, description="Number of pending approvals")
    approvals: List[PendingApproval] = Field(default_factory=list)
