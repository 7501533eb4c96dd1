"""
Question API Routes

POST /api/questions - match a question and run the response workflow

Platform webhooks (GitHub issues, Slack events) are normalized by the
caller into {question_text, context} before reaching this endpoint.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
import logging

from faqbot.api.dependencies import get_responder
from faqbot.errors import (
    ApprovalStateConflict,
    ExternalCapabilityError,
    KnowledgeBaseError,
    PreconditionViolation,
)
from faqbot.models.api_responses import QuestionResponse
from faqbot.models.request import RequestContext
from faqbot.services.responder import FAQResponder

logger = logging.getLogger(__name__)
router = APIRouter()


class QuestionRequest(BaseModel):
    """Request model for the question endpoint."""

    question_text: str = Field(..., description="Free-text question as asked")
    context: RequestContext = Field(..., description="Where the question came from")


@router.post("", response_model=QuestionResponse)
async def ask_question(
    request: QuestionRequest,
    responder: FAQResponder = Depends(get_responder),
):
    """
    Answer a question from the knowledge base.

    Example request body:
    ```json
    {
        "question_text": "How do I set up the development environment for this project?",
        "context": {"source": "github", "origin_ref": "acme/widgets#42", "requester_id": "octocat"}
    }
    ```

    A question without a match returns {"answered": false, "answer": null}.
    """
    try:
        answer = await responder.handle_question(request.question_text, request.context)
    except ExternalCapabilityError as e:
        logger.error(f"Delivery failed: {e}", exc_info=True)
        raise HTTPException(status_code=502, detail=str(e))
    except ApprovalStateConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except KnowledgeBaseError as e:
        logger.error(f"Knowledge base unavailable: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail=str(e))
    except PreconditionViolation as e:
        logger.error(f"Precondition violated: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    if answer is None:
        return QuestionResponse(answered=False)
    return QuestionResponse(answered=True, answer=answer)
