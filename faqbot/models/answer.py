"""
Answer Payload Model
"""

import uuid
from datetime import datetime, timezone
from pydantic import BaseModel, Field

from faqbot.models.request import RequestContext


def new_answer_id() -> str:
    """Generate a process-unique answer identifier."""
    return uuid.uuid4().hex


class AnswerPayload(BaseModel):
    """A generated answer for a matched knowledge base entry."""

    id: str = Field(default_factory=new_answer_id, description="Unique answer id")
    original_question: str = Field(..., description="Question as asked")
    matched_entry_id: str = Field(..., description="Id of the matched KnowledgeEntry")
    text: str = Field(..., description="Answer text to deliver")
    context: RequestContext
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the answer was synthesized",
    )
