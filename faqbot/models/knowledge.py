"""
Knowledge Base Models

This module defines the knowledge base entry and the result of matching a
question against the knowledge base.
"""

from typing import Any, FrozenSet, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from faqbot.utils import flatten_list


class KnowledgeEntry(BaseModel):
    """
    A single question/answer record of the knowledge base.
    Immutable once loaded.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique entry identifier")
    question_text: str = Field(..., description="Canonical question text")
    answer_text: str = Field(..., description="Stored answer text")
    keywords: FrozenSet[str] = Field(
        default_factory=frozenset, description="Keyword hints used for matching"
    )

    @field_validator("keywords", mode="before")
    @classmethod
    def _flatten_keywords(cls, value: Any) -> FrozenSet[str]:
        # YAML sources sometimes nest keyword lists or give a single string
        if isinstance(value, (set, frozenset)):
            return frozenset(value)
        return frozenset(flatten_list(value))


class MatchResult(BaseModel):
    """Result of matching a question against the knowledge base."""

    matched: bool = Field(..., description="Whether the best score reached the threshold")
    entry_id: Optional[str] = Field(
        None, description="Id of the winning entry (only when matched)"
    )
    confidence: float = Field(
        ..., ge=0.0, le=1.0, description="Best score over all entries (0.0-1.0)"
    )
    rationale: str = Field("", description="Short explanation of the decision")
