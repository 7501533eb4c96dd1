# Shared data models
from faqbot.models.knowledge import KnowledgeEntry, MatchResult
from faqbot.models.request import RequestContext, SourceType
from faqbot.models.answer import AnswerPayload
from faqbot.models.workflow import (
    ActionMode,
    ApprovalDecision,
    ApprovalState,
    DecisionEvent,
    DecisionOutcome,
    DeliveryAttempt,
    DeliveryRecord,
    DeliveryStatus,
    DispatchOutcome,
    DispatchStatus,
    PendingApproval,
)

__all__ = [
    "KnowledgeEntry",
    "MatchResult",
    "RequestContext",
    "SourceType",
    "AnswerPayload",
    "ActionMode",
    "ApprovalDecision",
    "ApprovalState",
    "DecisionEvent",
    "DecisionOutcome",
    "DeliveryAttempt",
    "DeliveryRecord",
    "DeliveryStatus",
    "DispatchOutcome",
    "DispatchStatus",
    "PendingApproval",
]
