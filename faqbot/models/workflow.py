"""
Response Workflow Models

Action modes, approval records and dispatch outcomes.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field


class ActionMode(str, Enum):
    """What happens to a generated answer."""

    DIRECT_ANSWER = "direct_answer"  # Publish immediately
    APPROVAL_REQUIRED = "approval_required"  # Hold until a maintainer decides
    NOTIFY_ONLY = "notify_only"  # Tell the targets, never publish


class ApprovalState(str, Enum):
    """Lifecycle state of an approval record."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    EDITED = "edited"


TERMINAL_STATES = frozenset(
    {ApprovalState.APPROVED, ApprovalState.REJECTED, ApprovalState.EDITED}
)


class ApprovalDecision(str, Enum):
    """Decision sent by a maintainer."""

    APPROVE = "approve"
    REJECT = "reject"
    EDIT = "edit"


class PendingApproval(BaseModel):
    """An answer awaiting (or having received) a maintainer decision."""

    answer_id: str
    state: ApprovalState = ApprovalState.PENDING
    final_text: Optional[str] = None
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def is_publishable(self) -> bool:
        """Approved and edited answers go back to the publish path."""
        return self.state in (ApprovalState.APPROVED, ApprovalState.EDITED)


class DispatchStatus(str, Enum):
    """Outcome of dispatching an answer."""

    PUBLISHED = "published"
    PENDING = "pending"
    NOTIFIED = "notified"


class DispatchOutcome(BaseModel):
    """Result of a dispatch call."""

    status: DispatchStatus
    answer_id: str
    targets: List[str] = Field(
        default_factory=list, description="Targets contacted, deduplicated, in order"
    )


class DecisionEvent(BaseModel):
    """Inbound decision from an external approval surface."""

    answer_id: str
    decision: ApprovalDecision
    decided_by: str = Field(..., min_length=1)
    edited_text: Optional[str] = None


class DecisionOutcome(BaseModel):
    """
    Result of handling a decision event or a republish.

    approval is None when a direct_answer or notify_only dispatch was
    redelivered; dispatch is set only in that case.
    """

    approval: Optional[PendingApproval] = None
    published: bool = False
    dispatch: Optional[DispatchOutcome] = None


class DeliveryStatus(str, Enum):
    """Result of one outbound call."""

    DELIVERED = "delivered"
    FAILED = "failed"


class DeliveryAttempt(BaseModel):
    """One publish, approval request or notify call for an answer."""

    operation: str = Field(..., description="publish, approval request or notify")
    target: Optional[str] = Field(None, description="Notify target, None for publish")
    status: DeliveryStatus
    error: Optional[str] = None
    attempted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class DeliveryRecord(BaseModel):
    """Everything dispatched for one answer id, with the outcome of each call."""

    answer_id: str
    mode: ActionMode
    targets: List[str] = Field(default_factory=list)
    attempts: List[DeliveryAttempt] = Field(default_factory=list)

    def delivered(self, operation: str, target: Optional[str] = None) -> bool:
        return any(
            a.operation == operation
            and a.target == target
            and a.status == DeliveryStatus.DELIVERED
            for a in self.attempts
        )

    def steps(self) -> List[Tuple[str, Optional[str]]]:
        """The (operation, target) calls the dispatch mode requires."""
        if self.mode == ActionMode.DIRECT_ANSWER:
            return [("publish", None)]
        if self.mode == ActionMode.APPROVAL_REQUIRED:
            return [("approval request", target) for target in self.targets]
        return [("notify", target) for target in self.targets]

    @property
    def complete(self) -> bool:
        return all(self.delivered(op, target) for op, target in self.steps())
