"""
Approval Tracker

Holds answers that wait for a maintainer decision.

States:
    pending -> approved | rejected | edited   (all three are terminal)

A record leaves `pending` exactly once. Replaying a decision is rejected
rather than ignored so the audit trail stays honest. Stored in-memory only.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

from faqbot.errors import (
    ApprovalAlreadyResolvedError,
    ApprovalNotFoundError,
    DuplicateApprovalError,
    InvalidDecisionError,
)
from faqbot.models.answer import AnswerPayload
from faqbot.models.workflow import ApprovalDecision, ApprovalState, PendingApproval

logger = logging.getLogger(__name__)

_DECISION_STATES = {
    ApprovalDecision.APPROVE: ApprovalState.APPROVED,
    ApprovalDecision.REJECT: ApprovalState.REJECTED,
    ApprovalDecision.EDIT: ApprovalState.EDITED,
}


class ApprovalTracker:
    """
    In-memory approval table keyed by answer id.

    Each answer id has its own asyncio.Lock, held only while the record
    changes state. Operations on different answers do not wait on each other,
    and no lock is held while publishing or notifying.
    A lock is dropped once its record is terminal.
    """

    def __init__(self):
        self._records: Dict[str, PendingApproval] = {}
        self._answers: Dict[str, AnswerPayload] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, answer_id: str) -> asyncio.Lock:
        if answer_id not in self._locks:
            self._locks[answer_id] = asyncio.Lock()
        return self._locks[answer_id]

    async def submit(self, answer: AnswerPayload) -> PendingApproval:
        """
        Start tracking an answer in the pending state.

        Raises:
            DuplicateApprovalError: If the answer id was submitted before
        """
        if answer.id in self._records:
            raise DuplicateApprovalError(answer.id)

        async with self._lock_for(answer.id):
            if answer.id in self._records:
                raise DuplicateApprovalError(answer.id)

            record = PendingApproval(answer_id=answer.id)
            self._records[answer.id] = record
            self._answers[answer.id] = answer

        logger.info(f"Approval pending for answer {answer.id}")
        return record.model_copy()

    async def resolve(
        self,
        answer_id: str,
        decision: Union[ApprovalDecision, str],
        decided_by: str,
        edited_text: Optional[str] = None,
    ) -> PendingApproval:
        """
        Apply a maintainer decision to a pending record.

        Args:
            answer_id: Answer being decided
            decision: approve, reject or edit
            decided_by: Who decided
            edited_text: Replacement text, required for edit

        Returns:
            The resolved record. final_text is the original answer text for
            approve, the edited text for edit, and None for reject.

        Raises:
            ApprovalNotFoundError: Never submitted
            ApprovalAlreadyResolvedError: Already in a terminal state
            InvalidDecisionError: Unknown decision, or edit without text
        """
        record = self._records.get(answer_id)
        if record is None:
            raise ApprovalNotFoundError(answer_id)
        if record.is_terminal:
            raise ApprovalAlreadyResolvedError(answer_id, record.state.value)

        try:
            decision = ApprovalDecision(decision)
        except ValueError as e:
            raise InvalidDecisionError(
                answer_id, f"Unknown decision {decision!r} for answer {answer_id}"
            ) from e

        async with self._lock_for(answer_id):
            record = self._records.get(answer_id)
            if record is None:
                raise ApprovalNotFoundError(answer_id)
            if record.is_terminal:
                raise ApprovalAlreadyResolvedError(answer_id, record.state.value)

            if decision == ApprovalDecision.EDIT:
                if not edited_text or not edited_text.strip():
                    raise InvalidDecisionError(
                        answer_id, f"Edit of answer {answer_id} requires edited_text"
                    )
                final_text = edited_text
            elif decision == ApprovalDecision.APPROVE:
                final_text = self._answers[answer_id].text
            else:
                final_text = None

            resolved = record.model_copy(
                update={
                    "state": _DECISION_STATES[decision],
                    "final_text": final_text,
                    "decided_by": decided_by,
                    "decided_at": datetime.now(timezone.utc),
                }
            )
            self._records[answer_id] = resolved
            # Terminal records never change again; waiters still hold the lock object
            self._locks.pop(answer_id, None)

        logger.info(f"Answer {answer_id} {resolved.state.value} by {decided_by}")
        return resolved.model_copy()

    def get(self, answer_id: str) -> Optional[PendingApproval]:
        record = self._records.get(answer_id)
        return record.model_copy() if record else None

    def answer_for(self, answer_id: str) -> Optional[AnswerPayload]:
        """The answer payload submitted for approval."""
        return self._answers.get(answer_id)

    def pending(self) -> List[PendingApproval]:
        """Pending records in submission order."""
        return [r.model_copy() for r in self._records.values() if not r.is_terminal]

    def archived(self) -> List[PendingApproval]:
        """Rejected records. They are kept for auditing and never published."""
        return [
            r.model_copy()
            for r in self._records.values()
            if r.state == ApprovalState.REJECTED
        ]
