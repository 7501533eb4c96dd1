"""
Workflow Dispatcher

Decides what happens to a generated answer:

    direct_answer      -> publish now                          (published)
    approval_required  -> track + ask each target to approve   (pending)
    notify_only        -> tell each target, never publish      (notified)

Every outbound call is recorded in the delivery ledger. A retry under the same
answer id only repeats the calls that have not gone through yet.
"""

import logging
from typing import Optional, Sequence, Union

from faqbot.errors import (
    ApprovalNotFoundError,
    ExternalCapabilityError,
    UnknownActionModeError,
)
from faqbot.models.answer import AnswerPayload
from faqbot.models.request import RequestContext
from faqbot.models.workflow import (
    ActionMode,
    DeliveryRecord,
    DispatchOutcome,
    DispatchStatus,
    PendingApproval,
)
from faqbot.services.approval_tracker import ApprovalTracker
from faqbot.services.delivery import Notifier, Publisher
from faqbot.services.delivery_ledger import DeliveryLedger
from faqbot.utils import unique_in_order

logger = logging.getLogger(__name__)

_MODE_STATUS = {
    ActionMode.DIRECT_ANSWER: DispatchStatus.PUBLISHED,
    ActionMode.APPROVAL_REQUIRED: DispatchStatus.PENDING,
    ActionMode.NOTIFY_ONLY: DispatchStatus.NOTIFIED,
}


def parse_action_mode(mode: Union[ActionMode, str]) -> ActionMode:
    """
    Raises:
        UnknownActionModeError: If mode is not one of the ActionMode values
    """
    try:
        return ActionMode(mode)
    except ValueError as e:
        raise UnknownActionModeError(mode) from e


class WorkflowDispatcher:
    """Routes answers through the configured response workflow."""

    def __init__(
        self,
        publisher: Publisher,
        notifier: Notifier,
        tracker: ApprovalTracker,
        ledger: Optional[DeliveryLedger] = None,
    ):
        self.publisher = publisher
        self.notifier = notifier
        self.tracker = tracker
        self.ledger = ledger or DeliveryLedger()

    async def dispatch(
        self,
        mode: Union[ActionMode, str],
        answer: AnswerPayload,
        context: RequestContext,
        notify_targets: Sequence[str],
    ) -> DispatchOutcome:
        """
        Dispatch an answer according to the action mode.

        Args:
            mode: Configured action mode
            answer: Generated answer
            context: Request context of the question
            notify_targets: Approval/notification targets, duplicates sent once

        Returns:
            DispatchOutcome (published, pending or notified)

        Raises:
            UnknownActionModeError: Unrecognized mode
            DuplicateApprovalError: Answer was already decided
            ExternalCapabilityError: Publish or notify call failed
        """
        mode = parse_action_mode(mode)
        targets = unique_in_order(notify_targets)

        if mode == ActionMode.APPROVAL_REQUIRED:
            existing = self.tracker.get(answer.id)
            if existing is not None and not existing.is_terminal:
                logger.info(f"Answer {answer.id} already pending, re-sending approval requests")
            else:
                await self.tracker.submit(answer)
        elif mode not in (ActionMode.DIRECT_ANSWER, ActionMode.NOTIFY_ONLY):
            raise UnknownActionModeError(mode)

        self.ledger.open(answer, mode, targets)
        return await self._deliver(answer.id, context)

    async def redeliver(self, answer_id: str) -> DispatchOutcome:
        """
        Retry the outstanding calls of an earlier dispatch.

        Raises:
            ApprovalNotFoundError: The answer was never dispatched
            ExternalCapabilityError: A call failed again
        """
        answer = self.ledger.answer_for(answer_id)
        if answer is None:
            raise ApprovalNotFoundError(answer_id)
        return await self._deliver(answer_id, answer.context)

    async def publish_decided(self, approval: PendingApproval) -> None:
        """Publish the final text of an approved or edited answer once."""
        answer_id = approval.answer_id
        answer = self.tracker.answer_for(answer_id)
        self.ledger.open(answer, ActionMode.APPROVAL_REQUIRED, [])

        async with self.ledger.lock(answer_id):
            if self.ledger.get(answer_id).delivered("publish"):
                logger.info(f"Answer {answer_id} already published, skipping")
                return
            await self._call(
                "publish",
                answer_id,
                None,
                self.publisher.publish(answer_id, approval.final_text, answer.context),
            )

        logger.info(f"Published {approval.state.value} answer {answer_id}")

    async def _deliver(self, answer_id: str, context: RequestContext) -> DispatchOutcome:
        answer = self.ledger.answer_for(answer_id)

        async with self.ledger.lock(answer_id):
            record = self.ledger.get(answer_id)
            for operation, target in record.steps():
                if record.delivered(operation, target):
                    continue
                await self._call(
                    operation,
                    answer_id,
                    target,
                    self._send(operation, target, answer, context),
                )

        self._log_delivered(record)
        return DispatchOutcome(
            status=_MODE_STATUS[record.mode], answer_id=answer_id, targets=record.targets
        )

    def _send(self, operation: str, target: Optional[str], answer: AnswerPayload, context):
        if operation == "publish":
            return self.publisher.publish(answer.id, answer.text, context)
        if operation == "approval request":
            return self.notifier.request_approval(target, answer.id, answer.text, context)
        return self.notifier.notify(target, answer.id, answer.text, context)

    @staticmethod
    def _log_delivered(record: DeliveryRecord) -> None:
        if record.mode == ActionMode.DIRECT_ANSWER:
            logger.info(f"Answer {record.answer_id} published directly")
        elif record.mode == ActionMode.APPROVAL_REQUIRED:
            logger.info(
                f"Approval requested for answer {record.answer_id} "
                f"from {len(record.targets)} target(s)"
            )
        else:
            logger.info(f"Answer {record.answer_id} sent to {len(record.targets)} target(s)")

    async def _call(self, operation: str, answer_id: str, target: Optional[str], call) -> None:
        """Await an external capability, recording the outcome in the ledger."""
        try:
            await call
        except Exception as e:
            self.ledger.record(answer_id, operation, target, error=str(e) or type(e).__name__)
            if isinstance(e, ExternalCapabilityError):
                raise
            logger.error(f"{operation} failed for answer {answer_id}: {e}", exc_info=True)
            raise ExternalCapabilityError(operation, str(e), answer_id=answer_id) from e
        self.ledger.record(answer_id, operation, target)
