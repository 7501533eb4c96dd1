"""
Delivery Ledger

Remembers every dispatched answer and the outcome of each outbound call, so a
failed publish or notify can be retried under the original answer id.

Deliveries of one answer are serialized with a per-answer asyncio.Lock; a call
already recorded as delivered is not made again. Stored in-memory only, like
the approval table.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from faqbot.models.answer import AnswerPayload
from faqbot.models.workflow import (
    ActionMode,
    DeliveryAttempt,
    DeliveryRecord,
    DeliveryStatus,
)

logger = logging.getLogger(__name__)


class DeliveryLedger:
    """In-memory delivery records keyed by answer id."""

    def __init__(self):
        self._records: Dict[str, DeliveryRecord] = {}
        self._answers: Dict[str, AnswerPayload] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def lock(self, answer_id: str) -> asyncio.Lock:
        if answer_id not in self._locks:
            self._locks[answer_id] = asyncio.Lock()
        return self._locks[answer_id]

    def open(
        self, answer: AnswerPayload, mode: ActionMode, targets: List[str]
    ) -> DeliveryRecord:
        """
        Register an answer for delivery.

        An answer opened before keeps its record and attempts, so calls that
        already went through are not repeated.
        """
        record = self._records.get(answer.id)
        if record is None:
            record = DeliveryRecord(answer_id=answer.id, mode=mode, targets=targets)
            self._records[answer.id] = record
            self._answers[answer.id] = answer
        return record.model_copy(deep=True)

    def record(
        self,
        answer_id: str,
        operation: str,
        target: Optional[str] = None,
        error: Optional[str] = None,
    ) -> None:
        status = DeliveryStatus.FAILED if error else DeliveryStatus.DELIVERED
        self._records[answer_id].attempts.append(
            DeliveryAttempt(operation=operation, target=target, status=status, error=error)
        )
        logger.debug(f"{operation} for answer {answer_id} ({target or 'origin'}): {status.value}")

    def get(self, answer_id: str) -> Optional[DeliveryRecord]:
        record = self._records.get(answer_id)
        return record.model_copy(deep=True) if record else None

    def answer_for(self, answer_id: str) -> Optional[AnswerPayload]:
        return self._answers.get(answer_id)

