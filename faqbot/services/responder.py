"""
FAQ Responder Service

Orchestrates the full answer flow for the inbound events:
1. A question arrives   -> match -> synthesize -> dispatch
2. A decision arrives   -> resolve -> publish (approve/edit)
3. A retry arrives      -> redeliver whatever did not go through
"""

import logging
from typing import Optional

from faqbot.ai_core.generation import AnswerSynthesizer, build_synthesizer
from faqbot.ai_core.matching import FAQMatcher
from faqbot.config import Settings, get_settings
from faqbot.errors import InvalidDecisionError, KnowledgeBaseError
from faqbot.integrations.github import GitHubClient
from faqbot.integrations.slack import SlackClient
from faqbot.knowledge import GitHubKnowledgeBase, KnowledgeBaseAccessor, YamlKnowledgeBase
from faqbot.models.answer import AnswerPayload
from faqbot.models.request import RequestContext
from faqbot.models.workflow import DecisionEvent, DecisionOutcome, DispatchStatus
from faqbot.services.approval_tracker import ApprovalTracker
from faqbot.services.delivery import (
    GitHubPublisher,
    PlatformPublisher,
    Publisher,
    SlackNotifier,
    SlackPublisher,
)
from faqbot.services.dispatcher import WorkflowDispatcher

logger = logging.getLogger(__name__)


class FAQResponder:
    """
    Orchestrates matching, synthesis and the response workflow.
    """

    def __init__(
        self,
        knowledge_base: KnowledgeBaseAccessor,
        matcher: FAQMatcher,
        synthesizer: AnswerSynthesizer,
        dispatcher: WorkflowDispatcher,
        tracker: ApprovalTracker,
        publisher: Publisher,
        settings: Settings,
    ):
        self.knowledge_base = knowledge_base
        self.matcher = matcher
        self.synthesizer = synthesizer
        self.dispatcher = dispatcher
        self.tracker = tracker
        self.publisher = publisher
        self.settings = settings

    async def handle_question(
        self, question_text: str, context: RequestContext
    ) -> Optional[AnswerPayload]:
        """
        Answer a question if the knowledge base covers it.

        Returns:
            The dispatched AnswerPayload, or None when nothing matched.
            None means "stay silent" - it is never used to signal a failure.
        """
        entries = self.knowledge_base.snapshot()
        result = self.matcher.match(
            question_text, entries, self.settings.match_threshold
        )

        if not result.matched:
            logger.info(f"No answer for question from {context.requester_id}: {result.rationale}")
            return None

        entry = next(e for e in entries if e.id == result.entry_id)
        answer = await self.synthesizer.synthesize(question_text, entry, context)

        outcome = await self.dispatcher.dispatch(
            self.settings.action_mode,
            answer,
            context,
            self.settings.notify_targets,
        )
        logger.info(
            f"Answer {answer.id} for entry {entry.id} dispatched: {outcome.status.value}"
        )
        return answer

    async def handle_decision(self, event: DecisionEvent) -> DecisionOutcome:
        """
        Apply a maintainer decision and publish approved or edited answers.

        A publish failure is raised as ExternalCapabilityError after the state
        transition has happened; retry with republish(), not with a new decision.
        """
        approval = await self.tracker.resolve(
            event.answer_id, event.decision, event.decided_by, event.edited_text
        )

        if not approval.is_publishable:
            logger.info(f"Answer {event.answer_id} rejected, archived without publishing")
            return DecisionOutcome(approval=approval, published=False)

        await self.dispatcher.publish_decided(approval)
        return DecisionOutcome(approval=approval, published=True)

    async def republish(self, answer_id: str) -> DecisionOutcome:
        """
        Retry delivery of an answer under its original id.

        Approved and edited answers are published with their final text.
        A direct_answer or notify_only dispatch that failed part way has its
        outstanding calls repeated; calls that already went through are not.

        Raises:
            ApprovalNotFoundError: Never dispatched or submitted
            InvalidDecisionError: Record is pending or rejected
            ExternalCapabilityError: Delivery failed again
        """
        approval = self.tracker.get(answer_id)
        if approval is not None:
            if approval.is_publishable:
                await self.dispatcher.publish_decided(approval)
                return DecisionOutcome(approval=approval, published=True)

            record = self.dispatcher.ledger.get(answer_id)
            if approval.is_terminal or record is None or record.complete:
                raise InvalidDecisionError(
                    answer_id, f"Answer {answer_id} is {approval.state.value}, nothing to publish"
                )
            outcome = await self.dispatcher.redeliver(answer_id)
            return DecisionOutcome(approval=approval, dispatch=outcome)

        outcome = await self.dispatcher.redeliver(answer_id)
        logger.info(f"Answer {answer_id} redelivered: {outcome.status.value}")
        return DecisionOutcome(
            published=outcome.status == DispatchStatus.PUBLISHED, dispatch=outcome
        )


def build_knowledge_base(
    settings: Settings, github_client: Optional[GitHubClient] = None
) -> KnowledgeBaseAccessor:
    """Create the knowledge base loader for the configured source."""
    if settings.knowledge_base_source == "github":
        return GitHubKnowledgeBase(
            github_client or GitHubClient(settings), settings.github_kb_path
        )
    if settings.knowledge_base_source == "file":
        return YamlKnowledgeBase(settings.knowledge_base_path)
    raise KnowledgeBaseError(
        f"Unknown knowledge base source: {settings.knowledge_base_source}"
    )


def create_responder(settings: Optional[Settings] = None) -> FAQResponder:
    """
    Wire the responder from settings.

    Platform clients are created only when their token is configured.
    """
    settings = settings or get_settings()

    github_client = GitHubClient(settings) if settings.github_token else None
    slack_client = SlackClient(settings) if settings.slack_bot_token else None

    publisher = PlatformPublisher(
        github=GitHubPublisher(github_client) if github_client else None,
        slack=SlackPublisher(slack_client) if slack_client else None,
    )
    notifier = SlackNotifier(slack_client or SlackClient(settings))
    tracker = ApprovalTracker()

    return FAQResponder(
        knowledge_base=build_knowledge_base(settings, github_client),
        matcher=FAQMatcher(),
        synthesizer=build_synthesizer(settings),
        dispatcher=WorkflowDispatcher(publisher, notifier, tracker),
        tracker=tracker,
        publisher=publisher,
        settings=settings,
    )
