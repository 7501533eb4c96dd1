"""
Delivery Capabilities

Publish answers back to where the question came from and notify maintainers.
Publishing is idempotent per answer id so callers may retry safely.
"""

import asyncio
import logging
from typing import Dict, Optional, Protocol

from faqbot.integrations.github import GitHubClient
from faqbot.integrations.slack import SlackClient
from faqbot.errors import ExternalCapabilityError
from faqbot.models.request import RequestContext, SourceType

logger = logging.getLogger(__name__)


class Publisher(Protocol):
    async def publish(self, answer_id: str, text: str, context: RequestContext) -> None: ...


class Notifier(Protocol):
    async def request_approval(
        self, target: str, answer_id: str, text: str, context: RequestContext
    ) -> None: ...

    async def notify(
        self, target: str, answer_id: str, text: str, context: RequestContext
    ) -> None: ...


class GitHubPublisher:
    """Posts answers as issue comments."""

    def __init__(self, github_client: GitHubClient):
        self.client = github_client
        self._locks: Dict[str, asyncio.Lock] = {}

    async def publish(self, answer_id: str, text: str, context: RequestContext) -> None:
        repo_name, issue_number = context.github_issue()
        if answer_id not in self._locks:
            self._locks[answer_id] = asyncio.Lock()

        # The marker lookup and the post must not interleave for one answer
        async with self._locks[answer_id]:
            await asyncio.to_thread(
                self.client.post_answer_comment, repo_name, issue_number, answer_id, text
            )

        self._locks.pop(answer_id, None)


class SlackPublisher:
    """Posts answers to the originating channel or thread."""

    def __init__(self, slack_client: SlackClient):
        self.client = slack_client
        self._published: Dict[str, str] = {}  # answer_id -> message ts
        self._locks: Dict[str, asyncio.Lock] = {}

    async def publish(self, answer_id: str, text: str, context: RequestContext) -> None:
        if answer_id in self._published:
            logger.info(f"Answer {answer_id} already posted to Slack, skipping")
            return
        if answer_id not in self._locks:
            self._locks[answer_id] = asyncio.Lock()

        # Check and post under one lock so concurrent retries post once
        async with self._locks[answer_id]:
            if answer_id in self._published:
                logger.info(f"Answer {answer_id} already posted to Slack, skipping")
                return

            channel_id, thread_ts = context.slack_channel()
            ts = await self.client.post_message(
                channel_id, text, answer_id=answer_id, thread_ts=thread_ts
            )
            self._published[answer_id] = ts

        self._locks.pop(answer_id, None)


class PlatformPublisher:
    """
    Routes a publish call to the publisher of the originating platform.

    Publishers are looked up lazily so a deployment only needs credentials
    for the platforms it actually receives questions from.
    """

    def __init__(
        self,
        github: Optional[Publisher] = None,
        slack: Optional[Publisher] = None,
    ):
        self._publishers: Dict[SourceType, Optional[Publisher]] = {
            SourceType.GITHUB: github,
            SourceType.SLACK: slack,
        }

    async def publish(self, answer_id: str, text: str, context: RequestContext) -> None:
        publisher = self._publishers.get(context.source)
        if publisher is None:
            raise ExternalCapabilityError(
                "publish",
                f"No publisher configured for source '{context.source.value}'",
                answer_id=answer_id,
            )
        await publisher.publish(answer_id, text, context)


def _describe_origin(context: RequestContext) -> str:
    return f"{context.source.value} {context.origin_ref} (asked by {context.requester_id})"


class SlackNotifier:
    """Sends approval requests and notifications to Slack channels or users."""

    def __init__(self, slack_client: SlackClient):
        self.client = slack_client

    async def request_approval(
        self, target: str, answer_id: str, text: str, context: RequestContext
    ) -> None:
        message = (
            f":raised_hand: *Answer awaiting approval* for {_describe_origin(context)}\n"
            f"Answer id: `{answer_id}`\n\n"
            f">>> {text}\n\n"
            f"Decide with `POST /api/approvals/{answer_id}/decision` "
            f"(approve, reject or edit)."
        )
        await self.client.post_message(
            target, message, answer_id=answer_id, kind="approval_request"
        )

    async def notify(
        self, target: str, answer_id: str, text: str, context: RequestContext
    ) -> None:
        message = (
            f":bulb: *Suggested answer* for {_describe_origin(context)}\n"
            f"Answer id: `{answer_id}`\n\n"
            f">>> {text}"
        )
        await self.client.post_message(
            target, message, answer_id=answer_id, kind="notification"
        )
