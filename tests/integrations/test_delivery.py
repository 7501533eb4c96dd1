"""
Tests for the GitHub/Slack publish and notify capabilities.

GitHub and Slack SDK clients are replaced with mocks; no network calls.
"""

import asyncio
import time
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

from faqbot.config import Settings
from faqbot.errors import ExternalCapabilityError
from faqbot.integrations.github import GitHubClient, answer_marker
from faqbot.integrations.slack import SlackClient
from faqbot.models.request import RequestContext, SourceType
from faqbot.services.delivery import (
    GitHubPublisher,
    PlatformPublisher,
    SlackNotifier,
    SlackPublisher,
)


@pytest.fixture
def settings():
    return Settings(
        github_token="ghp_test",
        github_repo_owner="acme",
        github_repo_name="faq",
        slack_bot_token="xoxb-test",
    )


@pytest.fixture
def github_context():
    return RequestContext(
        source=SourceType.GITHUB, origin_ref="acme/widgets#42", requester_id="octocat"
    )


@pytest.fixture
def slack_context():
    return RequestContext(
        source=SourceType.SLACK,
        origin_ref="C123ABC456:1712345678.123456",
        requester_id="U999",
    )


def make_github_client(settings, existing_bodies=()):
    sdk = MagicMock()
    issue = MagicMock()
    issue.get_comments.return_value = [MagicMock(body=body) for body in existing_bodies]
    sdk.get_repo.return_value.get_issue.return_value = issue
    return GitHubClient(settings, client=sdk), sdk, issue


@pytest.mark.asyncio
async def test_github_publisher_posts_comment_with_marker(settings, github_context):
    client, sdk, issue = make_github_client(settings)

    await GitHubPublisher(client).publish("abc123", "Run make bootstrap.", github_context)

    sdk.get_repo.assert_called_with("acme/widgets")
    sdk.get_repo.return_value.get_issue.assert_called_with(number=42)
    body = issue.create_comment.call_args.args[0]
    assert body.startswith("Run make bootstrap.")
    assert answer_marker("abc123") in body


@pytest.mark.asyncio
async def test_github_publisher_is_idempotent_per_answer(settings, github_context):
    client, _, issue = make_github_client(
        settings, existing_bodies=["unrelated", f"old text\n\n{answer_marker('abc123')}"]
    )

    await GitHubPublisher(client).publish("abc123", "Run make bootstrap.", github_context)

    issue.create_comment.assert_not_called()


def test_github_client_reads_kb_file(settings):
    sdk = MagicMock()
    sdk.get_repo.return_value.get_contents.return_value = MagicMock(
        decoded_content=b"entries: []\n"
    )
    client = GitHubClient(settings, client=sdk)

    assert client.read_file("faq/knowledge_base.yaml") == "entries: []\n"
    sdk.get_repo.assert_called_once_with("acme/faq")
    sdk.get_repo.return_value.get_contents.assert_called_once_with(
        "faq/knowledge_base.yaml", ref="main"
    )


@pytest.mark.asyncio
async def test_slack_publisher_posts_in_thread_once(settings, slack_context):
    sdk = MagicMock()
    sdk.chat_postMessage.return_value = {"ok": True, "ts": "1712345679.000100"}
    publisher = SlackPublisher(SlackClient(settings, client=sdk))

    await publisher.publish("abc123", "Run make bootstrap.", slack_context)
    await publisher.publish("abc123", "Run make bootstrap.", slack_context)

    sdk.chat_postMessage.assert_called_once()
    kwargs = sdk.chat_postMessage.call_args.kwargs
    assert kwargs["channel"] == "C123ABC456"
    assert kwargs["thread_ts"] == "1712345678.123456"
    assert kwargs["metadata"]["event_payload"]["answer_id"] == "abc123"


@pytest.mark.asyncio
async def test_concurrent_slack_publishes_post_once(slack_context):
    async def slow_post(channel, text, answer_id, thread_ts=None):
        await asyncio.sleep(0.01)
        return "1712345679.000100"

    slack_client = AsyncMock()
    slack_client.post_message.side_effect = slow_post
    publisher = SlackPublisher(slack_client)

    await asyncio.gather(
        publisher.publish("a1", "Run make bootstrap.", slack_context),
        publisher.publish("a1", "Run make bootstrap.", slack_context),
    )

    slack_client.post_message.assert_awaited_once()


@pytest.mark.asyncio
async def test_concurrent_github_publishes_comment_once(settings, github_context):
    client, _, issue = make_github_client(settings)
    comments = []

    def create_comment(body):
        time.sleep(0.01)
        comments.append(MagicMock(body=body))

    issue.get_comments.side_effect = lambda: list(comments)
    issue.create_comment.side_effect = create_comment
    publisher = GitHubPublisher(client)

    await asyncio.gather(
        publisher.publish("a1", "Run make bootstrap.", github_context),
        publisher.publish("a1", "Run make bootstrap.", github_context),
    )

    assert issue.create_comment.call_count == 1


@pytest.mark.asyncio
async def test_platform_publisher_routes_by_source(github_context, slack_context):
    github, slack = AsyncMock(), AsyncMock()
    publisher = PlatformPublisher(github=github, slack=slack)

    await publisher.publish("a1", "text", github_context)
    await publisher.publish("a2", "text", slack_context)

    github.publish.assert_awaited_once_with("a1", "text", github_context)
    slack.publish.assert_awaited_once_with("a2", "text", slack_context)


@pytest.mark.asyncio
async def test_platform_publisher_without_publisher_fails(slack_context):
    publisher = PlatformPublisher(github=AsyncMock())

    with pytest.raises(ExternalCapabilityError) as exc_info:
        await publisher.publish("a1", "text", slack_context)

    assert exc_info.value.answer_id == "a1"


@pytest.mark.asyncio
async def test_slack_notifier_messages(settings, github_context):
    slack_client = MagicMock()
    slack_client.post_message = AsyncMock(return_value="1.0")
    notifier = SlackNotifier(slack_client)

    await notifier.request_approval("C-maint", "abc123", "Run make bootstrap.", github_context)
    await notifier.notify("U-lead", "abc123", "Run make bootstrap.", github_context)

    approval_call, notify_call = slack_client.post_message.await_args_list
    assert approval_call.args[0] == "C-maint"
    assert "awaiting approval" in approval_call.args[1]
    assert "/api/approvals/abc123/decision" in approval_call.args[1]
    assert approval_call.kwargs["kind"] == "approval_request"
    assert notify_call.args[0] == "U-lead"
    assert "acme/widgets#42" in notify_call.args[1]
    assert notify_call.kwargs["kind"] == "notification"


@pytest.mark.parametrize(
    "source, origin_ref",
    [
        (SourceType.GITHUB, "not-an-issue"),
        (SourceType.GITHUB, "C0123SLACK"),
        (SourceType.GITHUB, "acme/widgets#"),
        (SourceType.SLACK, "acme/widgets#42"),
        (SourceType.SLACK, "C123:not-a-ts"),
    ],
)
def test_malformed_origin_ref_is_rejected(source, origin_ref):
    with pytest.raises(ValidationError, match="origin_ref"):
        RequestContext(source=source, origin_ref=origin_ref, requester_id="octocat")


def test_origin_ref_is_split(github_context, slack_context):
    assert github_context.github_issue() == ("acme/widgets", 42)
    assert slack_context.slack_channel() == ("C123ABC456", "1712345678.123456")
