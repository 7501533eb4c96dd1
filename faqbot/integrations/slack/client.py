"""
Slack API Client

Responsibilities:
- chat.postMessage: post answers, approval requests and notifications
- Tag every message with the answer id in Slack message metadata
"""

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from faqbot.config import Settings, get_settings
from typing import Optional
import asyncio
import logging

logger = logging.getLogger(__name__)

ANSWER_EVENT_TYPE = "faqbot_answer"


class SlackClient:
    """Slack API client for posting messages."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[WebClient] = None):
        settings = settings or get_settings()
        self.client = client or WebClient(token=settings.slack_bot_token)
        self.settings = settings

    async def post_message(
        self,
        channel: str,
        text: str,
        answer_id: str,
        thread_ts: Optional[str] = None,
        kind: str = "answer",
    ) -> str:
        """
        Post a message to a channel, thread or user (DM by user id).

        Args:
            channel: Channel or user id
            text: Message text (mrkdwn)
            answer_id: Answer the message belongs to
            thread_ts: Reply inside this thread when given
            kind: answer | approval_request | notification

        Returns:
            Timestamp (ts) of the posted message
        """
        try:
            result = await asyncio.to_thread(
                self.client.chat_postMessage,
                channel=channel,
                text=text,
                thread_ts=thread_ts,
                metadata={
                    "event_type": ANSWER_EVENT_TYPE,
                    "event_payload": {"answer_id": answer_id, "kind": kind},
                },
            )
            ts = result.get("ts", "")
            logger.info(f"Posted {kind} for answer {answer_id} to {channel} (ts={ts})")
            return ts

        except SlackApiError as e:
            logger.error(f"Slack API error posting to {channel}: {e.response['error']}")
            raise
