# Slack integration module
from faqbot.integrations.slack.client import SlackClient

__all__ = ["SlackClient"]
