"""Prompts package."""

from faqbot.ai_core.prompts.answer import ANSWER_SYSTEM_PROMPT, ANSWER_HUMAN_PROMPT

__all__ = [
    "ANSWER_SYSTEM_PROMPT",
    "ANSWER_HUMAN_PROMPT",
]
