"""
GitHub Integration Module

Provides GitHub API integration for answer publishing and knowledge base reads.
"""

from faqbot.integrations.github.client import GitHubClient, answer_marker

__all__ = [
    "GitHubClient",
    "answer_marker",
]
