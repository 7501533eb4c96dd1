"""
GitHub API Client

Responsibilities:
- Read the knowledge base file from the configured repository
- Post answers as issue comments
- Find answers that were already posted (idempotent publishing)
"""

import logging
from typing import Optional

from github import Github
from github.Repository import Repository
from github.IssueComment import IssueComment
from github.GithubException import GithubException

from faqbot.config import Settings, get_settings

logger = logging.getLogger(__name__)

ANSWER_MARKER_TEMPLATE = "<!-- faqbot:answer-id={answer_id} -->"


def answer_marker(answer_id: str) -> str:
    """Hidden HTML comment that ties a posted comment to an answer id."""
    return ANSWER_MARKER_TEMPLATE.format(answer_id=answer_id)


class GitHubClient:
    """GitHub API client wrapper."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[Github] = None):
        settings = settings or get_settings()
        self.client = client or Github(settings.github_token)
        self.default_branch = settings.github_default_branch
        self.kb_repo_name = f"{settings.github_repo_owner}/{settings.github_repo_name}"
        self._repos: dict[str, Repository] = {}
        logger.info(f"GitHub client initialized (knowledge base repo: {self.kb_repo_name})")

    def get_repo(self, full_name: str) -> Repository:
        """Get a repository by 'owner/name', cached per client."""
        if full_name not in self._repos:
            self._repos[full_name] = self.client.get_repo(full_name)
        return self._repos[full_name]

    def read_file(self, path: str, repo_name: Optional[str] = None) -> str:
        """
        Read a text file from a repository at the default branch.

        Args:
            path: File path in the repository
            repo_name: 'owner/name', defaults to the knowledge base repository

        Returns:
            Decoded file content

        Raises:
            UnknownObjectException: If the file does not exist
            GithubException: On other API errors
        """
        repo = self.get_repo(repo_name or self.kb_repo_name)
        file_content = repo.get_contents(path, ref=self.default_branch)
        if isinstance(file_content, list):
            raise GithubException(400, {"message": f"{path} is a directory"}, None)
        return file_content.decoded_content.decode("utf-8")

    def find_answer_comment(
        self, repo_name: str, issue_number: int, answer_id: str
    ) -> Optional[IssueComment]:
        """Return the comment already carrying the answer marker, if any."""
        marker = answer_marker(answer_id)
        issue = self.get_repo(repo_name).get_issue(number=issue_number)
        for comment in issue.get_comments():
            if marker in (comment.body or ""):
                return comment
        return None

    def post_answer_comment(
        self, repo_name: str, issue_number: int, answer_id: str, text: str
    ) -> IssueComment:
        """
        Post an answer as an issue comment unless it was posted before.

        Returns:
            The new comment, or the existing one for a repeated answer id
        """
        existing = self.find_answer_comment(repo_name, issue_number, answer_id)
        if existing is not None:
            logger.info(
                f"Answer {answer_id} already posted on {repo_name}#{issue_number}, skipping"
            )
            return existing

        issue = self.get_repo(repo_name).get_issue(number=issue_number)
        comment = issue.create_comment(f"{text}\n\n{answer_marker(answer_id)}")
        logger.info(f"Posted answer {answer_id} on {repo_name}#{issue_number}")
        return comment
