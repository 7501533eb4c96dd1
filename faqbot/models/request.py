"""
Request Context Model

Platform-agnostic description of where a question came from and who asked it.
"""

import re
from enum import Enum
from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, model_validator

GITHUB_ORIGIN_PATTERN = re.compile(r"[\w.-]+/[\w.-]+#\d+")
SLACK_ORIGIN_PATTERN = re.compile(r"[A-Z0-9]+(:\d+\.\d+)?")


class SourceType(str, Enum):
    """Source platform type."""

    GITHUB = "github"
    SLACK = "slack"


class RequestContext(BaseModel):
    """
    Context passed through unmodified from ingestion to the response workflow.

    origin_ref formats:
        github: "owner/repo#123" (issue or discussion number)
        slack:  "C123ABC456" or "C123ABC456:1712345678.123456" (channel + thread)
    """

    model_config = ConfigDict(frozen=True)

    source: SourceType
    origin_ref: str = Field(..., min_length=1)
    requester_id: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def _check_origin_ref(self):
        pattern = (
            GITHUB_ORIGIN_PATTERN if self.source == SourceType.GITHUB else SLACK_ORIGIN_PATTERN
        )
        if not pattern.fullmatch(self.origin_ref):
            raise ValueError(
                f"Invalid {self.source.value} origin_ref: {self.origin_ref!r}"
            )
        return self

    def github_issue(self) -> Tuple[str, int]:
        """Split a GitHub origin_ref into (repo full name, issue number)."""
        repo_name, _, number = self.origin_ref.rpartition("#")
        return repo_name, int(number)

    def slack_channel(self) -> Tuple[str, Optional[str]]:
        """Split a Slack origin_ref into (channel id, thread ts or None)."""
        channel_id, _, thread_ts = self.origin_ref.partition(":")
        return channel_id, thread_ts or None
