"""
Knowledge Base Repository

Read-only access to the ordered list of knowledge base entries. The core only
calls snapshot(); loading and refreshing belong to the concrete loaders here.

YAML document format:

    entries:
      - id: dev-setup
        question: How do I set up the development environment?
        answer: Run `make bootstrap` ...
        keywords: [setup, environment, development, install]
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

import yaml
from github.GithubException import GithubException, UnknownObjectException
from pydantic import ValidationError

from faqbot.errors import KnowledgeBaseError
from faqbot.models.knowledge import KnowledgeEntry

logger = logging.getLogger(__name__)


class KnowledgeBaseAccessor(Protocol):
    def snapshot(self) -> List[KnowledgeEntry]: ...


def parse_entries(content: str, source: str = "<string>") -> List[KnowledgeEntry]:
    """
    Parse a YAML knowledge base document into entries, keeping file order.

    Raises:
        KnowledgeBaseError: If the YAML is invalid, an entry is incomplete,
            or two entries share an id
    """
    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise KnowledgeBaseError(f"Invalid YAML in {source}: {e}") from e

    raw_entries = data.get("entries") if isinstance(data, dict) else data
    if raw_entries is None:
        return []
    if not isinstance(raw_entries, list):
        raise KnowledgeBaseError(f"{source}: 'entries' must be a list")

    entries = []
    for i, raw in enumerate(raw_entries, 1):
        if not isinstance(raw, dict):
            raise KnowledgeBaseError(f"{source}: entry #{i} is not a mapping")
        try:
            entries.append(_entry_from_dict(raw))
        except ValidationError as e:
            raise KnowledgeBaseError(f"{source}: entry #{i} is invalid: {e}") from e

    _check_unique_ids(entries, source)
    return entries


def _entry_from_dict(raw: Dict[str, Any]) -> KnowledgeEntry:
    # Accept both the short YAML keys and the model field names
    return KnowledgeEntry(
        id=str(raw.get("id", "")),
        question_text=raw.get("question", raw.get("question_text")),
        answer_text=raw.get("answer", raw.get("answer_text")),
        keywords=raw.get("keywords", []),
    )


def _check_unique_ids(entries: Sequence[KnowledgeEntry], source: str) -> None:
    seen = set()
    for entry in entries:
        if entry.id in seen:
            raise KnowledgeBaseError(f"{source}: duplicate entry id '{entry.id}'")
        seen.add(entry.id)


class StaticKnowledgeBase:
    """In-memory snapshot, used for tests and embedded knowledge bases."""

    def __init__(self, entries: Sequence[KnowledgeEntry]):
        _check_unique_ids(entries, "static knowledge base")
        self._entries = list(entries)

    def snapshot(self) -> List[KnowledgeEntry]:
        return list(self._entries)


class YamlKnowledgeBase:
    """Knowledge base read from a local YAML file."""

    def __init__(self, path: str):
        self.path = Path(path)
        self._entries: Optional[List[KnowledgeEntry]] = None

    def refresh(self) -> List[KnowledgeEntry]:
        """Re-read the YAML file and replace the snapshot."""
        if not self.path.exists():
            raise KnowledgeBaseError(f"Knowledge base file not found: {self.path}")

        with open(self.path, "r", encoding="utf-8") as f:
            entries = parse_entries(f.read(), source=str(self.path))

        self._entries = entries
        logger.info(f"Loaded {len(entries)} knowledge base entries from {self.path}")
        return list(entries)

    def snapshot(self) -> List[KnowledgeEntry]:
        if self._entries is None:
            return self.refresh()
        return list(self._entries)


class GitHubKnowledgeBase:
    """Knowledge base read from a YAML file in a GitHub repository."""

    def __init__(self, github_client, path: str):
        """
        Args:
            github_client: GitHubClient wrapper (see faqbot.integrations.github)
            path: Path of the YAML file in the repository
        """
        self.client = github_client
        self.path = path
        self._entries: Optional[List[KnowledgeEntry]] = None

    def refresh(self) -> List[KnowledgeEntry]:
        try:
            content = self.client.read_file(self.path)
        except UnknownObjectException as e:
            raise KnowledgeBaseError(
                f"Knowledge base file not found in repository: {self.path}"
            ) from e
        except GithubException as e:
            logger.error(f"GitHub API error reading knowledge base: {e}")
            raise KnowledgeBaseError(f"Failed to read {self.path} from GitHub: {e}") from e

        entries = parse_entries(content, source=self.path)
        self._entries = entries
        logger.info(f"Loaded {len(entries)} knowledge base entries from GitHub:{self.path}")
        return list(entries)

    def snapshot(self) -> List[KnowledgeEntry]:
        if self._entries is None:
            return self.refresh()
        return list(self._entries)
