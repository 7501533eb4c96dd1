"""
Unit Tests for knowledge base loading.
"""

from unittest.mock import MagicMock

import pytest
from github.GithubException import UnknownObjectException
from pydantic import ValidationError

from faqbot.errors import KnowledgeBaseError
from faqbot.knowledge import (
    GitHubKnowledgeBase,
    StaticKnowledgeBase,
    YamlKnowledgeBase,
    parse_entries,
)
from faqbot.models.knowledge import KnowledgeEntry

KB_YAML = """
entries:
  - id: dev-setup
    question: How do I set up the development environment?
    answer: Run make bootstrap.
    keywords: [setup, environment]
  - id: run-tests
    question: How do I run the test suite?
    answer: Run pytest.
    keywords: [[test, pytest], suite]
  - id: no-keywords
    question: Where is the changelog?
    answer: CHANGELOG.md
"""


def test_parse_entries_keeps_order_and_flattens_keywords():
    entries = parse_entries(KB_YAML)

    assert [e.id for e in entries] == ["dev-setup", "run-tests", "no-keywords"]
    assert entries[0].keywords == frozenset({"setup", "environment"})
    assert entries[1].keywords == frozenset({"test", "pytest", "suite"})
    assert entries[2].keywords == frozenset()


def test_parse_entries_empty_document():
    assert parse_entries("") == []
    assert parse_entries("entries:\n") == []


@pytest.mark.parametrize(
    "content",
    [
        "entries: [unclosed",
        "entries: just-a-string",
        "entries:\n  - id: x\n    answer: missing question\n",
        "entries:\n  - 42\n",
    ],
)
def test_parse_entries_rejects_malformed_documents(content):
    with pytest.raises(KnowledgeBaseError):
        parse_entries(content)


def test_duplicate_ids_are_rejected():
    content = """
entries:
  - {id: a, question: Q1, answer: A1}
  - {id: a, question: Q2, answer: A2}
"""
    with pytest.raises(KnowledgeBaseError, match="duplicate entry id 'a'"):
        parse_entries(content)


def test_entries_are_immutable():
    entry = parse_entries(KB_YAML)[0]

    with pytest.raises(ValidationError):
        entry.answer_text = "changed"


def test_static_knowledge_base_snapshot_is_a_copy():
    entries = [KnowledgeEntry(id="a", question_text="Q", answer_text="A")]
    kb = StaticKnowledgeBase(entries)

    snapshot = kb.snapshot()
    snapshot.clear()

    assert len(kb.snapshot()) == 1


def test_yaml_knowledge_base_loads_and_refreshes(tmp_path):
    path = tmp_path / "kb.yaml"
    path.write_text(KB_YAML, encoding="utf-8")
    kb = YamlKnowledgeBase(str(path))

    assert len(kb.snapshot()) == 3

    path.write_text("entries:\n  - {id: only, question: Q, answer: A}\n", encoding="utf-8")
    assert len(kb.snapshot()) == 3  # snapshot is cached until refresh
    assert [e.id for e in kb.refresh()] == ["only"]
    assert [e.id for e in kb.snapshot()] == ["only"]


def test_yaml_knowledge_base_missing_file(tmp_path):
    kb = YamlKnowledgeBase(str(tmp_path / "missing.yaml"))

    with pytest.raises(KnowledgeBaseError, match="not found"):
        kb.snapshot()


def test_github_knowledge_base_reads_via_client():
    client = MagicMock()
    client.read_file.return_value = KB_YAML
    kb = GitHubKnowledgeBase(client, "faq/knowledge_base.yaml")

    entries = kb.snapshot()

    assert len(entries) == 3
    client.read_file.assert_called_once_with("faq/knowledge_base.yaml")


def test_github_knowledge_base_missing_file():
    client = MagicMock()
    client.read_file.side_effect = UnknownObjectException(404, {"message": "Not Found"}, None)
    kb = GitHubKnowledgeBase(client, "faq/knowledge_base.yaml")

    with pytest.raises(KnowledgeBaseError, match="not found"):
        kb.snapshot()
