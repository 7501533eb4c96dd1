from faqbot.knowledge.repository import (
    GitHubKnowledgeBase,
    KnowledgeBaseAccessor,
    StaticKnowledgeBase,
    YamlKnowledgeBase,
    parse_entries,
)

__all__ = [
    "GitHubKnowledgeBase",
    "KnowledgeBaseAccessor",
    "StaticKnowledgeBase",
    "YamlKnowledgeBase",
    "parse_entries",
]
