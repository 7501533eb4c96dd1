"""
FAQ Matcher

Responsibilities:
- Score a question against every knowledge base entry
- Pick the best entry under a confidence threshold
- Keep the scorer pluggable so a semantic/embedding scorer can replace the
  keyword heuristic without changing the match() contract
"""

import logging
from typing import List, Optional, Protocol, Sequence, Tuple

from faqbot.models.knowledge import KnowledgeEntry, MatchResult
from faqbot.utils import normalize_text

logger = logging.getLogger(__name__)

KEYWORD_WEIGHT = 0.2
QUESTION_PREFIX_WEIGHT = 0.5
# Placeholder heuristic: fails for short questions and is locale sensitive.
# Changing it needs a product decision; replace the scorer instead.
QUESTION_PREFIX_LENGTH = 10


class Scorer(Protocol):
    """Scores one entry against an already normalized question."""

    def score(self, normalized_question: str, entry: KnowledgeEntry) -> float: ...


class KeywordScorer:
    """
    Keyword + question prefix heuristic.

    score = 0.2 per entry keyword found in the question
          + 0.5 if the first 10 characters of the entry question are found
    clamped to 1.0. Empty keywords never score.
    """

    def __init__(
        self,
        keyword_weight: float = KEYWORD_WEIGHT,
        prefix_weight: float = QUESTION_PREFIX_WEIGHT,
        prefix_length: int = QUESTION_PREFIX_LENGTH,
    ):
        self.keyword_weight = keyword_weight
        self.prefix_weight = prefix_weight
        self.prefix_length = prefix_length

    def matched_keywords(
        self, normalized_question: str, entry: KnowledgeEntry
    ) -> List[str]:
        """Case-folded keywords of the entry that occur in the question, sorted."""
        hits = set()
        for keyword in entry.keywords:
            needle = normalize_text(keyword)
            if needle and needle in normalized_question:
                hits.add(needle)
        return sorted(hits)

    def prefix_matches(self, normalized_question: str, entry: KnowledgeEntry) -> bool:
        prefix = normalize_text(entry.question_text)[: self.prefix_length]
        return bool(prefix) and prefix in normalized_question

    def score(self, normalized_question: str, entry: KnowledgeEntry) -> float:
        total = self.keyword_weight * len(
            self.matched_keywords(normalized_question, entry)
        )
        if self.prefix_matches(normalized_question, entry):
            total += self.prefix_weight
        return min(total, 1.0)

    def explain(self, normalized_question: str, entry: KnowledgeEntry) -> str:
        keywords = self.matched_keywords(normalized_question, entry)
        parts = []
        if keywords:
            parts.append(f"keywords: {', '.join(keywords)}")
        if self.prefix_matches(normalized_question, entry):
            parts.append("question prefix matched")
        return "; ".join(parts) if parts else "no keyword or prefix overlap"


def _clamp(score: float) -> float:
    return max(0.0, min(float(score), 1.0))


def select_best(
    scored: Sequence[Tuple[KnowledgeEntry, float]],
) -> Tuple[Optional[KnowledgeEntry], float]:
    """
    Fold scored entries into (best entry, best score).

    A later entry replaces the current best only when its score is strictly
    greater, so the first entry wins ties.
    """
    best: Tuple[Optional[KnowledgeEntry], float] = (None, 0.0)
    for entry, score in scored:
        if best[0] is None or score > best[1]:
            best = (entry, score)
    return best


class FAQMatcher:
    """
    Matches a free-text question against knowledge base entries.

    The matcher is stateless: it holds only the scorer, so one instance can
    serve concurrent requests.
    """

    def __init__(self, scorer: Optional[Scorer] = None):
        self.scorer = scorer or KeywordScorer()

    def match(
        self,
        question: str,
        entries: Sequence[KnowledgeEntry],
        threshold: float,
    ) -> MatchResult:
        """
        Find the best entry for a question.

        Args:
            question: Raw question text
            entries: Knowledge base snapshot, in caller order (decides ties)
            threshold: Minimum confidence (0.0-1.0) for a match

        Returns:
            MatchResult; confidence is always the best score over all entries
        """
        if not entries:
            logger.info("Knowledge base snapshot is empty, no match")
            return MatchResult(
                matched=False,
                confidence=0.0,
                rationale="Knowledge base is empty",
            )

        normalized = normalize_text(question)
        scored = [
            (entry, _clamp(self.scorer.score(normalized, entry))) for entry in entries
        ]
        best_entry, best_score = select_best(scored)

        if best_score <= 0.0 or best_score < threshold:
            logger.info(
                f"No match: best score {best_score:.2f} below threshold {threshold:.2f}"
            )
            return MatchResult(
                matched=False,
                confidence=best_score,
                rationale=(
                    f"Best score {best_score:.2f} from entry {best_entry.id} "
                    f"is below threshold {threshold:.2f}"
                ),
            )

        logger.info(
            f"Matched entry {best_entry.id} (confidence: {best_score:.2f})"
        )
        return MatchResult(
            matched=True,
            entry_id=best_entry.id,
            confidence=best_score,
            rationale=self._explain(normalized, best_entry),
        )

    def _explain(self, normalized_question: str, entry: KnowledgeEntry) -> str:
        explain = getattr(self.scorer, "explain", None)
        if explain is None:
            return f"Entry {entry.id} scored highest"
        return f"Entry {entry.id}: {explain(normalized_question, entry)}"
