from faqbot.ai_core.matching.faq_matcher import (
    FAQMatcher,
    KeywordScorer,
    Scorer,
    select_best,
)

__all__ = ["FAQMatcher", "KeywordScorer", "Scorer", "select_best"]
