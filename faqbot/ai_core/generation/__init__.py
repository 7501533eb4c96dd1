from faqbot.ai_core.generation.answer_synthesizer import (
    AnswerSynthesizer,
    LLMAnswerSynthesizer,
    RuleBasedSynthesizer,
    action_phrase,
    build_synthesizer,
)

__all__ = [
    "AnswerSynthesizer",
    "LLMAnswerSynthesizer",
    "RuleBasedSynthesizer",
    "action_phrase",
    "build_synthesizer",
]
