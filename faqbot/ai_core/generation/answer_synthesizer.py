"""
Answer Synthesizer Module

Turns a matched knowledge base entry plus the requester context into an
AnswerPayload. Two implementations share one contract:

- RuleBasedSynthesizer: deterministic greeting + stored answer
- LLMAnswerSynthesizer: rewrites the baseline with an LLM (gen_ai_hub proxy)
"""

import logging
from typing import Optional, Protocol

from langchain_core.prompts import ChatPromptTemplate

from faqbot.models.answer import AnswerPayload
from faqbot.models.knowledge import KnowledgeEntry
from faqbot.models.request import RequestContext
from faqbot.ai_core.prompts.answer import ANSWER_SYSTEM_PROMPT, ANSWER_HUMAN_PROMPT
from faqbot.config import Settings, get_settings
from faqbot.errors import ExternalCapabilityError, MissingEntryError

logger = logging.getLogger(__name__)

HOW_DO_I_PREFIX = "how do i "


class AnswerSynthesizer(Protocol):
    async def synthesize(
        self, question: str, entry: KnowledgeEntry, context: RequestContext
    ) -> AnswerPayload: ...


def action_phrase(question_text: str) -> str:
    """
    Derive the action phrase from an entry question.

    Example:
        "How do I set up the development environment?"
        -> "set up the development environment"
    """
    phrase = question_text.casefold().strip()
    if phrase.startswith(HOW_DO_I_PREFIX):
        phrase = phrase[len(HOW_DO_I_PREFIX):]
    return phrase.rstrip("?").strip()


def _require_entry(entry: Optional[KnowledgeEntry]) -> KnowledgeEntry:
    if entry is None:
        raise MissingEntryError("Answer synthesis requires a matched knowledge base entry")
    return entry


class RuleBasedSynthesizer:
    """Deterministic answer composition, also the baseline for the LLM."""

    def compose_text(self, entry: KnowledgeEntry, context: RequestContext) -> str:
        return (
            f"Hi @{context.requester_id}! Here's how to {action_phrase(entry.question_text)}:"
            f"\n\n{entry.answer_text}"
        )

    async def synthesize(
        self, question: str, entry: KnowledgeEntry, context: RequestContext
    ) -> AnswerPayload:
        entry = _require_entry(entry)
        return AnswerPayload(
            original_question=question,
            matched_entry_id=entry.id,
            text=self.compose_text(entry, context),
            context=context,
        )


class LLMAnswerSynthesizer:
    """
    Generates the answer text with an LLM.

    The LLM receives the stored answer and the rule-based baseline. When the
    call fails, the baseline is used if fallback_on_error is set; otherwise an
    ExternalCapabilityError is raised for the caller to retry.
    """

    def __init__(
        self,
        llm=None,
        fallback: Optional[RuleBasedSynthesizer] = None,
        fallback_on_error: bool = True,
        settings: Optional[Settings] = None,
    ):
        """
        Args:
            llm: LangChain chat model. Defaults to the gen_ai_hub ChatOpenAI proxy
            fallback: Baseline synthesizer
            fallback_on_error: Use the baseline text when the LLM fails
            settings: Settings for lazy LLM construction
        """
        self._llm = llm
        self._settings = settings
        self.fallback = fallback or RuleBasedSynthesizer()
        self.fallback_on_error = fallback_on_error
        self.prompt = ChatPromptTemplate.from_messages(
            [
                ("system", ANSWER_SYSTEM_PROMPT),
                ("human", ANSWER_HUMAN_PROMPT),
            ]
        )

    @property
    def llm(self):
        """Lazy initialization of the LLM proxy client."""
        if self._llm is None:
            from gen_ai_hub.proxy.langchain.openai import ChatOpenAI
            from gen_ai_hub.proxy.core.proxy_clients import get_proxy_client

            config = self._settings or get_settings()
            self._llm = ChatOpenAI(
                proxy_model_name=config.openai_model,
                proxy_client=get_proxy_client("gen-ai-hub"),
                temperature=config.temperature,
            )
            logger.info(f"LLM answer synthesizer initialized ({config.openai_model})")
        return self._llm

    async def synthesize(
        self, question: str, entry: KnowledgeEntry, context: RequestContext
    ) -> AnswerPayload:
        entry = _require_entry(entry)
        baseline = self.fallback.compose_text(entry, context)

        try:
            text = await self._generate(question, entry, context, baseline)
        except Exception as e:
            if not self.fallback_on_error:
                raise ExternalCapabilityError("generation", str(e)) from e
            logger.error(
                f"LLM generation failed for entry {entry.id}, using baseline: {e}",
                exc_info=True,
            )
            text = baseline

        return AnswerPayload(
            original_question=question,
            matched_entry_id=entry.id,
            text=text,
            context=context,
        )

    async def _generate(
        self,
        question: str,
        entry: KnowledgeEntry,
        context: RequestContext,
        baseline: str,
    ) -> str:
        chain = self.prompt | self.llm
        response = await chain.ainvoke(
            {
                "requester_id": context.requester_id,
                "source": context.source.value,
                "question": question,
                "entry_question": entry.question_text,
                "entry_answer": entry.answer_text,
                "baseline": baseline,
            }
        )
        text = (getattr(response, "content", response) or "").strip()
        if not text:
            raise ValueError("LLM returned an empty answer")
        return text


def build_synthesizer(settings: Settings) -> AnswerSynthesizer:
    """Pick the synthesizer for the configured capabilities."""
    if settings.llm_enabled:
        return LLMAnswerSynthesizer(
            fallback_on_error=settings.llm_fallback_on_error, settings=settings
        )
    return RuleBasedSynthesizer()
