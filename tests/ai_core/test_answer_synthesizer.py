"""
Unit Tests for answer synthesis.

The LLM is replaced with LangChain's fake chat model, so no gen_ai_hub
credentials are needed.
"""

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.runnables import RunnableLambda

from faqbot.ai_core.generation import (
    LLMAnswerSynthesizer,
    RuleBasedSynthesizer,
    action_phrase,
    build_synthesizer,
)
from faqbot.config import Settings
from faqbot.errors import ExternalCapabilityError, MissingEntryError, PreconditionViolation
from faqbot.models.knowledge import KnowledgeEntry
from faqbot.models.request import RequestContext, SourceType


@pytest.fixture
def entry():
    return KnowledgeEntry(
        id="dev-setup",
        question_text="How do I set up the development environment?",
        answer_text="Run `make bootstrap`.",
        keywords=["setup", "environment"],
    )


@pytest.fixture
def context():
    return RequestContext(
        source=SourceType.GITHUB, origin_ref="acme/widgets#42", requester_id="octocat"
    )


def _failing_llm(_):
    raise RuntimeError("LLM unavailable")


def test_action_phrase_strips_how_do_i():
    assert (
        action_phrase("How do I set up the development environment?")
        == "set up the development environment"
    )


def test_action_phrase_keeps_other_questions():
    assert action_phrase("Where are the Docs?") == "where are the docs"


@pytest.mark.asyncio
async def test_rule_based_answer_text(entry, context):
    synthesizer = RuleBasedSynthesizer()

    answer = await synthesizer.synthesize("how to set up?", entry, context)

    assert answer.text == (
        "Hi @octocat! Here's how to set up the development environment:"
        "\n\nRun `make bootstrap`."
    )
    assert answer.matched_entry_id == "dev-setup"
    assert answer.original_question == "how to set up?"
    assert answer.context == context
    assert answer.created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_two_calls_get_distinct_ids_same_text(entry, context):
    synthesizer = RuleBasedSynthesizer()

    first = await synthesizer.synthesize("q", entry, context)
    second = await synthesizer.synthesize("q", entry, context)

    assert first.id != second.id
    assert first.text == second.text
    assert first.matched_entry_id == second.matched_entry_id
    assert second.created_at >= first.created_at


@pytest.mark.asyncio
async def test_missing_entry_is_a_precondition_violation(context):
    with pytest.raises(MissingEntryError):
        await RuleBasedSynthesizer().synthesize("q", None, context)

    with pytest.raises(PreconditionViolation):
        await LLMAnswerSynthesizer(llm=FakeListChatModel(responses=["x"])).synthesize(
            "q", None, context
        )


@pytest.mark.asyncio
async def test_llm_answer_is_used(entry, context):
    llm = FakeListChatModel(responses=["  Hey @octocat, run `make bootstrap`.  "])
    synthesizer = LLMAnswerSynthesizer(llm=llm)

    answer = await synthesizer.synthesize("how do I set up?", entry, context)

    assert answer.text == "Hey @octocat, run `make bootstrap`."
    assert answer.matched_entry_id == "dev-setup"


@pytest.mark.asyncio
async def test_llm_failure_falls_back_to_rule_based_text(entry, context):
    synthesizer = LLMAnswerSynthesizer(llm=RunnableLambda(_failing_llm))

    answer = await synthesizer.synthesize("how do I set up?", entry, context)

    assert answer.text == RuleBasedSynthesizer().compose_text(entry, context)


@pytest.mark.asyncio
async def test_empty_llm_answer_falls_back(entry, context):
    synthesizer = LLMAnswerSynthesizer(llm=FakeListChatModel(responses=["   "]))

    answer = await synthesizer.synthesize("how do I set up?", entry, context)

    assert answer.text.startswith("Hi @octocat!")


@pytest.mark.asyncio
async def test_llm_failure_without_fallback_raises(entry, context):
    synthesizer = LLMAnswerSynthesizer(
        llm=RunnableLambda(_failing_llm), fallback_on_error=False
    )

    with pytest.raises(ExternalCapabilityError) as exc_info:
        await synthesizer.synthesize("how do I set up?", entry, context)

    assert exc_info.value.operation == "generation"


def test_build_synthesizer_picks_by_settings():
    assert isinstance(build_synthesizer(Settings(llm_enabled=False)), RuleBasedSynthesizer)

    llm_synth = build_synthesizer(Settings(llm_enabled=True, llm_fallback_on_error=False))
    assert isinstance(llm_synth, LLMAnswerSynthesizer)
    assert llm_synth.fallback_on_error is False
